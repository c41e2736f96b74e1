"""Application wiring.

Responsibilities (and nothing more):
- Configure structlog
- Open the shared HTTP client and the cache database
- Register the built-in providers
- Build the orchestrator and hand everything out as an ``AppState``
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog

from jsonldgen import __version__
from jsonldgen.cache import SchemaCache
from jsonldgen.logging_setup import setup_logging
from jsonldgen.orchestrator import Orchestrator
from jsonldgen.providers import DeepSeekProvider
from jsonldgen.reference import StaticSchemaReference
from jsonldgen.registry import ProviderRegistry
from jsonldgen.state import AppState
from jsonldgen.transport import HttpxTransport, build_http_client

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from jsonldgen.config import Settings
    from jsonldgen.protocols import (
        PageSourceProtocol,
        SchemaReferenceProtocol,
        TransportProtocol,
    )

log = structlog.get_logger()


def build_registry(transport: TransportProtocol) -> ProviderRegistry:
    """Registry pre-loaded with every built-in provider."""
    registry = ProviderRegistry()
    registry.register(DeepSeekProvider(transport))
    return registry


@asynccontextmanager
async def lifespan(
    settings: Settings,
    pages: PageSourceProtocol,
    *,
    schema_reference: SchemaReferenceProtocol | None = None,
) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the application's lifetime."""
    setup_logging(settings)
    log.info(
        "app_starting",
        version=__version__,
        provider=settings.generation.provider,
    )

    http_client = build_http_client(settings.http)

    db_path = Path(settings.cache.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = await aiosqlite.connect(str(db_path))
    cache = SchemaCache(db)
    await cache.init_db()

    registry = build_registry(HttpxTransport(http_client))
    orchestrator = Orchestrator(
        pages=pages,
        cache=cache,
        registry=registry,
        schema_reference=schema_reference or StaticSchemaReference(),
        site=settings.site,
    )

    state = AppState(
        settings=settings,
        registry=registry,
        orchestrator=orchestrator,
        cache=cache,
        http_client=http_client,
        db=db,
    )
    log.info("app_started", providers=sorted(registry.options()), db_path=str(db_path))

    try:
        yield state
    finally:
        await http_client.aclose()
        await db.close()
        log.info("app_stopping")
