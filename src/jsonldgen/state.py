"""Application state container.

AppState is created once inside the ``lifespan`` context manager and handed
to every command. It owns the long-lived resources (HTTP client, database
connection) and the wired-up components built on them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import aiosqlite
    import httpx

    from jsonldgen.config import Settings
    from jsonldgen.orchestrator import Orchestrator
    from jsonldgen.protocols import CacheStoreProtocol
    from jsonldgen.registry import ProviderRegistry


@dataclass
class AppState:
    """Holds all shared runtime state."""

    settings: Settings
    registry: ProviderRegistry
    orchestrator: Orchestrator
    cache: CacheStoreProtocol
    http_client: httpx.AsyncClient | None = None
    db: aiosqlite.Connection | None = None
