"""Integration test fixtures.

Provides a fully wired AppState built by the real ``lifespan``: SQLite cache
in a tmp directory, shared httpx client, registered DeepSeek provider. HTTP
calls to the provider are mocked per test with respx.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from structlog.testing import capture_logs

from jsonldgen.app import lifespan
from jsonldgen.config import Settings
from jsonldgen.pages import InMemoryPageSource

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator
    from pathlib import Path

    from jsonldgen.models.payload import PageMetadata
    from jsonldgen.state import AppState


@pytest.fixture(autouse=True)
def captured_logs(monkeypatch: pytest.MonkeyPatch) -> Generator[list[dict[str, Any]], None, None]:
    """Collect log events in memory instead of configuring stderr output."""
    monkeypatch.setattr("jsonldgen.app.setup_logging", lambda settings: None)
    with capture_logs() as logs:
        yield logs


@pytest.fixture()
def app_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every data path at an isolated tmp directory and configure a key."""
    db_path = tmp_path / "data" / "schema-cache.db"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("JSONLDGEN__CACHE__DB_PATH", str(db_path))
    monkeypatch.setenv("JSONLDGEN__GENERATION__DEEPSEEK_API_KEY", "sk-test")
    monkeypatch.setenv("JSONLDGEN__SITE__NAME", "Acme Security")
    monkeypatch.setenv("JSONLDGEN__SITE__URL", "https://acme.example")
    return db_path


@pytest.fixture()
async def app_state(app_env: Path, page: PageMetadata) -> AsyncGenerator[AppState, None]:
    async with lifespan(Settings(), InMemoryPageSource({"42": page})) as state:
        yield state
