"""Shared test fixtures for the jsonldgen test suite."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import aiosqlite
import pytest
import respx

from jsonldgen.cache import SchemaCache
from jsonldgen.config import GenerationSettings
from jsonldgen.models.payload import PageData, PageMetadata, SiteInfo
from jsonldgen.models.provider import (
    ConnectionResult,
    GenerationResult,
    ModelConfig,
    SettingsField,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Iterator

    from jsonldgen.models.payload import PromptPayload


@pytest.fixture(autouse=True)
def _isolate_respx_global_router() -> Iterator[None]:
    """Roll back routes added to respx's global router so they don't leak between tests."""
    respx.mock.snapshot()
    yield
    respx.mock.rollback()


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class StubProvider:
    """In-memory SchemaProvider that counts calls and records payloads."""

    def __init__(
        self,
        slug: str = "deepseek",
        name: str = "Stub",
        *,
        results: list[GenerationResult] | None = None,
        max_content_chars: int = 50000,
    ) -> None:
        self.slug = slug
        self.name = name
        self.calls = 0
        self.payloads: list[PromptPayload] = []
        self._results = list(results or [])
        self.model_config = ModelConfig(
            name="stub-model",
            context_window=65536,
            max_output=8000,
            max_content_chars=max_content_chars,
        )

    def queue(self, result: GenerationResult) -> None:
        self._results.append(result)

    async def generate_schema(
        self, payload: PromptPayload, settings: GenerationSettings
    ) -> GenerationResult:
        self.calls += 1
        self.payloads.append(payload)
        if self._results:
            return self._results.pop(0)
        schema = {"@context": "https://schema.org", "@type": "WebPage", "name": f"call-{self.calls}"}
        return GenerationResult(success=True, schema=json.dumps(schema), status_code=200)

    async def test_connection(self, settings: GenerationSettings) -> ConnectionResult:
        return ConnectionResult(success=True, message="ok")

    def get_settings_fields(self) -> list[SettingsField]:
        return [SettingsField(key=f"{self.slug}_api_key", label="Key", type="password")]

    def get_name(self) -> str:
        return self.name

    def get_slug(self) -> str:
        return self.slug

    def get_model_config(self, settings: GenerationSettings) -> ModelConfig:
        return self.model_config


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings() -> GenerationSettings:
    """Generation settings with a DeepSeek key configured."""
    return GenerationSettings(deepseek_api_key="sk-test")


@pytest.fixture()
def site() -> SiteInfo:
    return SiteInfo(name="Acme Security", url="https://acme.example", description="Audits")


@pytest.fixture()
def page() -> PageMetadata:
    return PageMetadata(
        title="Our Services",
        url="https://acme.example/services/",
        excerpt="What we do",
        modified_at="2026-01-01T10:00:00+00:00",
    )


@pytest.fixture()
def page_data() -> PageData:
    return PageData(title="Our Services", url="https://acme.example/services/")


@pytest.fixture()
async def schema_cache() -> AsyncGenerator[SchemaCache, None]:
    async with aiosqlite.connect(":memory:") as db:
        cache = SchemaCache(db)
        await cache.init_db()
        yield cache


@pytest.fixture()
def stub_provider() -> StubProvider:
    return StubProvider()
