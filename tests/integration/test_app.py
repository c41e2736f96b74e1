"""Integration tests for the wired generation pipeline.

Runs the real orchestrator, provider, transport and SQLite cache; only the
DeepSeek endpoint is mocked.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import respx

from jsonldgen.errors import ErrorCode
from jsonldgen.providers.deepseek import API_ENDPOINT

if TYPE_CHECKING:
    from pathlib import Path

    from jsonldgen.state import AppState

HTML = "<h2>Our Services</h2><ul><li>Web Development</li><li>Security Audits</li></ul>"
SCHEMA = json.dumps(
    {
        "@context": "https://schema.org",
        "@graph": [{"@type": "Service", "name": "Web Development"}],
    }
)


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class TestWiring:
    async def test_database_created(self, app_state: AppState, app_env: Path) -> None:
        assert app_env.exists()

    async def test_deepseek_registered(self, app_state: AppState) -> None:
        assert app_state.registry.options() == {"deepseek": "DeepSeek"}
        assert app_state.registry.get_active(app_state.settings.generation) is not None


class TestGeneration:
    async def test_generate_then_cache_hit(
        self, app_state: AppState, captured_logs: list[dict[str, Any]]
    ) -> None:
        settings = app_state.settings.generation
        with respx.mock:
            route = respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(200, json=_completion(SCHEMA))
            )
            first = await app_state.orchestrator.generate("42", HTML, settings)
            second = await app_state.orchestrator.generate("42", HTML, settings)

        assert first.success is True
        assert first.cached is False
        assert json.loads(first.schema) == json.loads(SCHEMA)
        assert second.cached is True
        assert second.schema == first.schema
        assert route.call_count == 1
        events = [entry["event"] for entry in captured_logs]
        assert events.count("schema_generated") == 1
        assert "schema_cache_hit" in events

        body = json.loads(route.calls.last.request.content)
        system, user = (message["content"] for message in body["messages"])
        assert "=== SCHEMA.ORG PROPERTY REFERENCE ===" in system
        assert "## [Our Services] ##" in user
        assert "[LIST START]" in user
        assert '"name": "Acme Security"' in user

    async def test_edited_page_regenerates(self, app_state: AppState) -> None:
        settings = app_state.settings.generation
        with respx.mock:
            route = respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(200, json=_completion(SCHEMA))
            )
            await app_state.orchestrator.generate("42", HTML, settings)
            await app_state.orchestrator.generate("42", HTML, settings)
            edited = await app_state.orchestrator.generate(
                "42", HTML + "<p>Now with audits.</p>", settings
            )

        assert edited.cached is False
        assert route.call_count == 2

    async def test_rate_limit_not_cached(self, app_state: AppState) -> None:
        settings = app_state.settings.generation
        with respx.mock:
            route = respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(429, headers={"Retry-After": "120"})
            )
            first = await app_state.orchestrator.generate("42", HTML, settings)
            second = await app_state.orchestrator.generate("42", HTML, settings)

        assert first.status_code == 429
        assert first.retry_after == 120
        assert second.error_code == ErrorCode.RATE_LIMITED
        assert route.call_count == 1

        status = await app_state.orchestrator.cache_status("42", HTML, settings)
        assert status.has_schema is False

    async def test_status_and_invalidate(self, app_state: AppState) -> None:
        settings = app_state.settings.generation
        with respx.mock:
            respx.post(API_ENDPOINT).mock(return_value=httpx.Response(200, json=_completion(SCHEMA)))
            await app_state.orchestrator.generate("42", HTML, settings)

        status = await app_state.orchestrator.cache_status("42", HTML, settings)
        assert status.has_schema is True
        assert status.is_current is True

        await app_state.orchestrator.invalidate("42")
        status = await app_state.orchestrator.cache_status("42", HTML, settings)
        assert status.has_schema is False
