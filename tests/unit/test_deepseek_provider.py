"""Unit tests for jsonldgen.providers.deepseek."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import respx

from jsonldgen.config import GenerationSettings
from jsonldgen.errors import ErrorCode
from jsonldgen.models.payload import DirectPayload
from jsonldgen.providers.deepseek import API_ENDPOINT, DEFAULT_MODEL, MODELS, DeepSeekProvider
from jsonldgen.transport import HttpxTransport

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from conftest import FakeClock

    from jsonldgen.models.payload import PageData

SCHEMA = '{"@context": "https://schema.org", "@type": "WebPage"}'


def _completion(content: Any) -> dict[str, Any]:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


@pytest.fixture()
async def provider(clock: FakeClock) -> AsyncGenerator[DeepSeekProvider, None]:
    async with httpx.AsyncClient() as client:
        yield DeepSeekProvider(HttpxTransport(client), clock=clock)


@pytest.fixture()
def payload(page_data: PageData) -> DirectPayload:
    return DirectPayload(page=page_data, schema_reference="REF")


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class TestMetadata:
    def test_identity(self, provider: DeepSeekProvider) -> None:
        assert provider.get_slug() == "deepseek"
        assert provider.get_name() == "DeepSeek"

    def test_settings_fields(self, provider: DeepSeekProvider) -> None:
        fields = {field.key: field for field in provider.get_settings_fields()}
        assert fields["deepseek_api_key"].type == "password"
        assert fields["deepseek_api_key"].required is True
        assert fields["deepseek_model"].default == DEFAULT_MODEL

    def test_unknown_model_falls_back(self, provider: DeepSeekProvider) -> None:
        settings = GenerationSettings(deepseek_model="deepseek-nonexistent")
        assert provider.get_model_config(settings) == MODELS[DEFAULT_MODEL]

    def test_model_limits(self, provider: DeepSeekProvider) -> None:
        config = provider.get_model_config(GenerationSettings())
        assert config.context_window == 65536
        assert config.max_output == 8000
        assert config.max_content_chars == 50000


# ---------------------------------------------------------------------------
# generate_schema
# ---------------------------------------------------------------------------


class TestGenerateSchema:
    async def test_success(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
    ) -> None:
        with respx.mock:
            route = respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(200, json=_completion(f"  {SCHEMA}\n"))
            )
            result = await provider.generate_schema(payload, settings)

        assert result.success is True
        assert result.schema == SCHEMA
        assert result.status_code == 200
        assert route.call_count == 1

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == DEFAULT_MODEL
        assert [message["role"] for message in body["messages"]] == ["system", "user"]
        assert body["temperature"] == 0.2
        assert 1000 <= body["max_tokens"] <= 8000

    async def test_configured_max_tokens_and_temperature(
        self, provider: DeepSeekProvider, payload: DirectPayload
    ) -> None:
        settings = GenerationSettings(deepseek_api_key="k", max_tokens=1500, temperature=0.5)
        with respx.mock:
            route = respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(200, json=_completion(SCHEMA))
            )
            await provider.generate_schema(payload, settings)

        body = json.loads(route.calls.last.request.content)
        assert body["max_tokens"] == 1500
        assert body["temperature"] == 0.5

    async def test_unknown_model_requests_default(
        self, provider: DeepSeekProvider, payload: DirectPayload
    ) -> None:
        settings = GenerationSettings(deepseek_api_key="k", deepseek_model="bogus")
        with respx.mock:
            route = respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(200, json=_completion(SCHEMA))
            )
            await provider.generate_schema(payload, settings)

        assert json.loads(route.calls.last.request.content)["model"] == DEFAULT_MODEL

    async def test_missing_key_makes_no_request(
        self, provider: DeepSeekProvider, payload: DirectPayload
    ) -> None:
        with respx.mock(assert_all_called=False):
            route = respx.post(API_ENDPOINT).mock(return_value=httpx.Response(200))
            result = await provider.generate_schema(payload, GenerationSettings())

        assert result.success is False
        assert result.status_code == 0
        assert result.error_code == ErrorCode.MISSING_KEY
        assert route.call_count == 0

    async def test_blank_key_is_missing(
        self, provider: DeepSeekProvider, payload: DirectPayload
    ) -> None:
        result = await provider.generate_schema(
            payload, GenerationSettings(deepseek_api_key="   ")
        )
        assert result.error_code == ErrorCode.MISSING_KEY

    async def test_rate_limit_blocks_follow_up_calls(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
        clock: FakeClock,
    ) -> None:
        with respx.mock:
            route = respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(
                    429,
                    json={"error": {"message": "Rate limit reached"}},
                    headers={"Retry-After": "60"},
                )
            )
            first = await provider.generate_schema(payload, settings)

            assert first.success is False
            assert first.status_code == 429
            assert first.error_code == ErrorCode.TRANSPORT_ERROR
            assert first.retry_after == 60
            assert first.headers["retry-after"] == "60"
            assert first.error == "Rate limit reached"
            assert provider.rate_limiter.is_limited() is True

            clock.advance(30)
            second = await provider.generate_schema(payload, settings)
            assert second.success is False
            assert second.status_code == 429
            assert second.error_code == ErrorCode.RATE_LIMITED
            assert second.retry_after == 30
            assert route.call_count == 1

            clock.advance(31)
            await provider.generate_schema(payload, settings)
            assert route.call_count == 2

    async def test_rate_limit_without_retry_after_defaults(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
    ) -> None:
        with respx.mock:
            respx.post(API_ENDPOINT).mock(return_value=httpx.Response(429))
            result = await provider.generate_schema(payload, settings)

        assert result.retry_after == 60
        assert provider.rate_limiter.remaining() == 60

    async def test_auth_error(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
    ) -> None:
        with respx.mock:
            respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(401, json={"error": {"message": "Authentication Fails"}})
            )
            result = await provider.generate_schema(payload, settings)

        assert result.success is False
        assert result.status_code == 401
        assert result.error == "Authentication Fails"
        assert result.error_code == ErrorCode.TRANSPORT_ERROR
        assert provider.rate_limiter.is_limited() is False

    async def test_server_error_without_body_uses_status_message(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
    ) -> None:
        with respx.mock:
            respx.post(API_ENDPOINT).mock(return_value=httpx.Response(503))
            result = await provider.generate_schema(payload, settings)

        assert result.status_code == 503
        assert result.error == "Provider service temporarily unavailable"

    async def test_network_error(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
    ) -> None:
        with respx.mock:
            respx.post(API_ENDPOINT).mock(side_effect=httpx.ConnectError("refused"))
            result = await provider.generate_schema(payload, settings)

        assert result.success is False
        assert result.status_code == 0
        assert result.error_code == ErrorCode.TRANSPORT_ERROR

    async def test_unparseable_body(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
    ) -> None:
        with respx.mock:
            respx.post(API_ENDPOINT).mock(return_value=httpx.Response(200, text="<html>oops"))
            result = await provider.generate_schema(payload, settings)

        assert result.success is False
        assert result.status_code == 200
        assert result.error_code == ErrorCode.PARSE_ERROR

    async def test_unexpected_shape(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
    ) -> None:
        with respx.mock:
            respx.post(API_ENDPOINT).mock(return_value=httpx.Response(200, json={"choices": []}))
            result = await provider.generate_schema(payload, settings)

        assert result.error_code == ErrorCode.PARSE_ERROR

    @pytest.mark.parametrize("content", ["", "   ", None])
    async def test_empty_content(
        self,
        provider: DeepSeekProvider,
        payload: DirectPayload,
        settings: GenerationSettings,
        content: str | None,
    ) -> None:
        with respx.mock:
            respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(200, json=_completion(content))
            )
            result = await provider.generate_schema(payload, settings)

        assert result.success is False
        assert result.error_code == ErrorCode.EMPTY_RESPONSE


# ---------------------------------------------------------------------------
# test_connection
# ---------------------------------------------------------------------------


class TestConnection:
    async def test_success(self, provider: DeepSeekProvider, settings: GenerationSettings) -> None:
        with respx.mock:
            route = respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(200, json=_completion("OK"))
            )
            result = await provider.test_connection(settings)

        assert result.success is True
        body = json.loads(route.calls.last.request.content)
        assert body["max_tokens"] == 10
        assert body["temperature"] == 0
        assert len(body["messages"]) == 1

    async def test_failure(self, provider: DeepSeekProvider, settings: GenerationSettings) -> None:
        with respx.mock:
            respx.post(API_ENDPOINT).mock(
                return_value=httpx.Response(401, json={"error": {"message": "Invalid key"}})
            )
            result = await provider.test_connection(settings)

        assert result.success is False
        assert result.error == "Invalid key"

    async def test_missing_key(self, provider: DeepSeekProvider) -> None:
        result = await provider.test_connection(GenerationSettings())
        assert result.success is False
        assert "API key" in result.error
