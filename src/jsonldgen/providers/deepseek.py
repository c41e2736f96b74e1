"""DeepSeek chat-completions provider."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from jsonldgen.errors import ErrorCode, ProviderError
from jsonldgen.models.provider import (
    ConnectionResult,
    GenerationResult,
    ModelConfig,
    SettingsField,
)
from jsonldgen.prompts import build_messages
from jsonldgen.providers.base import ProviderSupport
from jsonldgen.ratelimit import utc_now
from jsonldgen.tokens import safe_max_tokens

if TYPE_CHECKING:
    from jsonldgen.config import GenerationSettings
    from jsonldgen.models.payload import PromptPayload
    from jsonldgen.protocols import TransportProtocol
    from jsonldgen.ratelimit import Clock, RateLimiter

log = structlog.get_logger()

API_ENDPOINT = "https://api.deepseek.com/v1/chat/completions"
DEFAULT_MODEL = "deepseek-chat"

GENERATE_TIMEOUT_SECONDS = 120.0
TEST_TIMEOUT_SECONDS = 30.0

MODELS: dict[str, ModelConfig] = {
    "deepseek-chat": ModelConfig(
        name="DeepSeek Chat",
        context_window=65536,
        max_output=8000,
        max_content_chars=50000,
    ),
}


class DeepSeekProvider:
    """``SchemaProvider`` for the DeepSeek API."""

    slug = "deepseek"
    name = "DeepSeek"

    def __init__(self, transport: TransportProtocol, *, clock: Clock = utc_now) -> None:
        self._support = ProviderSupport(self.slug, transport, clock=clock)

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._support.rate_limiter

    def get_name(self) -> str:
        return self.name

    def get_slug(self) -> str:
        return self.slug

    def get_settings_fields(self) -> list[SettingsField]:
        return [
            SettingsField(
                key="deepseek_api_key",
                label="DeepSeek API Key",
                type="password",
                description="Your DeepSeek API key from platform.deepseek.com",
                required=True,
            ),
            SettingsField(
                key="deepseek_model",
                label="Model",
                type="text",
                description="Model id to use for generation",
                default=DEFAULT_MODEL,
            ),
        ]

    def _model_id(self, settings: GenerationSettings) -> str:
        model = settings.provider_model(self.slug)
        return model if model in MODELS else DEFAULT_MODEL

    def get_model_config(self, settings: GenerationSettings) -> ModelConfig:
        return MODELS[self._model_id(settings)]

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_schema(
        self, payload: PromptPayload, settings: GenerationSettings
    ) -> GenerationResult:
        """Make one chat-completions call and return the JSON-LD text.

        Never raises: every expected failure comes back as a failed
        ``GenerationResult`` tagged with its ``ErrorCode``.
        """
        try:
            return await self._generate(payload, settings)
        except ProviderError as exc:
            log.warning(
                "schema_generation_failed",
                provider=self.slug,
                code=exc.code,
                status_code=exc.status_code,
                message=exc.message,
            )
            return GenerationResult.from_error(exc)

    async def _generate(
        self, payload: PromptPayload, settings: GenerationSettings
    ) -> GenerationResult:
        self._support.ensure_not_limited()
        api_key = self._support.api_key(settings)

        model_id = self._model_id(settings)
        model_config = MODELS[model_id]
        messages = build_messages(payload)
        requested = settings.max_tokens or model_config.max_output
        max_tokens = safe_max_tokens(messages, requested, model_config)

        body: dict[str, Any] = {
            "model": model_id,
            "messages": [message.model_dump() for message in messages],
            "temperature": settings.temperature,
            "max_tokens": max_tokens,
        }
        log.info(
            "schema_generation_request",
            provider=self.slug,
            model=model_id,
            max_tokens=max_tokens,
            mode=payload.mode,
        )
        data = await self._support.post_json(
            API_ENDPOINT, api_key, body, GENERATE_TIMEOUT_SECONDS
        )
        content = _first_choice_content(data)
        if not content:
            raise ProviderError(
                ErrorCode.EMPTY_RESPONSE,
                "Empty response from API",
                status_code=200,
            )
        return GenerationResult(success=True, schema=content, status_code=200)

    async def test_connection(self, settings: GenerationSettings) -> ConnectionResult:
        """Send a 10-token round trip to verify the key and endpoint."""
        try:
            self._support.ensure_not_limited()
            api_key = self._support.api_key(settings)
            body = {
                "model": self._model_id(settings),
                "messages": [{"role": "user", "content": 'Say "OK" and nothing else.'}],
                "max_tokens": 10,
                "temperature": 0,
            }
            data = await self._support.post_json(
                API_ENDPOINT, api_key, body, TEST_TIMEOUT_SECONDS
            )
            content = _first_choice_content(data)
        except ProviderError as exc:
            return ConnectionResult(success=False, error=exc.message)

        if content is None:
            return ConnectionResult(success=False, error="Unexpected response format from API")
        return ConnectionResult(
            success=True, message="Connection successful! DeepSeek API is working."
        )


def _first_choice_content(data: dict[str, Any]) -> str | None:
    """Return ``choices[0].message.content``; raise ``parse_error`` if the shape is wrong."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProviderError(
            ErrorCode.PARSE_ERROR,
            "Unexpected response format from API",
            status_code=200,
        ) from exc
    if content is None:
        return None
    if not isinstance(content, str):
        raise ProviderError(
            ErrorCode.PARSE_ERROR,
            "Unexpected response format from API",
            status_code=200,
        )
    return content.strip()
