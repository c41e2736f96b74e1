"""Plumbing shared by concrete providers.

``ProviderSupport`` is composed into each provider rather than inherited:
it owns the transport handle and the provider's ``RateLimiter`` and knows how
to turn a transport failure into a ``ProviderError``. Everything
provider-specific (endpoint, request body, response shape) stays in the
provider class.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from jsonldgen.errors import ErrorCode, ProviderError
from jsonldgen.ratelimit import RateLimiter, utc_now

if TYPE_CHECKING:
    from jsonldgen.config import GenerationSettings
    from jsonldgen.models.provider import TransportResponse
    from jsonldgen.protocols import TransportProtocol
    from jsonldgen.ratelimit import Clock

log = structlog.get_logger()

# Fallback messages when the error body carries nothing readable
_STATUS_MESSAGES = {
    400: "Bad request - check your settings",
    401: "Invalid API key",
    403: "Access forbidden - check API key permissions",
    404: "API endpoint not found",
    429: "Rate limit exceeded - please wait before retrying",
    500: "Provider server error - try again later",
    502: "Provider service unavailable",
    503: "Provider service temporarily unavailable",
}


def extract_error_message(body: str | None, status_code: int) -> str:
    """Pull a human-readable message out of a provider error body."""
    if body:
        try:
            data = json.loads(body)
        except ValueError:
            data = None
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
            if isinstance(error, str) and error:
                return error
            if isinstance(data.get("message"), str):
                return data["message"]
    if status_code == 0:
        return "Network error - could not reach the provider"
    return _STATUS_MESSAGES.get(status_code, f"API request failed with status {status_code}")


class ProviderSupport:
    """Transport access, key lookup and rate-limit bookkeeping for one provider."""

    def __init__(
        self,
        slug: str,
        transport: TransportProtocol,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self.slug = slug
        self.transport = transport
        self.rate_limiter = RateLimiter(slug, clock=clock)

    def api_key(self, settings: GenerationSettings) -> str:
        """Return the configured key or raise ``missing_key``."""
        key = settings.value(f"{self.slug}_api_key")
        if not isinstance(key, str) or not key.strip():
            raise ProviderError(
                ErrorCode.MISSING_KEY,
                f"API key not configured for provider '{self.slug}'",
            )
        return key.strip()

    def ensure_not_limited(self) -> None:
        if self.rate_limiter.is_limited():
            retry_after = self.rate_limiter.remaining()
            raise ProviderError(
                ErrorCode.RATE_LIMITED,
                f"Rate limited. Please wait {retry_after} seconds.",
                status_code=429,
                retry_after=retry_after,
            )

    async def post_json(
        self,
        url: str,
        api_key: str,
        body: dict[str, Any],
        timeout: float,
    ) -> dict[str, Any]:
        """Make exactly one request and return the decoded JSON body.

        Raises ``ProviderError`` for transport failures (arming the rate
        limiter on 429) and for bodies that are not a JSON object.
        """
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        response = await self.transport.request(url, headers, body, timeout)
        if not response.success:
            raise self._transport_failure(response)

        try:
            data = json.loads(response.body or "")
        except ValueError as exc:
            raise ProviderError(
                ErrorCode.PARSE_ERROR,
                f"Failed to parse API response: {exc}",
                status_code=response.status_code,
                headers=response.headers,
            ) from exc
        if not isinstance(data, dict):
            raise ProviderError(
                ErrorCode.PARSE_ERROR,
                "Failed to parse API response: expected a JSON object",
                status_code=response.status_code,
                headers=response.headers,
            )
        return data

    def _transport_failure(self, response: TransportResponse) -> ProviderError:
        message = extract_error_message(response.body, response.status_code)
        if response.status_code == 0 and response.error:
            message = response.error

        retry_after: int | None = None
        if response.status_code == 429:
            retry_after = self.rate_limiter.block_from_headers(response.headers)

        log.warning(
            "provider_request_failed",
            provider=self.slug,
            status_code=response.status_code,
            error=message,
        )
        return ProviderError(
            ErrorCode.TRANSPORT_ERROR,
            message,
            status_code=response.status_code,
            headers=response.headers,
            retry_after=retry_after,
        )
