"""Default outbound HTTP transport backed by a shared httpx client.

The transport receives an ``httpx.AsyncClient`` via constructor injection;
the application lifespan owns the client lifecycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from jsonldgen.models.provider import TransportResponse

if TYPE_CHECKING:
    from jsonldgen.config import HttpSettings

log = structlog.get_logger()


def build_http_client(http_settings: HttpSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(30.0),
        headers={"User-Agent": http_settings.user_agent},
        limits=httpx.Limits(
            max_connections=http_settings.max_connections,
            max_keepalive_connections=http_settings.max_keepalive_connections,
        ),
    )


class HttpxTransport:
    """``TransportProtocol`` implementation that POSTs JSON bodies.

    Never raises: timeouts and network errors come back as a failed
    ``TransportResponse`` with ``status_code=0``; non-2xx responses carry
    their status, body and (lower-cased) headers.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def request(
        self,
        url: str,
        headers: dict[str, str],
        json_body: dict[str, Any],
        timeout: float,
    ) -> TransportResponse:
        try:
            response = await self._client.post(
                url,
                headers=headers,
                json=json_body,
                timeout=httpx.Timeout(timeout),
            )
        except httpx.TimeoutException:
            log.warning("transport_timeout", url=url, timeout=timeout)
            return TransportResponse(success=False, error=f"Request timed out after {timeout:g}s")
        except httpx.HTTPError as exc:
            log.warning("transport_error", url=url, error=str(exc))
            return TransportResponse(success=False, error=f"Network error: {exc}")

        response_headers = {key.lower(): value for key, value in response.headers.items()}
        if not response.is_success:
            log.warning("transport_http_error", url=url, status_code=response.status_code)
            return TransportResponse(
                success=False,
                body=response.text,
                status_code=response.status_code,
                headers=response_headers,
                error=f"HTTP {response.status_code}",
            )

        return TransportResponse(
            success=True,
            body=response.text,
            status_code=response.status_code,
            headers=response_headers,
        )
