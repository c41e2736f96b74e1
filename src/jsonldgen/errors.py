from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    CONFIGURATION_ERROR = "configuration_error"
    MISSING_KEY = "missing_key"
    RATE_LIMITED = "rate_limited"
    TRANSPORT_ERROR = "transport_error"
    PARSE_ERROR = "parse_error"
    EMPTY_RESPONSE = "empty_response"
    VALIDATION_ERROR = "validation_error"


class ProviderError(Exception):
    """Raised inside a provider for every expected failure condition.

    Caught at the provider boundary (``generate_schema``) and converted into
    a failed ``GenerationResult``. Never let it escape a provider: callers of
    the generation pipeline only ever see returned values.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 0,
        headers: dict[str, str] | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.headers = headers or {}
        self.retry_after = retry_after
