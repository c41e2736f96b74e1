"""Provider-side rate-limit bookkeeping.

One ``RateLimiter`` per provider instance. The window is armed from the
``Retry-After`` header of a 429 response and can only ever be extended:
a shorter value arriving while a longer block is active is ignored.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from email.utils import parsedate_to_datetime

import structlog

log = structlog.get_logger()

DEFAULT_RETRY_AFTER_SECONDS = 60

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_retry_after(value: str | None, now: datetime) -> int:
    """Parse a ``Retry-After`` header value into whole seconds.

    Accepts delta-seconds or an HTTP-date. Missing or unparseable values
    fall back to ``DEFAULT_RETRY_AFTER_SECONDS``; dates in the past give 0.
    """
    if value is None or not value.strip():
        return DEFAULT_RETRY_AFTER_SECONDS
    value = value.strip()

    if value.isdigit():
        return int(value)

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER_SECONDS
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0, math.ceil((when - now).total_seconds()))


class RateLimiter:
    """Holds ``blocked_until`` for one provider."""

    def __init__(self, name: str, clock: Clock = utc_now) -> None:
        self.name = name
        self.blocked_until: datetime | None = None
        self._clock = clock

    def is_limited(self) -> bool:
        return self.blocked_until is not None and self._clock() < self.blocked_until

    def remaining(self) -> int:
        """Seconds until the window closes, 0 when not limited."""
        until = self.blocked_until
        now = self._clock()
        if until is None or now >= until:
            return 0
        return max(1, math.ceil((until - now).total_seconds()))

    def block(self, seconds: int) -> None:
        until = self._clock() + timedelta(seconds=max(0, seconds))
        if self.blocked_until is not None and until <= self.blocked_until:
            return
        self.blocked_until = until
        log.warning("provider_rate_limited", provider=self.name, retry_after=seconds)

    def block_from_headers(self, headers: dict[str, str]) -> int:
        """Arm the window from a 429 response's headers. Returns the parsed delay."""
        lowered = {key.lower(): value for key, value in headers.items()}
        seconds = parse_retry_after(lowered.get("retry-after"), self._clock())
        self.block(seconds)
        return seconds

    def clear(self) -> None:
        self.blocked_until = None
