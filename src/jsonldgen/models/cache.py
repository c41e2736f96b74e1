from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CacheEntry:
    """The single cached generation result for one entity."""

    entity_id: str
    fingerprint: str  # SHA-256 over the content-defining inputs
    schema: str  # JSON-LD document, verbatim from the provider
    generated_at: datetime
    settings_version: str


@dataclass(frozen=True)
class CacheStatus:
    has_schema: bool
    is_current: bool
    generated_at: datetime | None = None
    fingerprint: str = ""
