from __future__ import annotations

from jsonldgen.models.cache import CacheEntry, CacheStatus
from jsonldgen.models.content import Segment, SegmentKind, StructuredContent
from jsonldgen.models.payload import (
    TYPE_HINTS,
    AnalyzedPayload,
    DirectPayload,
    FeaturedImage,
    Message,
    PageData,
    PageMetadata,
    PromptPayload,
    SiteInfo,
    validate_type_hint,
)
from jsonldgen.models.provider import (
    ConnectionResult,
    GenerationResult,
    ModelConfig,
    SettingsField,
    TransportResponse,
)

__all__ = [
    # cache
    "CacheEntry",
    "CacheStatus",
    # content
    "Segment",
    "SegmentKind",
    "StructuredContent",
    # payload
    "TYPE_HINTS",
    "AnalyzedPayload",
    "DirectPayload",
    "FeaturedImage",
    "Message",
    "PageData",
    "PageMetadata",
    "PromptPayload",
    "SiteInfo",
    "validate_type_hint",
    # provider
    "ConnectionResult",
    "GenerationResult",
    "ModelConfig",
    "SettingsField",
    "TransportResponse",
]
