from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TYPE_HINTS: tuple[str, ...] = (
    "auto",
    "Article",
    "WebPage",
    "Service",
    "LocalBusiness",
    "FAQPage",
    "Product",
    "Organization",
    "Person",
    "Event",
    "HowTo",
)


def validate_type_hint(type_hint: object) -> str:
    """Return ``type_hint`` if it is a supported preferred type, else ``"auto"``."""
    if isinstance(type_hint, str) and type_hint in TYPE_HINTS:
        return type_hint
    return "auto"


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user"]
    content: str


class SiteInfo(BaseModel):
    name: str = ""
    url: str = ""
    description: str = ""


class FeaturedImage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    alt: str | None = None
    width: int | None = None
    height: int | None = None


class PageMetadata(BaseModel):
    """Host-supplied facts about a page, independent of its body HTML."""

    title: str
    url: str = ""
    page_type: str = "page"
    excerpt: str = ""
    author: str | None = None
    date_published: str | None = None
    modified_at: str = ""  # ISO-8601; part of the cache fingerprint
    featured_image: FeaturedImage | None = None
    categories: list[str] = []
    tags: list[str] = []
    type_hint: str = "auto"

    @field_validator("type_hint", mode="before")
    @classmethod
    def coerce_type_hint(cls, v: object) -> str:
        return validate_type_hint(v)


class PageData(BaseModel):
    """The ``PAGE DATA`` block of the user message (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    url: str = ""
    page_type: str = "page"
    content: str | None = None
    content_truncated: bool | None = None
    original_length: int | None = None
    excerpt: str | None = None
    author: str | None = None
    date_published: str | None = None
    date_modified: str | None = None
    featured_image: FeaturedImage | None = None
    categories: list[str] | None = None
    tags: list[str] | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class _PayloadBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    page: PageData
    site: SiteInfo = SiteInfo()
    business: dict[str, Any] | None = None
    type_hint: str = "auto"

    @field_validator("type_hint", mode="before")
    @classmethod
    def coerce_type_hint(cls, v: object) -> str:
        return validate_type_hint(v)


class DirectPayload(_PayloadBase):
    """Full structured page content plus a schema.org reference catalogue."""

    mode: Literal["direct"] = "direct"
    schema_reference: str = ""


class AnalyzedPayload(_PayloadBase):
    """Pre-classified content from an upstream analyzer; no catalogue."""

    mode: Literal["analyzed"] = "analyzed"
    analyzed_content: dict[str, Any]


PromptPayload = Annotated[DirectPayload | AnalyzedPayload, Field(discriminator="mode")]
