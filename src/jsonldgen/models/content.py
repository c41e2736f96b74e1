from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class SegmentKind(StrEnum):
    HEADING = "heading"
    LIST_START = "list_start"
    LIST_ITEM = "list_item"
    LIST_END = "list_end"
    NUMBERED_START = "numbered_start"
    NUMBERED_ITEM = "numbered_item"
    NUMBERED_END = "numbered_end"
    SECTION_START = "section_start"
    SECTION_END = "section_end"
    ARTICLE_START = "article_start"
    ARTICLE_END = "article_end"
    PARAGRAPH = "paragraph"
    EMPHASIS = "emphasis"
    TESTIMONIAL = "testimonial"
    QUOTE = "quote"
    FAQ_ITEM = "faq_item"


_MARKERS: dict[SegmentKind, str] = {
    SegmentKind.LIST_START: "[LIST START]",
    SegmentKind.LIST_END: "[LIST END]",
    SegmentKind.NUMBERED_START: "[NUMBERED LIST START]",
    SegmentKind.NUMBERED_END: "[NUMBERED LIST END]",
    SegmentKind.SECTION_START: "[SECTION]",
    SegmentKind.SECTION_END: "[/SECTION]",
    SegmentKind.ARTICLE_START: "[ARTICLE]",
    SegmentKind.ARTICLE_END: "[/ARTICLE]",
}

# Labelled blocks: start marker, one "Label: value" line per field, end marker
_BLOCKS: dict[SegmentKind, tuple[str, str]] = {
    SegmentKind.TESTIMONIAL: ("[TESTIMONIAL START]", "[TESTIMONIAL END]"),
    SegmentKind.QUOTE: ("[QUOTE START]", "[QUOTE END]"),
    SegmentKind.FAQ_ITEM: ("[FAQ ITEM START]", "[FAQ ITEM END]"),
}


@dataclass(frozen=True)
class Segment:
    """One block of structured page content."""

    kind: SegmentKind
    text: str = ""
    fields: tuple[tuple[str, str], ...] = ()

    def render(self) -> str:
        if self.kind in _MARKERS:
            return _MARKERS[self.kind]
        if self.kind in _BLOCKS:
            start, end = _BLOCKS[self.kind]
            lines = [f"{label}: {value}" for label, value in self.fields]
            return "\n".join([start, *lines, end])
        if self.kind == SegmentKind.HEADING:
            return f"## [{self.text}] ##"
        if self.kind in (SegmentKind.LIST_ITEM, SegmentKind.NUMBERED_ITEM):
            return f"- {self.text}"
        return self.text


@dataclass(frozen=True)
class StructuredContent:
    """Structure-preserving plain text derived from page HTML.

    ``content`` is the (possibly truncated) rendering sent to the model.
    ``segments`` lists the blocks whose rendering is fully retained in
    ``content``; a block cut by truncation is not listed.
    """

    segments: tuple[Segment, ...] = ()
    content: str = ""
    truncated: bool = False
    original_length: int = 0

    def __len__(self) -> int:
        return len(self.content)
