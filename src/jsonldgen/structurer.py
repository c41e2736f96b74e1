"""HTML → structure-preserving plain text.

Single-pass walk over the parsed document that emits typed segments
(headings, list items, section boundaries, paragraphs) and renders them with
the textual markers the system prompt explains to the model. The walk is a
pure function of its input: the same HTML and character limit always yield
the same ``StructuredContent``, which keeps cache fingerprints stable.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PreformattedString

from jsonldgen.models.content import Segment, SegmentKind, StructuredContent

DEFAULT_MAX_CHARS = 50000

# Dropped together with everything inside them
_DROPPED_TAGS = frozenset({
    "script", "style", "noscript", "template", "head",
    "iframe", "object", "embed", "form", "input", "button",
    "select", "textarea", "svg", "canvas",
})

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_EMPHASIS_TAGS = frozenset({"strong", "b", "em", "i"})

_WRAPPERS: dict[str, tuple[SegmentKind, SegmentKind]] = {
    "section": (SegmentKind.SECTION_START, SegmentKind.SECTION_END),
    "article": (SegmentKind.ARTICLE_START, SegmentKind.ARTICLE_END),
}

_LISTS: dict[str, tuple[SegmentKind, SegmentKind, SegmentKind]] = {
    "ul": (SegmentKind.LIST_START, SegmentKind.LIST_ITEM, SegmentKind.LIST_END),
    "ol": (SegmentKind.NUMBERED_START, SegmentKind.NUMBERED_ITEM, SegmentKind.NUMBERED_END),
}

# Block-level tags that end the current paragraph without adding a marker
_BLOCK_TAGS = frozenset({
    "p", "div", "blockquote", "pre", "main", "header", "footer", "nav", "aside",
    "table", "thead", "tbody", "tfoot", "tr", "td", "th", "dl", "dt", "dd",
    "figure", "figcaption", "address", "details", "summary", "li", "hr", "br",
    "body", "html",
})

_LINK_RE = re.compile(r"^(https?://|mailto:|tel:)", re.IGNORECASE)
_EMPHASIS_ONLY_RE = re.compile(r"^\*\*[^*]+\*\*$")


def _normalise(text: str) -> str:
    return " ".join(text.split())


def _inline_text(node: Tag) -> str:
    """Flatten a node's descendants into one line, keeping emphasis and links."""
    parts: list[str] = []
    for child in node.children:
        if isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
        elif isinstance(child, Tag):
            parts.append(_render_inline_tag(child))
    return "".join(parts)


def _render_inline_tag(tag: Tag) -> str:
    name = tag.name.lower()
    if name in _DROPPED_TAGS:
        return ""
    if name in _EMPHASIS_TAGS:
        inner = _normalise(_inline_text(tag))
        return f"**{inner}**" if inner else ""
    if name == "a":
        return _render_link(tag)
    if name in _BLOCK_TAGS or name in _LISTS or name in _HEADING_TAGS:
        return f" {_inline_text(tag)} "
    return _inline_text(tag)


def _render_link(tag: Tag) -> str:
    text = _normalise(_inline_text(tag))
    if not text:
        return ""
    href = tag.get("href")
    if isinstance(href, str):
        href = href.strip()
        if _LINK_RE.match(href):
            return f"{text} ({href})"
    return text


# ---------------------------------------------------------------------------
# Testimonials, quotes and FAQ items
# ---------------------------------------------------------------------------

# Matched against single class tokens of the container element
_TESTIMONIAL_CLASS_RE = re.compile(
    r"^(?:testimonial|testimonial-item|testimonial-card|review|review-item|client-quote"
    r"|client-feedback|customer-review|customer-feedback|quote-box|quote-card|feedback-item"
    r"|elementor-testimonial|brxe-testimonial)$",
    re.IGNORECASE,
)
_FAQ_CLASS_RE = re.compile(
    r"^(?:faq-item|faq-entry|accordion-item|question-answer|qa-item"
    r"|elementor-accordion-item|elementor-toggle-item)$",
    re.IGNORECASE,
)

# Searched within class tokens of descendants
_AUTHOR_CLASS_RE = re.compile(r"author|name|reviewer", re.IGNORECASE)
_QUOTE_TEXT_CLASS_RE = re.compile(
    r"testimonial-(?:content|text|description)|review-(?:text|content)|quote-text|feedback-text",
    re.IGNORECASE,
)
_TEXT_CLASS_RE = re.compile(r"content|text|quote", re.IGNORECASE)
_QUESTION_CLASS_RE = re.compile(
    r"question|accordion-title|toggle-title|accordion-header", re.IGNORECASE
)
_ANSWER_CLASS_RE = re.compile(
    r"answer|accordion-content|toggle-content|accordion-body|accordion-panel", re.IGNORECASE
)

_RATING_VALUE_RE = re.compile(r"^\d+(?:\.\d+)?$")
_RATING_TEXT_RE = re.compile(r"(\d(?:\.\d)?)\s*(?:/\s*5|out of 5|stars?)", re.IGNORECASE)
_FILLED_STAR_CLASSES = frozenset({"star-filled", "icon-star-full", "rating-star--filled"})

_MIN_QUOTE_CHARS = 20
_MAX_AUTHOR_CHARS = 100


def _plain_text(node: Tag, skip: Tag | None = None) -> str:
    """Visible text of ``node`` without markers; ``skip`` excludes one direct child."""
    parts: list[str] = []
    for child in node.children:
        if child is skip or isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
        elif isinstance(child, Tag) and child.name.lower() not in _DROPPED_TAGS:
            text = _plain_text(child)
            name = child.name.lower()
            block = name in _BLOCK_TAGS or name in _HEADING_TAGS or name in _LISTS
            parts.append(f" {text} " if block else text)
    return _normalise("".join(parts))


def _has_class(tag: Tag, pattern: re.Pattern[str]) -> bool:
    return any(pattern.match(token) for token in tag.get_attribute_list("class") if token)


def _first_text(*nodes: Tag | None) -> str:
    for node in nodes:
        if node is not None:
            text = _plain_text(node)
            if text:
                return text
    return ""


def _testimonial_author(tag: Tag) -> str:
    for node in (tag.find(class_=_AUTHOR_CLASS_RE), tag.find("cite")):
        if node is not None:
            author = _plain_text(node)
            if author and len(author) < _MAX_AUTHOR_CHARS:
                return author
    return ""


def _star_rating(tag: Tag) -> str:
    rated = tag if tag.has_attr("data-rating") else tag.find(attrs={"data-rating": True})
    if rated is not None:
        value = str(rated.get("data-rating", "")).strip()
        if _RATING_VALUE_RE.match(value):
            return f"{value}/5"

    filled = 0
    for node in tag.find_all(True):
        tokens = set(node.get_attribute_list("class"))
        if (
            tokens & _FILLED_STAR_CLASSES
            or {"fas", "fa-star"} <= tokens
            or {"star", "active"} <= tokens
        ):
            filled += 1
    if 0 < filled <= 5:
        return f"{filled}/5 stars"

    match = _RATING_TEXT_RE.search(_plain_text(tag))
    return f"{match.group(1)}/5" if match else ""


def _testimonial_text(tag: Tag, author: str) -> str:
    candidates = (
        tag.find(class_=_QUOTE_TEXT_CLASS_RE),
        tag.find("p", class_=_TEXT_CLASS_RE),
        tag.find("blockquote"),
    )
    for node in candidates:
        if node is not None:
            text = _plain_text(node)
            if len(text) > _MIN_QUOTE_CHARS:
                return text

    text = _plain_text(tag)
    if author:
        text = _normalise(text.replace(author, ""))
    return text if len(text) > 30 else ""


def _testimonial_segment(tag: Tag) -> Segment | None:
    author = _testimonial_author(tag)
    text = _testimonial_text(tag, author)
    if not text:
        return None
    fields = [("Quote", text)]
    if author:
        fields.append(("Author", author))
    rating = _star_rating(tag)
    if rating:
        fields.append(("Rating", rating))
    return Segment(SegmentKind.TESTIMONIAL, fields=tuple(fields))


def _quote_segment(tag: Tag) -> Segment | None:
    attribution_node = tag.find("cite") or tag.find("footer")
    text = _plain_text(tag)
    if len(text) <= _MIN_QUOTE_CHARS:
        return None
    fields = [("Text", text)]
    attribution = _plain_text(attribution_node) if attribution_node is not None else ""
    if attribution:
        fields.append(("Attribution", attribution))
    return Segment(SegmentKind.QUOTE, fields=tuple(fields))


def _faq_segment(tag: Tag) -> Segment | None:
    if tag.name.lower() == "details":
        summary = tag.find("summary")
        if summary is None:
            return None
        question = _plain_text(summary)
        answer = _plain_text(tag, skip=summary)
    else:
        question = _first_text(
            tag.find(class_=_QUESTION_CLASS_RE),
            tag.find(["h2", "h3", "h4", "h5", "h6"]),
            tag.find("summary"),
            tag.find("dt"),
        )
        answer = _first_text(tag.find(class_=_ANSWER_CLASS_RE), tag.find("dd"))
        if question and not answer:
            rest = _normalise(_plain_text(tag).replace(question, ""))
            answer = rest if len(rest) > _MIN_QUOTE_CHARS else ""

    if not question or not answer:
        return None
    return Segment(SegmentKind.FAQ_ITEM, fields=(("Question", question), ("Answer", answer)))


def _labelled_segment(tag: Tag) -> Segment | None:
    """Testimonial, quote or FAQ block for ``tag``, or None to walk it normally."""
    name = tag.name.lower()
    if name == "details":
        return _faq_segment(tag)
    # A container holding several items is walked so each item is marked
    if _has_class(tag, _TESTIMONIAL_CLASS_RE) and tag.find(class_=_TESTIMONIAL_CLASS_RE) is None:
        return _testimonial_segment(tag)
    if _has_class(tag, _FAQ_CLASS_RE) and tag.find(class_=_FAQ_CLASS_RE) is None:
        return _faq_segment(tag)
    if name == "blockquote":
        return _quote_segment(tag)
    return None


class _SegmentBuilder:
    """Walks a parsed tree and collects segments in document order."""

    def __init__(self) -> None:
        self.segments: list[Segment] = []
        self._inline: list[str] = []

    def flush(self) -> None:
        text = _normalise("".join(self._inline))
        self._inline.clear()
        if not text:
            return
        kind = SegmentKind.EMPHASIS if _EMPHASIS_ONLY_RE.match(text) else SegmentKind.PARAGRAPH
        self.segments.append(Segment(kind, text))

    def walk(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, PreformattedString):
                # Comments, CDATA, doctype, processing instructions
                continue
            if isinstance(child, NavigableString):
                self._inline.append(str(child))
                continue
            if isinstance(child, Tag):
                self.visit(child)

    def visit(self, tag: Tag) -> None:
        name = tag.name.lower()

        if name in _DROPPED_TAGS:
            return

        labelled = _labelled_segment(tag)
        if labelled is not None:
            self.flush()
            self.segments.append(labelled)
            return

        if name in _HEADING_TAGS:
            self.flush()
            text = _normalise(tag.get_text(" "))
            if text:
                self.segments.append(Segment(SegmentKind.HEADING, text))
            return

        if name in _LISTS:
            start, item_kind, end = _LISTS[name]
            self.flush()
            self.segments.append(Segment(start))
            for item in tag.find_all("li", recursive=False):
                text = _normalise(_inline_text(item))
                if text:
                    self.segments.append(Segment(item_kind, text))
            self.segments.append(Segment(end))
            return

        if name in _WRAPPERS:
            start, end = _WRAPPERS[name]
            self.flush()
            self.segments.append(Segment(start))
            self.walk(tag)
            self.flush()
            self.segments.append(Segment(end))
            return

        if name in _EMPHASIS_TAGS or name == "a":
            self._inline.append(_render_inline_tag(tag))
            return

        if name in _BLOCK_TAGS:
            self.flush()
            self.walk(tag)
            self.flush()
            return

        self.walk(tag)


def parse_segments(raw_html: str) -> list[Segment]:
    """Parse HTML into ordered segments. Returns ``[]`` for empty or rejected markup."""
    if not raw_html or not raw_html.strip():
        return []
    try:
        soup = BeautifulSoup(raw_html, "html.parser")
    except (ParserRejectedMarkup, UnicodeError):
        return []

    builder = _SegmentBuilder()
    builder.walk(soup)
    builder.flush()
    return builder.segments


def truncate(content: str, max_chars: int) -> str:
    """Cut ``content`` to at most ``max_chars`` at a whitespace boundary.

    Never cuts inside a word: when the window holds no whitespace at all the
    result is empty.
    """
    if len(content) <= max_chars:
        return content
    if max_chars <= 0:
        return ""

    window = content[:max_chars]
    if content[max_chars].isspace():
        return window.rstrip()

    for index in range(len(window) - 1, -1, -1):
        if window[index].isspace():
            return window[:index].rstrip()
    return ""


def transform(raw_html: str | None, max_chars: int = DEFAULT_MAX_CHARS) -> StructuredContent:
    """Convert page HTML into ``StructuredContent`` of at most ``max_chars`` characters."""
    segments = parse_segments(raw_html or "")
    if not segments:
        return StructuredContent()

    rendered = [segment.render() for segment in segments]
    full = "\n".join(rendered)
    original_length = len(full)
    content = truncate(full, max_chars)

    if content == full:
        return StructuredContent(
            segments=tuple(segments),
            content=full,
            truncated=False,
            original_length=original_length,
        )

    retained: list[Segment] = []
    offset = 0
    for segment, text in zip(segments, rendered, strict=True):
        end = offset + len(text)
        if end > len(content):
            break
        retained.append(segment)
        offset = end + 1  # newline separator

    return StructuredContent(
        segments=tuple(retained),
        content=content,
        truncated=True,
        original_length=original_length,
    )
