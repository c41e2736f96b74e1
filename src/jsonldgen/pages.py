"""In-memory page source for hosts without their own page storage."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jsonldgen.models.payload import PageMetadata


class InMemoryPageSource:
    """``PageSourceProtocol`` backed by a dict of entity id → metadata."""

    def __init__(self, pages: dict[str, PageMetadata] | None = None) -> None:
        self._pages: dict[str, PageMetadata] = dict(pages or {})

    def add(self, entity_id: str, page: PageMetadata) -> None:
        self._pages[entity_id] = page

    async def get_page(self, entity_id: str) -> PageMetadata | None:
        return self._pages.get(entity_id)
