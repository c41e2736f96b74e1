"""SQLite store for generated schemas, keyed by entity id.

Every cached schema carries the fingerprint of the inputs it was generated
from. A lookup is a hit only when the stored fingerprint equals the freshly
computed one, so any change to the page or to a cache-busting setting makes
the entry stale without an explicit invalidation.

All store operations catch ``aiosqlite.Error`` internally and degrade
gracefully: read failures return ``None`` (treated as cache miss by callers),
write failures are logged and ignored (the generated schema is still
returned). Each write is a single ``INSERT OR REPLACE`` followed by a commit,
so a failed write leaves the previous entry intact.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from typing import TYPE_CHECKING

import aiosqlite
import structlog

from jsonldgen.models.cache import CacheEntry
from jsonldgen.models.payload import validate_type_hint

if TYPE_CHECKING:
    from jsonldgen.config import GenerationSettings
    from jsonldgen.protocols import SchemaProvider

log = structlog.get_logger()

_CREATE_SCHEMA_TABLE = """
CREATE TABLE IF NOT EXISTS schema_cache (
    entity_id        TEXT PRIMARY KEY,
    fingerprint      TEXT NOT NULL,
    schema           TEXT NOT NULL,
    generated_at     TEXT NOT NULL,
    settings_version TEXT NOT NULL DEFAULT ''
)
"""


def fingerprint(
    content: str,
    title: str,
    excerpt: str,
    modified_at: str,
    settings_version: str,
) -> str:
    """SHA-256 hex digest over the content-defining inputs.

    The inputs are encoded as a JSON object with sorted keys, so the digest
    changes iff one of the five values changes.
    """
    canonical = json.dumps(
        {
            "content": content,
            "title": title,
            "excerpt": excerpt,
            "modified_at": modified_at,
            "settings_version": settings_version,
        },
        sort_keys=True,
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical.encode("utf-8", errors="surrogatepass")).hexdigest()


def cache_version(
    settings: GenerationSettings,
    type_hint: str,
    provider: SchemaProvider | None = None,
) -> str:
    """Collapse every cache-busting setting into one version string.

    Combines the configured ``settings_version`` with the active provider,
    its model and the page's preferred type. When the provider is known, the
    model is the one it will actually use, so an unknown configured model id
    that falls back to the default does not bust the cache.
    """
    if provider is not None:
        slug = provider.get_slug()
        model = provider.get_model_config(settings).name
    else:
        slug = settings.provider
        model = settings.provider_model(slug)
    return "|".join((settings.settings_version, slug, model, validate_type_hint(type_hint)))


class SchemaCache:
    """SQLite-backed schema store implementing CacheStoreProtocol."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_SCHEMA_TABLE)
        await self._db.commit()

    async def get(self, entity_id: str) -> CacheEntry | None:
        """Read an entry. Returns ``None`` on cache miss or read failure."""
        try:
            cursor = await self._db.execute(
                "SELECT entity_id, fingerprint, schema, generated_at, settings_version "
                "FROM schema_cache WHERE entity_id = ?",
                (entity_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            return CacheEntry(
                entity_id=row[0],
                fingerprint=row[1],
                schema=row[2],
                generated_at=datetime.fromisoformat(row[3]),
                settings_version=row[4],
            )
        except (aiosqlite.Error, ValueError):
            log.warning("cache_read_error", entity_id=entity_id, exc_info=True)
            return None

    async def put(self, entry: CacheEntry) -> None:
        """Write an entry, replacing any previous one. Non-fatal on failure."""
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO schema_cache "
                "(entity_id, fingerprint, schema, generated_at, settings_version) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    entry.entity_id,
                    entry.fingerprint,
                    entry.schema,
                    entry.generated_at.isoformat(),
                    entry.settings_version,
                ),
            )
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("cache_write_error", entity_id=entry.entity_id, exc_info=True)
            try:
                await self._db.rollback()
            except aiosqlite.Error:
                log.warning("cache_rollback_error", entity_id=entry.entity_id, exc_info=True)

    async def invalidate(self, entity_id: str) -> None:
        """Delete an entry. Non-fatal on failure."""
        try:
            await self._db.execute("DELETE FROM schema_cache WHERE entity_id = ?", (entity_id,))
            await self._db.commit()
            log.info("cache_invalidated", entity_id=entity_id)
        except aiosqlite.Error:
            log.warning("cache_invalidate_error", entity_id=entity_id, exc_info=True)
