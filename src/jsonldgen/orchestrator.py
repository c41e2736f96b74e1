"""Generation pipeline: cache check → structure → prompt → provider → cache write.

Every expected failure is returned as a ``GenerationResult``; nothing in the
pipeline raises to the caller. A failed run leaves any previously cached
schema untouched.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from jsonldgen.cache import cache_version, fingerprint
from jsonldgen.errors import ErrorCode
from jsonldgen.models.cache import CacheEntry, CacheStatus
from jsonldgen.models.provider import GenerationResult
from jsonldgen.prompts import build_analyzed_payload, build_direct_payload
from jsonldgen.ratelimit import utc_now
from jsonldgen.structurer import transform

if TYPE_CHECKING:
    from jsonldgen.config import GenerationSettings
    from jsonldgen.models.payload import PageMetadata, PromptPayload, SiteInfo
    from jsonldgen.protocols import (
        CacheStoreProtocol,
        PageSourceProtocol,
        SchemaProvider,
        SchemaReferenceProtocol,
    )
    from jsonldgen.ratelimit import Clock
    from jsonldgen.registry import ProviderRegistry

log = structlog.get_logger()

def _fingerprint_content(raw_content: str, analyzed_content: dict[str, Any] | None) -> str:
    # Analyzed input produces a different schema from the same page body
    if analyzed_content is None:
        return raw_content
    analyzed = json.dumps(analyzed_content, sort_keys=True, ensure_ascii=False)
    return f"{raw_content}\n{analyzed}"


class Orchestrator:
    """Runs one generation per call against the active provider."""

    def __init__(
        self,
        *,
        pages: PageSourceProtocol,
        cache: CacheStoreProtocol,
        registry: ProviderRegistry,
        schema_reference: SchemaReferenceProtocol,
        site: SiteInfo,
        clock: Clock = utc_now,
    ) -> None:
        self._pages = pages
        self._cache = cache
        self._registry = registry
        self._schema_reference = schema_reference
        self._site = site
        self._clock = clock

    def _fingerprint(
        self,
        page: PageMetadata,
        raw_content: str,
        settings: GenerationSettings,
        provider: SchemaProvider | None,
        analyzed_content: dict[str, Any] | None = None,
    ) -> tuple[str, str]:
        version = cache_version(settings, page.type_hint, provider)
        digest = fingerprint(
            _fingerprint_content(raw_content, analyzed_content),
            page.title,
            page.excerpt,
            page.modified_at,
            version,
        )
        return digest, version

    async def generate(
        self,
        entity_id: str,
        raw_content: str,
        settings: GenerationSettings,
        *,
        force: bool = False,
        analyzed_content: dict[str, Any] | None = None,
    ) -> GenerationResult:
        """Return the JSON-LD schema for an entity, generating it only when needed.

        A cached schema is returned (``cached=True``) when its fingerprint
        matches the current inputs and ``force`` is False. Otherwise the
        active provider is called exactly once; a successful result replaces
        the cache entry.
        """
        bound = log.bind(entity_id=entity_id)

        page = await self._pages.get_page(entity_id)
        if page is None:
            bound.warning("generation_unknown_entity")
            return GenerationResult.failure(
                ErrorCode.CONFIGURATION_ERROR, f"Unknown entity: {entity_id}"
            )

        provider = self._registry.get_active(settings)
        digest, version = self._fingerprint(
            page, raw_content, settings, provider, analyzed_content
        )

        if not force:
            entry = await self._cache.get(entity_id)
            if entry is not None and entry.fingerprint == digest:
                bound.debug("schema_cache_hit", fingerprint=digest)
                return GenerationResult(
                    success=True,
                    schema=entry.schema,
                    status_code=200,
                    cached=True,
                    fingerprint=digest,
                    generated_at=entry.generated_at,
                )

        if provider is None:
            return GenerationResult.failure(
                ErrorCode.CONFIGURATION_ERROR,
                f"Provider not found: {settings.provider}",
            )

        payload = self._build_payload(page, raw_content, settings, provider, analyzed_content)

        result = await provider.generate_schema(payload, settings)
        result.fingerprint = digest

        if not result.success:
            bound.warning(
                "schema_generation_error",
                provider=provider.get_slug(),
                code=result.error_code,
                status_code=result.status_code,
            )
            return result

        generated_at = self._clock()
        result.generated_at = generated_at
        await self._cache.put(
            CacheEntry(
                entity_id=entity_id,
                fingerprint=digest,
                schema=result.schema,
                generated_at=generated_at,
                settings_version=version,
            )
        )
        bound.info(
            "schema_generated",
            provider=provider.get_slug(),
            mode=payload.mode,
            forced=force,
        )
        return result

    def _build_payload(
        self,
        page: PageMetadata,
        raw_content: str,
        settings: GenerationSettings,
        provider: SchemaProvider,
        analyzed_content: dict[str, Any] | None,
    ) -> PromptPayload:
        if analyzed_content is not None:
            return build_analyzed_payload(page, analyzed_content, self._site, settings)

        model_config = provider.get_model_config(settings)
        structured = transform(raw_content, model_config.max_content_chars)
        return build_direct_payload(
            page,
            structured,
            self._site,
            settings,
            self._schema_reference.for_type_hint(page.type_hint),
        )

    async def cache_status(
        self,
        entity_id: str,
        raw_content: str,
        settings: GenerationSettings,
        *,
        analyzed_content: dict[str, Any] | None = None,
    ) -> CacheStatus:
        """Report whether a schema is cached and whether it matches the current inputs.

        Pass the same ``analyzed_content`` used for generation; the two modes
        fingerprint differently.
        """
        page = await self._pages.get_page(entity_id)
        entry = await self._cache.get(entity_id)
        if page is None or entry is None:
            return CacheStatus(has_schema=entry is not None, is_current=False)

        digest, _ = self._fingerprint(
            page,
            raw_content,
            settings,
            self._registry.get_active(settings),
            analyzed_content,
        )
        return CacheStatus(
            has_schema=True,
            is_current=entry.fingerprint == digest,
            generated_at=entry.generated_at,
            fingerprint=entry.fingerprint,
        )

    async def invalidate(self, entity_id: str) -> None:
        await self._cache.invalidate(entity_id)
