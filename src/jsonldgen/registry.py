"""Provider registry: slug-keyed lookup of the available AI providers."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from jsonldgen.config import DEFAULT_PROVIDER

if TYPE_CHECKING:
    from jsonldgen.config import GenerationSettings
    from jsonldgen.models.provider import SettingsField
    from jsonldgen.protocols import SchemaProvider

log = structlog.get_logger()

_SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


class ProviderRegistry:
    """Holds one instance per provider slug, in registration order."""

    def __init__(self) -> None:
        self._providers: dict[str, SchemaProvider] = {}

    def register(self, provider: SchemaProvider) -> bool:
        """Add a provider. Returns False (and logs) if the slug is taken or invalid."""
        slug = provider.get_slug()
        if not _SLUG_RE.match(slug):
            log.warning("provider_slug_invalid", slug=slug)
            return False
        if slug in self._providers:
            log.warning("provider_already_registered", slug=slug)
            return False
        self._providers[slug] = provider
        log.debug("provider_registered", slug=slug, name=provider.get_name())
        return True

    def unregister(self, slug: str) -> bool:
        return self._providers.pop(slug, None) is not None

    def get(self, slug: str) -> SchemaProvider | None:
        return self._providers.get(slug)

    def has(self, slug: str) -> bool:
        return slug in self._providers

    def all(self) -> dict[str, SchemaProvider]:
        return dict(self._providers)

    def options(self) -> dict[str, str]:
        """Slug → display name, for host settings screens."""
        return {slug: provider.get_name() for slug, provider in self._providers.items()}

    def all_settings_fields(self) -> dict[str, list[SettingsField]]:
        return {
            slug: provider.get_settings_fields() for slug, provider in self._providers.items()
        }

    def get_active(self, settings: GenerationSettings) -> SchemaProvider | None:
        """Return the configured provider, or ``None`` if it is not registered."""
        slug = settings.provider or DEFAULT_PROVIDER
        provider = self._providers.get(slug)
        if provider is None:
            log.warning("provider_not_found", slug=slug, available=sorted(self._providers))
        return provider

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, slug: object) -> bool:
        return slug in self._providers
