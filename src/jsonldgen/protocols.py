"""Protocol interfaces for swappable components.

The orchestrator and providers reference these protocols, not the concrete
implementations. This allows:
- Tests to use lightweight in-memory implementations
- Hosts to plug in their own page storage, schema reference and transport
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from jsonldgen.config import GenerationSettings
    from jsonldgen.models.cache import CacheEntry
    from jsonldgen.models.payload import PageMetadata, PromptPayload
    from jsonldgen.models.provider import (
        ConnectionResult,
        GenerationResult,
        ModelConfig,
        SettingsField,
        TransportResponse,
    )


class TransportProtocol(Protocol):
    """Outbound HTTP. The core never opens sockets directly."""

    async def request(
        self,
        url: str,
        headers: dict[str, str],
        json_body: dict[str, Any],
        timeout: float,
    ) -> TransportResponse: ...


class CacheStoreProtocol(Protocol):
    """Interface for the generated-schema store, keyed by entity id."""

    async def get(self, entity_id: str) -> CacheEntry | None: ...

    async def put(self, entry: CacheEntry) -> None: ...

    async def invalidate(self, entity_id: str) -> None: ...


class PageSourceProtocol(Protocol):
    """Supplies the metadata the fingerprint and prompt are built from."""

    async def get_page(self, entity_id: str) -> PageMetadata | None: ...


class SchemaReferenceProtocol(Protocol):
    """Returns schema.org type/property text for the Direct-mode system prompt."""

    def for_type_hint(self, type_hint: str) -> str: ...


class SchemaProvider(Protocol):
    """Capability set every AI provider implements.

    Concrete providers are independent classes sharing plumbing through an
    injected ``ProviderSupport``, never through inheritance.
    """

    async def generate_schema(
        self, payload: PromptPayload, settings: GenerationSettings
    ) -> GenerationResult: ...

    async def test_connection(self, settings: GenerationSettings) -> ConnectionResult: ...

    def get_settings_fields(self) -> list[SettingsField]: ...

    def get_name(self) -> str: ...

    def get_slug(self) -> str: ...

    def get_model_config(self, settings: GenerationSettings) -> ModelConfig: ...
