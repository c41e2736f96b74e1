"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (JSONLDGEN__GENERATION__DEEPSEEK_API_KEY=sk-...)
  2. jsonldgen.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; every field has a usable default except the
provider API key, whose absence is reported as a configuration error at
generation time rather than at load time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from jsonldgen.models.payload import SiteInfo

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("jsonldgen")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "schema-cache.db")

DEFAULT_PROVIDER = "deepseek"


def _find_config_file() -> str | None:
    """Return the path of the first jsonldgen.yaml found, or None."""
    candidates = [
        Path("jsonldgen.yaml"),
        Path(platformdirs.user_config_dir("jsonldgen")) / "jsonldgen.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class BusinessLocation(BaseModel):
    name: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    phone: str = ""
    email: str = ""
    # lowercase weekday name → opening hours, e.g. "monday" → "09:00-17:00"
    hours: dict[str, str] = {}


class BusinessSettings(BaseModel):
    """Owner-verified business facts. Takes precedence over page content."""

    name: str = ""
    description: str = ""
    logo: str = ""
    email: str = ""
    phone: str = ""
    founding_date: str = ""
    social_links: dict[str, str] = {}
    locations: list[BusinessLocation] = []


class GenerationSettings(BaseModel):
    """Read-only settings handed to providers on every call.

    Provider-specific keys (``<slug>_api_key``, ``<slug>_model``) are not
    declared here; they are accepted as extra fields so a new provider can be
    configured without touching this model. Read them with ``value()``.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    provider: str = DEFAULT_PROVIDER
    temperature: float = 0.2
    max_tokens: int | None = None
    settings_version: str = "1.1"
    business: BusinessSettings = BusinessSettings()

    def value(self, key: str, default: Any = None) -> Any:
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)

    def provider_model(self, slug: str | None = None) -> str:
        """Return the configured model id for a provider, or ``""`` if unset."""
        return self.value(f"{slug or self.provider}_model") or ""


class CacheSettings(BaseModel):
    db_path: str = _DEFAULT_DB_PATH


class HttpSettings(BaseModel):
    user_agent: str = "jsonldgen/1.0"
    max_connections: int = 10
    max_keepalive_connections: int = 5


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: JSONLDGEN__CACHE__DB_PATH=/tmp/cache.db
        env_prefix="JSONLDGEN__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    generation: GenerationSettings = GenerationSettings()
    site: SiteInfo = SiteInfo()
    cache: CacheSettings = CacheSettings()
    http: HttpSettings = HttpSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
