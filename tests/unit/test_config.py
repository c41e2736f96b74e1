"""Unit tests for configuration loading and defaults."""

from __future__ import annotations

from typing import TYPE_CHECKING

import platformdirs
import pytest
from pydantic import ValidationError

from jsonldgen.config import (
    _DEFAULT_DATA_DIR,
    _DEFAULT_DB_PATH,
    CacheSettings,
    GenerationSettings,
    Settings,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestPlatformDefaults:
    def test_default_data_dir_matches_platformdirs(self) -> None:
        assert platformdirs.user_data_dir("jsonldgen") == _DEFAULT_DATA_DIR

    def test_default_db_path_under_data_dir(self) -> None:
        assert _DEFAULT_DB_PATH.startswith(_DEFAULT_DATA_DIR)
        assert _DEFAULT_DB_PATH.endswith("schema-cache.db")

    def test_cache_defaults(self) -> None:
        settings = CacheSettings()
        assert settings.db_path == _DEFAULT_DB_PATH


class TestGenerationSettings:
    def test_defaults(self) -> None:
        settings = GenerationSettings()
        assert settings.provider == "deepseek"
        assert settings.temperature == 0.2
        assert settings.max_tokens is None
        assert settings.settings_version == "1.1"

    def test_provider_keys_read_through_value(self) -> None:
        settings = GenerationSettings(deepseek_api_key="sk-1", deepseek_model="deepseek-chat")
        assert settings.value("deepseek_api_key") == "sk-1"
        assert settings.provider_model() == "deepseek-chat"
        assert settings.value("openai_api_key") is None
        assert settings.value("openai_api_key", "") == ""

    def test_declared_fields_read_through_value(self) -> None:
        assert GenerationSettings(temperature=0.7).value("temperature") == 0.7

    def test_read_only(self) -> None:
        settings = GenerationSettings()
        with pytest.raises(ValidationError):
            settings.provider = "openai"


class TestSettingsSources:
    def test_env_nesting(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JSONLDGEN__GENERATION__DEEPSEEK_API_KEY", "sk-env")
        monkeypatch.setenv("JSONLDGEN__CACHE__DB_PATH", "/tmp/jsonldgen-test.db")
        monkeypatch.setenv("JSONLDGEN__SITE__NAME", "Acme")
        settings = Settings()
        assert settings.generation.value("deepseek_api_key") == "sk-env"
        assert settings.cache.db_path == "/tmp/jsonldgen-test.db"
        assert settings.site.name == "Acme"

    def test_yaml_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "jsonldgen.yaml"
        config.write_text(
            "generation:\n"
            "  provider: deepseek\n"
            "  temperature: 0.4\n"
            "  business:\n"
            "    name: Acme Ltd\n"
            "    locations:\n"
            "      - city: Springfield\n"
            "        hours:\n"
            "          monday: \"09:00-17:00\"\n"
            "logging:\n"
            "  level: DEBUG\n",
            encoding="utf-8",
        )
        monkeypatch.setitem(Settings.model_config, "yaml_file", str(config))
        settings = Settings()
        assert settings.generation.temperature == 0.4
        assert settings.generation.business.name == "Acme Ltd"
        assert settings.generation.business.locations[0].hours == {"monday": "09:00-17:00"}
        assert settings.logging.level == "DEBUG"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "jsonldgen.yaml"
        config.write_text("logging:\n  level: DEBUG\n", encoding="utf-8")
        monkeypatch.setitem(Settings.model_config, "yaml_file", str(config))
        monkeypatch.setenv("JSONLDGEN__LOGGING__LEVEL", "ERROR")
        assert Settings().logging.level == "ERROR"
