"""Unit tests for jsonldgen.logging_setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
import structlog

from jsonldgen.config import LoggingSettings, Settings
from jsonldgen.logging_setup import setup_logging

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()


def test_json_renderer_by_default() -> None:
    setup_logging(Settings())
    config = structlog.get_config()
    assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)


def test_text_format_uses_console_renderer() -> None:
    setup_logging(Settings(logging=LoggingSettings(format="text")))
    config = structlog.get_config()
    assert isinstance(config["processors"][-1], structlog.dev.ConsoleRenderer)


def test_level_selects_filtering_wrapper() -> None:
    setup_logging(Settings(logging=LoggingSettings(level="WARNING")))
    wrapper = structlog.get_config()["wrapper_class"]
    assert wrapper is structlog.make_filtering_bound_logger(logging.WARNING)
