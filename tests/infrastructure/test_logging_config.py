"""Tests for logging setup."""

from typing import Generator

import pytest
import structlog

from checkout_wizard.infrastructure.logging_config import configure_logging


@pytest.fixture(autouse=True)
def restore_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()


@pytest.mark.parametrize("json_output", [True, False])
def test_configure_logging(json_output: bool) -> None:
    configure_logging(level="debug", json_output=json_output)

    assert structlog.is_configured()
    renderer = structlog.get_config()["processors"][-1]
    expected = structlog.processors.JSONRenderer if json_output else structlog.dev.ConsoleRenderer
    assert isinstance(renderer, expected)


def test_defaults_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    from checkout_wizard.infrastructure.config import settings

    monkeypatch.setattr(settings, "log_json", True)
    configure_logging()

    assert isinstance(
        structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer
    )
