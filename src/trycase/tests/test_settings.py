"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from trycase import invoke
from trycase.settings import LoggingSettings, TrycaseSettings, clear_settings_cache, get_settings


def test_defaults() -> None:
    settings = get_settings()

    assert settings.logging.level == "INFO"
    assert settings.logging.format == "console"
    assert settings.logging.captures is False
    assert settings.report.include_traceback is True
    assert settings.report.max_message_length is None


def test_cached() -> None:
    assert get_settings() is get_settings()


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRYCASE_LOG_LEVEL", "debug")
    monkeypatch.setenv("TRYCASE_LOG_FORMAT", "JSON")
    monkeypatch.setenv("TRYCASE_LOG_CAPTURES", "true")
    monkeypatch.setenv("TRYCASE_REPORT_INCLUDE_TRACEBACK", "false")
    monkeypatch.setenv("TRYCASE_REPORT_MAX_MESSAGE_LENGTH", "10")
    clear_settings_cache()

    settings = get_settings()

    assert settings.logging.level == "DEBUG"
    assert settings.logging.format == "json"
    assert settings.logging.captures is True
    assert settings.report.include_traceback is False
    assert settings.report.max_message_length == 10


def test_invalid_env_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRYCASE_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        LoggingSettings()


def test_report_uses_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRYCASE_REPORT_INCLUDE_TRACEBACK", "false")
    monkeypatch.setenv("TRYCASE_REPORT_MAX_MESSAGE_LENGTH", "3")
    clear_settings_cache()

    report = invoke(lambda: int("xyz")).report()

    assert report is not None
    assert report.details is None
    assert report.message == "inv..."


def test_broken_settings_do_not_break_capture(monkeypatch: pytest.MonkeyPatch) -> None:
    """Capture stays total even when logging configuration cannot load."""
    monkeypatch.setenv("TRYCASE_LOG_LEVEL", "chatty")
    clear_settings_cache()

    assert invoke(lambda: 1 / 0).is_failure()


def test_nested_settings_explicit() -> None:
    settings = TrycaseSettings(logging=LoggingSettings(level="WARNING"))
    assert settings.logging.level == "WARNING"
