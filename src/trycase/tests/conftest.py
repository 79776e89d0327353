"""Shared fixtures: isolate settings and logging configuration per test."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from trycase.logging import reset_logging
from trycase.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("TRYCASE_LOG_LEVEL", "TRYCASE_LOG_FORMAT", "TRYCASE_LOG_CAPTURES",
                 "TRYCASE_REPORT_INCLUDE_TRACEBACK", "TRYCASE_REPORT_MAX_MESSAGE_LENGTH"):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    reset_logging()
    yield
    clear_settings_cache()
    reset_logging()
