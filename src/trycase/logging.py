"""Structured logging for capture events.

trycase logs one thing: the ``failure captured`` debug event, emitted for
every exception turned into a Failure when ``TRYCASE_LOG_CAPTURES`` is on.
Output is human-readable console lines or JSON lines, picked by
``TRYCASE_LOG_FORMAT`` the first time a logger is used, unless
``configure_logging`` was called before.

Quick Start:
    >>> from trycase.logging import configure_logging, get_logger
    >>> configure_logging(format="json", level="DEBUG")
    >>> get_logger("orders").bind(order_id=123).info("order parsed")
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, TextIO, TypeAlias, runtime_checkable

import orjson

if TYPE_CHECKING:
    from .settings import LoggingSettings

JsonDict: TypeAlias = dict[str, object]


@dataclass(slots=True)
class LogEntry:
    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """HH:MM:SS.mmm"""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


@dataclass(slots=True)
class BoundLogger:
    """Logger carrying context merged into every entry. ``bind()`` returns a new logger."""

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = logging.DEBUG

    def bind(self, **kw: object) -> BoundLogger:
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def _log(self, level: int, event: str, **kw: object) -> None:
        if level < self._level:
            return
        entry = LogEntry(time.time(), logging.getLevelName(level).lower(), event, {**self.context, **kw})
        (self._renderer or _ensure_configured()).render(entry)

    def debug(self, event: str, **kw: object) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: object) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: object) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: object) -> None: self._log(logging.ERROR, event, **kw)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """Plain text lines: ``12:00:01.250 [debug] failure captured error="boom" ...``"""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    show_timestamp: bool = True

    def render(self, entry: LogEntry) -> None:
        head = [entry.ts_human] if self.show_timestamp else []
        pairs = [f"{k}={_console_value(v)}" for k, v in sorted(entry.context.items())]
        print(" ".join([*head, f"[{entry.level}]", entry.event, *pairs]), file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output; values orjson cannot encode are written as their repr."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        line = orjson.dumps(
            {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context},
            default=repr,
            option=orjson.OPT_NON_STR_KEYS,
        )
        print(line.decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    def render(self, entry: LogEntry) -> None:
        pass


def _console_value(v: object) -> str:
    match v:
        case str(): return f'"{v}"'
        case bool(): return str(v).lower()
        case _: return repr(v)


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


_renderer: ContextVar[LogRenderer | None] = ContextVar("trycase_log_renderer", default=None)
_default_level: ContextVar[int] = ContextVar("trycase_log_level", default=logging.INFO)


def configure_logging(format: str = "console", level: str = "INFO", *, output: TextIO | None = None) -> LogRenderer:  # noqa: A002
    """Set the global renderer and level. Format: "console", "json" or "none"."""
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _default_level.set(getattr(logging, level.upper(), logging.INFO))
    _renderer.set(renderer)
    return renderer


def configure_from_settings(settings: LoggingSettings | None = None, *, output: TextIO | None = None) -> LogRenderer:
    """Configure logging from ``TRYCASE_LOG_*`` settings."""
    if settings is None:
        from .settings import get_settings
        settings = get_settings().logging
    return configure_logging(settings.format, settings.level, output=output)


def reset_logging() -> None:
    """Forget the global configuration; the next logger reapplies settings."""
    _renderer.set(None)
    _default_level.set(logging.INFO)


def get_logger(name: str | None = None, **initial_context: object) -> BoundLogger:
    """Logger at the configured level. Name is added to context as 'logger'."""
    _ensure_configured()
    ctx = {**initial_context, **({"logger": name} if name else {})}
    return BoundLogger(context=ctx, _level=_default_level.get())


def log_capture(exc: BaseException, operation: str) -> None:
    """Emit the ``failure captured`` event for an exception turned into a Failure."""
    log = get_logger("trycase").bind(operation=operation, error_type=type(exc).__qualname__)
    log.debug("failure captured", error=str(exc))


def _ensure_configured() -> LogRenderer:
    if (renderer := _renderer.get()) is None:
        renderer = configure_from_settings()
    return renderer
