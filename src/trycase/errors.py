"""Exceptions and failure reporting for trycase.

Provides the library's own exception hierarchy, a coarse error-code
classifier, and a Pydantic model describing a captured failure for
logging or serialization.

The library never defines error codes for *your* operations: captured
exceptions travel through a chain untouched. The codes here exist only
to describe a failure to a human or a log aggregator.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

if TYPE_CHECKING:
    from types import TracebackType


class TrycaseError(Exception):
    """Base class for exceptions raised by trycase itself."""


class PredicateNotSatisfied(TrycaseError):
    """Captured when ``Result.filter`` rejects a success value.

    Kept distinct from exceptions raised by user code so a typed
    ``recover(PredicateNotSatisfied, ...)`` can target rejected filters only.
    """

    __slots__ = ("value",)

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"predicate not satisfied for value: {value!r}")


class NotAFailure(TrycaseError):
    """Raised when the captured error of a success is requested."""

    __slots__ = ("value",)

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"no error captured, result is Success({value!r})")


class FailureGroup(ExceptionGroup):
    """All errors gathered by ``collect_results``."""

    def derive(self, excs):  # type: ignore[no-untyped-def]
        return FailureGroup(self.message, excs)


class ErrorCode(StrEnum):
    """Coarse classification of captured exceptions for reporting."""
    FILTER_REJECTED = "FILTER_REJECTED"
    INVALID_VALUE = "INVALID_VALUE"
    INVALID_TYPE = "INVALID_TYPE"
    NOT_FOUND = "NOT_FOUND"
    ARITHMETIC = "ARITHMETIC"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    PARSE_ERROR = "PARSE_ERROR"
    IO_ERROR = "IO_ERROR"
    UNKNOWN = "UNKNOWN"


# Checked in order; first isinstance match wins
_TYPE_CODES: tuple[tuple[type[Exception], ErrorCode], ...] = (
    (PredicateNotSatisfied, ErrorCode.FILTER_REJECTED),
    (TimeoutError, ErrorCode.TIMEOUT),
    (PermissionError, ErrorCode.PERMISSION_DENIED),
    (ConnectionError, ErrorCode.NETWORK_ERROR),
    (FileNotFoundError, ErrorCode.NOT_FOUND),
    (OSError, ErrorCode.IO_ERROR),
    (LookupError, ErrorCode.NOT_FOUND),
    (ArithmeticError, ErrorCode.ARITHMETIC),
    (TypeError, ErrorCode.INVALID_TYPE),
    (ValueError, ErrorCode.INVALID_VALUE),
)

# Fallback for exceptions outside the builtin hierarchy, matched on name/message
_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "permission": ErrorCode.PERMISSION_DENIED,
    "forbidden": ErrorCode.PERMISSION_DENIED,
    "parse": ErrorCode.PARSE_ERROR,
    "json": ErrorCode.PARSE_ERROR,
    "decode": ErrorCode.PARSE_ERROR,
    "notfound": ErrorCode.NOT_FOUND,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to an error code, by type first and then by name/message."""
    for exc_type, code in _TYPE_CODES:
        if isinstance(exc, exc_type):
            return code
    return _classify_cached(f"{type(exc).__name__} {exc}")


class FailureReport(BaseModel):
    """Serializable description of a captured failure.

    Attributes:
        error_type: Qualified name of the captured exception class
        module: Module defining the exception class
        message: ``str()`` of the exception (possibly truncated)
        code: Coarse classification from ``classify_exception``
        details: Formatted traceback, when requested and available
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "title": "Failure Report",
            "description": "Captured failure from a Result chain",
            "examples": [{
                "error_type": "ValueError",
                "module": "builtins",
                "message": "invalid literal for int() with base 10: 'x'",
                "code": "INVALID_VALUE",
            }],
        },
    )

    error_type: Annotated[str, Field(min_length=1, description="Exception class name")]
    module: str = Field(default="builtins", description="Module of the exception class")
    message: str = Field(default="", description="Exception message")
    code: ErrorCode = Field(default=ErrorCode.UNKNOWN, description="Coarse error classification")
    details: str | None = Field(default=None, description="Formatted traceback")

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | BaseException) -> str:
        """Accept exception objects and extract message."""
        return str(v) if isinstance(v, BaseException) else v

    @computed_field
    @property
    def is_filter_rejection(self) -> bool:
        """Whether the failure came from a rejected filter rather than a raise."""
        return self.code == ErrorCode.FILTER_REJECTED

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        include_traceback: bool = True,
        max_message_length: int | None = None,
        tb: TracebackType | None = None,
    ) -> Self:
        """Build a report from a captured exception.

        ``tb`` overrides ``exc.__traceback__``, for callers holding the traceback
        as it was when the exception was caught.
        """
        message = str(exc)
        if max_message_length is not None and len(message) > max_message_length:
            message = message[:max_message_length] + "..."
        details = None
        tb = exc.__traceback__ if tb is None else tb
        if include_traceback and tb is not None:
            details = "".join(traceback.format_exception(type(exc), exc, tb)).rstrip()
        return cls(
            error_type=type(exc).__qualname__,
            module=type(exc).__module__,
            message=message,
            code=classify_exception(exc),
            details=details,
        )

    def render(self) -> str:
        """Format report as a human-readable string."""
        parts = [f"{self.error_type} [{self.code}]"]
        if self.message:
            parts.append(f": {self.message}")
        if self.details:
            parts.append(f"\n\nDetails:\n{self.details}")
        return "".join(parts)

    __str__ = render
