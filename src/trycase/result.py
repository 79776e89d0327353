"""Result type capturing the outcome of a potentially-raising computation.

Implements a closed two-variant union, Success or Failure, with a chaining
algebra that never raises:
- Factory: invoke, attempt
- Functor: map, map_failure
- Monad: flat_map (bind), flatten
- Recovery: recover, recover_with (untyped or typed by exception class)
- Filter: filter

Every callable handed to a chaining method runs under the same capture
discipline as ``invoke``: an ``Exception`` raised inside it becomes a
``Failure`` at that call boundary. Exceptions outside the ``Exception``
hierarchy (KeyboardInterrupt, SystemExit) propagate untouched.

``get()`` is the one place a captured exception is raised again.

Performance notes:
- Uses __slots__ and a boolean tag rather than two subclasses
- Failures pass through non-recovery operations as the same instance
"""

from __future__ import annotations

import inspect
from functools import wraps
from typing import TYPE_CHECKING, Callable, Generic, NoReturn, ParamSpec, TypeAlias, TypeVar, Union, overload

from .errors import FailureGroup, FailureReport, NotAFailure, PredicateNotSatisfied
from .logging import log_capture
from .settings import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from types import TracebackType

T = TypeVar("T")
U = TypeVar("U")
X = TypeVar("X", bound=Exception)
P = ParamSpec("P")

ExcTypes: TypeAlias = Union[type[X], tuple[type[X], ...]]

_OK = True
_ERR = False


class Result(Generic[T]):
    """Discriminated union of Success (a value) and Failure (a captured exception).

    Immutable: every operation returns a Result, never mutates one.

    Examples:
        >>> invoke(lambda: 42).map(lambda x: x + 1).get()
        43
        >>> invoke(lambda: int("x")).is_failure()
        True
        >>> (invoke(lambda: int("x"))
        ...     .recover(KeyError, lambda e: -1)
        ...     .recover(ValueError, lambda e: 0)
        ...     .get())
        0
    """

    __slots__ = ("_value", "_is_ok", "_trace")
    __match_args__ = ("_value",)

    def __init__(self, value: T | Exception, is_ok: bool) -> None:
        if not is_ok and not isinstance(value, Exception):
            raise TypeError(f"Failure requires an Exception instance, got {type(value).__name__}")
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_is_ok", is_ok)
        # Traceback as captured; raising the error again in get() extends the live one
        object.__setattr__(self, "_trace", None if is_ok else value.__traceback__)  # type: ignore[union-attr]

    @classmethod
    def of(cls, operation: Callable[[], T]) -> Result[T]:
        """Alias for ``invoke``."""
        return _capture(operation)

    # ─── Status ──────────────────────────────────────────────────────────

    def is_success(self) -> bool:
        return self._is_ok

    def is_failure(self) -> bool:
        return not self._is_ok

    # ─── Extraction ──────────────────────────────────────────────────────

    def get(self) -> T:
        """Return the success value, or raise the captured exception.

        The exception keeps the traceback and context it was captured with,
        however often ``get()`` is called.
        """
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        err: Exception = self._value  # type: ignore[assignment]
        context = err.__context__
        try:
            raise err
        finally:
            err.__traceback__ = self._trace
            err.__context__ = context

    @property
    def value(self) -> T:
        """Read-only accessor equivalent to ``get()``."""
        return self.get()

    @property
    def error(self) -> Exception:
        """Captured exception. Raises NotAFailure on Success."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise NotAFailure(self._value)

    def get_or(self, default: T) -> T:
        """Success value or ``default``."""
        return self._value if self._is_ok else default  # type: ignore[return-value]

    def get_or_else(self, f: Callable[[Exception], T]) -> T:
        """Success value, or ``f(error)``. Terminal: a raise in ``f`` propagates."""
        return self._value if self._is_ok else f(self._value)  # type: ignore[return-value,arg-type]

    def success(self) -> T | None:
        return self._value if self._is_ok else None  # type: ignore[return-value]

    def failure(self) -> Exception | None:
        return None if self._is_ok else self._value  # type: ignore[return-value]

    def fold(self, *, success: Callable[[T], U], failure: Callable[[Exception], U]) -> U:
        """Exhaustive case analysis. Forces handling both variants."""
        return success(self._value) if self._is_ok else failure(self._value)  # type: ignore[arg-type]

    def to_tuple(self) -> tuple[T | None, Exception | None]:
        return (self._value, None) if self._is_ok else (None, self._value)  # type: ignore[return-value]

    def report(self, *, include_traceback: bool | None = None, max_message_length: int | None = None) -> FailureReport | None:
        """Describe the captured failure, or None on Success.

        Defaults come from ``TRYCASE_REPORT_*`` settings.
        """
        if self._is_ok:
            return None
        defaults = get_settings().report
        if include_traceback is None:
            include_traceback = defaults.include_traceback
        if max_message_length is None:
            max_message_length = defaults.max_message_length
        return FailureReport.from_exception(
            self._value,  # type: ignore[arg-type]
            include_traceback=include_traceback and self._trace is not None,
            max_message_length=max_message_length,
            tb=self._trace,
        )

    # ─── Transform ───────────────────────────────────────────────────────

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Apply f to the success value. Signature: Result[T] → (T→U) → Result[U]"""
        return _capture(f, self._value) if self._is_ok else self  # type: ignore[return-value]

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Monadic bind (>>=). Signature: Result[T] → (T→Result[U]) → Result[U]

        A raise inside ``f`` is captured, as is ``f`` returning something
        other than a Result (as a TypeError).
        """
        return _bind(f, self._value) if self._is_ok else self  # type: ignore[return-value]

    def and_then(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Alias for flat_map."""
        return _bind(f, self._value) if self._is_ok else self  # type: ignore[return-value]

    def flatten(self: Result[Result[U]]) -> Result[U]:
        """Result[Result[U]] → Result[U]"""
        return _bind(_identity, self._value) if self._is_ok else self  # type: ignore[return-value,arg-type]

    def filter(self, predicate: Callable[[T], bool], error: Callable[[T], Exception] | None = None) -> Result[T]:
        """Keep the success only if ``predicate`` holds.

        A rejected value becomes a Failure carrying PredicateNotSatisfied, or
        the exception built by ``error(value)`` when given.
        """
        if not self._is_ok:
            return self
        try:
            keep = bool(predicate(self._value))
        except Exception as exc:
            return _captured(exc, predicate)
        if keep:
            return self
        if error is None:
            return _captured(PredicateNotSatisfied(self._value), predicate)
        return _as_failure(_capture(error, self._value), error)

    # ─── Recovery ────────────────────────────────────────────────────────

    @overload
    def recover(self, f: Callable[[Exception], T], /) -> Result[T]: ...
    @overload
    def recover(self, exc_type: ExcTypes[X], f: Callable[[X], T], /) -> Result[T]: ...

    def recover(self, *args: object) -> Result[T]:
        """Turn a matching Failure into ``Success(f(error))``.

        With one argument every failure matches. With an exception class (or
        tuple of classes) first, only failures whose error is an instance of
        it match; others pass through for a later ``recover``. Chained calls
        form a cascade where the first match wins.
        """
        exc_type, f = _recovery_args("recover", args)
        if self._is_ok or not isinstance(self._value, exc_type):
            return self
        return _capture(f, self._value)

    @overload
    def recover_with(self, f: Callable[[Exception], Result[T]], /) -> Result[T]: ...
    @overload
    def recover_with(self, exc_type: ExcTypes[X], f: Callable[[X], Result[T]], /) -> Result[T]: ...

    def recover_with(self, *args: object) -> Result[T]:
        """Like ``recover``, but ``f`` returns a Result which replaces the failure."""
        exc_type, f = _recovery_args("recover_with", args)
        if self._is_ok or not isinstance(self._value, exc_type):
            return self
        return _bind(f, self._value)

    @overload
    def map_failure(self, f: Callable[[Exception], Exception], /) -> Result[T]: ...
    @overload
    def map_failure(self, exc_type: ExcTypes[X], f: Callable[[X], Exception], /) -> Result[T]: ...

    def map_failure(self, *args: object) -> Result[T]:
        """Replace a matching captured exception with ``f(error)``."""
        exc_type, f = _recovery_args("map_failure", args)
        if self._is_ok or not isinstance(self._value, exc_type):
            return self
        return _as_failure(_capture(f, self._value), f)

    def or_else(self, other: Result[T]) -> Result[T]:
        """Return self if Success, else other."""
        return self if self._is_ok else other

    # ─── Side Effects ────────────────────────────────────────────────────

    def on_success(self, f: Callable[[T], object]) -> Result[T]:
        """Call f with the success value, return self. A raise in f is captured."""
        if not self._is_ok:
            return self
        outcome = _capture(f, self._value)
        return self if outcome._is_ok else outcome  # type: ignore[return-value]

    def on_failure(self, f: Callable[[Exception], object]) -> Result[T]:
        """Call f with the captured error, return self. A raise in f replaces the failure."""
        if self._is_ok:
            return self
        outcome = _capture(f, self._value)
        return self if outcome._is_ok else outcome  # type: ignore[return-value]

    # ─── Dunder Methods ──────────────────────────────────────────────────

    __bool__ = lambda self: self._is_ok  # noqa: E731
    __hash__ = lambda self: hash((self._is_ok, self._value))  # noqa: E731
    __repr__ = lambda self: f"{'Success' if self._is_ok else 'Failure'}({self._value!r})"  # noqa: E731
    __str__ = __repr__

    def __eq__(self, other: object) -> bool:
        return self._is_ok == other._is_ok and self._value == other._value if isinstance(other, Result) else NotImplemented

    def __iter__(self) -> Iterator[T]:
        """Yields the value if Success, nothing if Failure."""
        if self._is_ok:
            yield self._value  # type: ignore[misc]

    def __setattr__(self, name: str, value: object) -> NoReturn:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> NoReturn:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self) -> tuple[type[Result[T]], tuple[object, bool]]:
        return (Result, (self._value, self._is_ok))


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


def Success(value: T) -> Result[T]:  # noqa: N802
    """Construct the Success variant."""
    return Result(value, _OK)


def Failure(error: Exception) -> Result[T]:  # noqa: N802
    """Construct the Failure variant. ``error`` must be an Exception instance."""
    return Result(error, _ERR)


def invoke(operation: Callable[[], T]) -> Result[T]:
    """Run ``operation`` and capture its outcome. Never raises an Exception.

    Example:
        >>> invoke(lambda: 1 / 0)
        Failure(ZeroDivisionError('division by zero'))
    """
    return _capture(operation)


def attempt(func: Callable[P, T]) -> Callable[P, Result[T]]:
    """Decorator: make ``func`` return a Result instead of raising.

    Example:
        >>> @attempt
        ... def parse(s: str) -> int:
        ...     return int(s)
        >>> parse("12")
        Success(12)
    """
    if inspect.iscoroutinefunction(func):
        raise TypeError(f"attempt() wraps synchronous callables only, got coroutine function {func.__qualname__}")

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> Result[T]:
        return _capture(func, *args, **kwargs)

    return wrapper


# ═══════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═══════════════════════════════════════════════════════════════════════════════


def sequence(results: Iterable[Result[T]]) -> Result[list[T]]:
    """Iterable[Result[T]] → Result[list[T]]. Fail-fast on first Failure."""
    values: list[T] = []
    for r in results:
        if not r._is_ok:
            return r  # type: ignore[return-value]
        values.append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK)


def traverse(items: Iterable[T], f: Callable[[T], Result[U]]) -> Result[list[U]]:
    """Bind f over items and sequence the results. Fail-fast on first Failure."""
    values: list[U] = []
    for item in items:
        r = _bind(f, item)
        if not r._is_ok:
            return r  # type: ignore[return-value]
        values.append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK)


def collect_results(results: Iterable[Result[T]]) -> Result[list[T]]:
    """Collect all Results; on any Failure, fail with a FailureGroup of ALL errors."""
    values: list[T] = []
    errors: list[Exception] = []
    for r in results:
        (values if r._is_ok else errors).append(r._value)  # type: ignore[arg-type]
    if not errors:
        return Result(values, _OK)
    return Result(FailureGroup(f"{len(errors)} of {len(values) + len(errors)} results failed", errors), _ERR)


# ═══════════════════════════════════════════════════════════════════════════════
# Capture Discipline
# ═══════════════════════════════════════════════════════════════════════════════


def _capture(fn: Callable[..., U], *args: object, **kwargs: object) -> Result[U]:
    try:
        return Result(fn(*args, **kwargs), _OK)
    except Exception as exc:
        return _captured(exc, fn)


def _captured(exc: Exception, fn: object) -> Result[T]:
    _report_capture(exc, fn)
    return Result(exc, _ERR)


def _bind(f: Callable[[T], Result[U]], arg: T) -> Result[U]:
    outcome = _capture(f, arg)
    if not outcome._is_ok:
        return outcome
    if isinstance(outcome._value, Result):
        return outcome._value
    return _captured(TypeError(f"{_name_of(f)} returned {type(outcome._value).__name__}, expected Result"), f)


def _as_failure(outcome: Result[object], fn: object) -> Result[T]:
    """Turn the outcome of an error-producing callable into a Failure."""
    if not outcome._is_ok:
        return outcome  # type: ignore[return-value]
    if isinstance(outcome._value, Exception):
        return _captured(outcome._value, fn)
    return _captured(TypeError(f"{_name_of(fn)} returned {type(outcome._value).__name__}, expected Exception"), fn)


def _recovery_args(method: str, args: tuple[object, ...]) -> tuple[ExcTypes[Exception], Callable[[Exception], object]]:
    match args:
        case (f,) if callable(f) and not _is_exc_types(f):
            return Exception, f
        case (exc_type, f) if _is_exc_types(exc_type) and callable(f):
            return exc_type, f  # type: ignore[return-value]
    raise TypeError(f"{method}() takes (f) or (exception_type, f), got {args!r}")


def _is_exc_types(obj: object) -> bool:
    if isinstance(obj, tuple):
        return bool(obj) and all(_is_exc_types(o) for o in obj)
    return isinstance(obj, type) and issubclass(obj, BaseException)


def _report_capture(exc: Exception, fn: object) -> None:
    # Reporting must never turn a captured failure back into a raise
    try:
        if get_settings().logging.captures:
            log_capture(exc, _name_of(fn))
    except Exception:  # noqa: BLE001
        return


def _name_of(fn: object) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


def _identity(x: T) -> T:
    return x
