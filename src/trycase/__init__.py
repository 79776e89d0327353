"""Exception capture as values, with railway-style chaining.

Wraps synchronous, potentially-raising callables in a Result that is either
a Success holding a value or a Failure holding the captured exception.
Chained operations short-circuit on Failure; typed ``recover`` calls
dispatch on the exception class.

Example:
    >>> from trycase import invoke
    >>>
    >>> price = (
    ...     invoke(lambda: "12.50")
    ...     .map(float)
    ...     .filter(lambda p: p > 0)
    ...     .recover(ValueError, lambda e: 0.0)
    ... )
    >>> assert price.get() == 12.5
"""

from .errors import (
    ErrorCode,
    FailureGroup,
    FailureReport,
    NotAFailure,
    PredicateNotSatisfied,
    TrycaseError,
    classify_exception,
)
from .result import (
    Failure,
    Result,
    Success,
    attempt,
    collect_results,
    invoke,
    sequence,
    traverse,
)

__all__ = [
    # Core type
    "Result",
    "Success",
    "Failure",
    # Factories
    "invoke",
    "attempt",
    # Collection operations
    "sequence",
    "traverse",
    "collect_results",
    # Errors
    "TrycaseError",
    "PredicateNotSatisfied",
    "NotAFailure",
    "FailureGroup",
    "ErrorCode",
    "FailureReport",
    "classify_exception",
]
