"""Tests for exception classification and failure reports."""

from __future__ import annotations

import pytest

from trycase import (
    ErrorCode,
    FailureReport,
    NotAFailure,
    PredicateNotSatisfied,
    Success,
    TrycaseError,
    classify_exception,
    invoke,
)


class JSONDecodeFailure(Exception):
    pass


class Mystery(Exception):
    pass


@pytest.mark.parametrize(("exc", "code"), [
    (PredicateNotSatisfied(1), ErrorCode.FILTER_REJECTED),
    (TimeoutError(), ErrorCode.TIMEOUT),
    (PermissionError(), ErrorCode.PERMISSION_DENIED),
    (ConnectionRefusedError(), ErrorCode.NETWORK_ERROR),
    (FileNotFoundError(), ErrorCode.NOT_FOUND),
    (IsADirectoryError(), ErrorCode.IO_ERROR),
    (KeyError("k"), ErrorCode.NOT_FOUND),
    (ZeroDivisionError(), ErrorCode.ARITHMETIC),
    (TypeError(), ErrorCode.INVALID_TYPE),
    (ValueError(), ErrorCode.INVALID_VALUE),
    (JSONDecodeFailure(), ErrorCode.PARSE_ERROR),
    (Mystery("upstream connection reset"), ErrorCode.NETWORK_ERROR),
    (Mystery("???"), ErrorCode.UNKNOWN),
])
def test_classify_exception(exc: Exception, code: ErrorCode) -> None:
    assert classify_exception(exc) is code


def test_library_errors_share_base() -> None:
    assert issubclass(PredicateNotSatisfied, TrycaseError)
    assert issubclass(NotAFailure, TrycaseError)


def test_predicate_not_satisfied_keeps_value() -> None:
    err = PredicateNotSatisfied([1, 2])
    assert err.value == [1, 2]
    assert "[1, 2]" in str(err)


# ═════════════════════════════════════════════════════════════════════════════
# Failure Reports
# ═════════════════════════════════════════════════════════════════════════════


def test_report_of_raised_error() -> None:
    report = invoke(lambda: int("x")).report()

    assert report is not None
    assert report.error_type == "ValueError"
    assert report.module == "builtins"
    assert report.code is ErrorCode.INVALID_VALUE
    assert "invalid literal" in report.message
    assert report.details is not None and "Traceback" in report.details
    assert not report.is_filter_rejection


def test_report_of_success_is_none() -> None:
    assert Success(1).report() is None


def test_report_without_traceback() -> None:
    report = invoke(lambda: int("x")).report(include_traceback=False)
    assert report is not None
    assert report.details is None


def test_report_of_filter_rejection() -> None:
    report = Success(3).filter(lambda x: x > 5).report()

    assert report is not None
    assert report.code is ErrorCode.FILTER_REJECTED
    assert report.is_filter_rejection
    assert report.details is None  # never raised, so no traceback


def test_report_truncates_message() -> None:
    def fail() -> None:
        raise ValueError("a" * 20)

    report = invoke(fail).report(max_message_length=5)
    assert report is not None
    assert report.message == "aaaaa..."


def test_report_zero_message_length() -> None:
    report = invoke(lambda: int("abc")).report(max_message_length=0)
    assert report is not None
    assert report.message == "..."


def test_report_serializes() -> None:
    report = invoke(lambda: 1 / 0).report(include_traceback=False)
    assert report is not None

    data = report.model_dump(mode="json")

    assert data["error_type"] == "ZeroDivisionError"
    assert data["code"] == "ARITHMETIC"
    assert data["is_filter_rejection"] is False
    assert FailureReport.model_validate_json(report.model_dump_json(exclude={"is_filter_rejection"})) == report


def test_report_is_frozen() -> None:
    report = FailureReport(error_type="ValueError")
    with pytest.raises(Exception):  # noqa: B017 - pydantic ValidationError
        report.message = "changed"  # type: ignore[misc]


def test_report_render() -> None:
    report = FailureReport(error_type="KeyError", message="'k'", code=ErrorCode.NOT_FOUND)
    assert report.render() == "KeyError [NOT_FOUND]: 'k'"
    assert str(report) == report.render()


def test_report_accepts_exception_message() -> None:
    report = FailureReport(error_type="ValueError", message=ValueError("bad"))  # type: ignore[arg-type]
    assert report.message == "bad"
