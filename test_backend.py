"""
Tests for the typed backend results and remote functions.
Run with: pytest test_backend.py
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from modules.backend import (
    BackendError,
    ErrorKind,
    failure,
    invoke_function,
    registered_functions,
    remote_function,
    run_backend_call,
    success,
)
from modules.records import InvalidRecordError


def test_success_and_unwrap():
    result = success([1, 2])

    assert result.ok
    assert result.unwrap() == [1, 2]


def test_failure_unwrap_raises():
    result = failure(ErrorKind.NOT_FOUND, "User not found")

    assert not result.ok
    with pytest.raises(BackendError) as exc_info:
        result.unwrap()
    assert exc_info.value.kind is ErrorKind.NOT_FOUND


def _raise(exc):
    def call():
        raise exc
    return call


@pytest.mark.parametrize("exc,kind", [
    (BackendError(ErrorKind.VALIDATION, "bad"), ErrorKind.VALIDATION),
    (InvalidRecordError("payment", "p1", "negative amount"), ErrorKind.INVALID_RECORD),
    (IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")), ErrorKind.CONFLICT),
    (OperationalError("SELECT", {}, Exception("database is locked")), ErrorKind.UNAVAILABLE),
])
def test_exceptions_become_typed_errors(exc, kind):
    result = run_backend_call("testing", _raise(exc))

    assert result.error.kind is kind


def test_unexpected_exceptions_propagate():
    with pytest.raises(ZeroDivisionError):
        run_backend_call("testing", lambda: 1 / 0)


def test_unknown_function_is_not_found():
    result = invoke_function("does-not-exist", {})

    assert result.error.kind is ErrorKind.NOT_FOUND


def test_registered_function_receives_body():
    @remote_function("echo-test")
    def echo(body):
        return dict(body)

    result = invoke_function("echo-test", {"a": 1})

    assert "echo-test" in registered_functions()
    assert result.data == {"a": 1}
