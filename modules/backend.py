"""
Data Backend Boundary
=====================

Every call into the data backend returns a BackendResult: either the data
or a BackendError with an explicit ErrorKind. Pages branch on the result
instead of catching whatever the database driver raised.

Remote functions (server-side operations that are more than one table
write, like deleting a user together with everything they own) are
registered by name and called through invoke_function().

Usage:
    result = run_backend_call("listing users", _load_users)
    if result.ok:
        users = result.data
    else:
        st.error(f"Error fetching users: {result.error.message}")

Author: Admin Dashboard Team
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from modules.records import InvalidRecordError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# RESULT TYPES
# =============================================================================

class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INVALID_RECORD = "invalid_record"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    UNAVAILABLE = "unavailable"


class BackendError(Exception):
    """A failed backend call. Also raised by BackendResult.unwrap()."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"BackendError({self.kind.value!r}, {self.message!r})"


@dataclass(frozen=True)
class BackendResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[BackendError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.data


def success(data: Any = None) -> BackendResult:
    return BackendResult(data=data)


def failure(kind: ErrorKind, message: str) -> BackendResult:
    return BackendResult(error=BackendError(kind, message))


def run_backend_call(action: str, call: Callable[[], T]) -> BackendResult[T]:
    """
    Run a backend call and turn known exceptions into an error result.

    Args:
        action: Short description for the log, e.g. "listing payments"
        call: Zero-argument callable doing the actual work

    Returns:
        success(call()) or a failure with the matching ErrorKind
    """
    try:
        return success(call())
    except BackendError as e:
        return BackendResult(error=e)
    except InvalidRecordError as e:
        logger.error(f"Invalid record while {action}: {e}")
        return failure(ErrorKind.INVALID_RECORD, str(e))
    except IntegrityError as e:
        logger.error(f"Conflict while {action}: {e.orig}")
        return failure(ErrorKind.CONFLICT, str(e.orig))
    except SQLAlchemyError as e:
        logger.error(f"Database error while {action}: {e}")
        return failure(ErrorKind.UNAVAILABLE, str(e))


# =============================================================================
# REMOTE FUNCTIONS
# =============================================================================

RemoteFunction = Callable[[Mapping[str, Any]], Any]

_FUNCTIONS: Dict[str, RemoteFunction] = {}


def remote_function(name: str) -> Callable[[RemoteFunction], RemoteFunction]:
    """Register a function callable through invoke_function(name, body)."""
    def decorator(func: RemoteFunction) -> RemoteFunction:
        _FUNCTIONS[name] = func
        return func
    return decorator


def registered_functions() -> list:
    return sorted(_FUNCTIONS)


def invoke_function(name: str, body: Optional[Mapping[str, Any]] = None) -> BackendResult:
    """
    Invoke a registered remote function.

    Returns:
        The function's return value as data, a NOT_FOUND failure for unknown
        names, or whatever error the function raised as a typed failure.
    """
    func = _FUNCTIONS.get(name)
    if func is None:
        return failure(ErrorKind.NOT_FOUND, f"Function '{name}' does not exist")

    logger.info(f"Invoking remote function: {name}")
    return run_backend_call(f"invoking {name}", lambda: func(body or {}))
