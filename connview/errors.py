"""Client-safe snapshots of connection failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

UNKNOWN_ERROR_MESSAGE = "Unknown error"

_MAX_CAUSE_DEPTH = 10
_ERROR_CODE_ATTRIBUTES = ("sqlstate", "pgcode", "code")


@dataclass(frozen=True, slots=True)
class ErrorSnapshot:
    """Immutable record of a failure, safe to hand to remote clients.

    Only the message, the exception type name, an optional vendor/SQLSTATE
    code and the chain of causes are kept; tracebacks and exception objects
    are dropped so the snapshot can be serialized and compared by value.
    """

    message: str
    error_type: str
    error_code: str | None = None
    cause: ErrorSnapshot | None = None

    @classmethod
    def from_failure(cls, failure: BaseException) -> ErrorSnapshot:
        """Capture ``failure`` and its causes. Never raises."""

        return _snapshot(failure, depth=0, seen=set())

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of the snapshot and its causes."""

        return {
            "message": self.message,
            "errorType": self.error_type,
            "errorCode": self.error_code,
            "cause": self.cause.to_dict() if self.cause is not None else None,
        }


def _snapshot(failure: BaseException, *, depth: int, seen: set[int]) -> ErrorSnapshot:
    seen.add(id(failure))
    cause: ErrorSnapshot | None = None
    parent = _next_cause(failure)
    if parent is not None and id(parent) not in seen and depth + 1 < _MAX_CAUSE_DEPTH:
        cause = _snapshot(parent, depth=depth + 1, seen=seen)
    error_type = _type_name(failure)
    return ErrorSnapshot(
        message=_message_for(failure) or error_type or UNKNOWN_ERROR_MESSAGE,
        error_type=error_type or UNKNOWN_ERROR_MESSAGE,
        error_code=_error_code_for(failure),
        cause=cause,
    )


def _next_cause(failure: BaseException) -> BaseException | None:
    if failure.__cause__ is not None:
        return failure.__cause__
    if failure.__suppress_context__:
        return None
    return failure.__context__


def _message_for(failure: BaseException) -> str:
    try:
        return str(failure).strip()
    except Exception:
        # str() is user code on custom exceptions and may itself blow up.
        return ""


def _type_name(failure: BaseException) -> str:
    return getattr(type(failure), "__name__", "") or ""


def _error_code_for(failure: BaseException) -> str | None:
    for attribute in _ERROR_CODE_ATTRIBUTES:
        try:
            value = getattr(failure, attribute, None)
        except Exception:
            continue
        if isinstance(value, bool):
            continue
        if isinstance(value, int) or (isinstance(value, str) and value):
            return str(value)
    return None


__all__ = ["ErrorSnapshot", "UNKNOWN_ERROR_MESSAGE"]
