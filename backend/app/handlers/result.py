"""Tagged results returned by every request handler."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    """Why a handler refused a request."""

    bad_request = "bad_request"
    not_found = "not_found"
    forbidden = "forbidden"


@dataclass(frozen=True)
class Ok:
    """Successful outcome; ``None`` payload renders as an empty object."""

    payload: dict[str, Any] | None = None


@dataclass(frozen=True)
class Fail:
    """Refused outcome.

    ``payload`` optionally carries resource state to return alongside the
    error (the unmodified document on a forbidden update).
    """

    kind: FailureKind
    message: str
    payload: dict[str, Any] | None = None


HandlerResult = Ok | Fail


def bad_request(message: str) -> Fail:
    return Fail(FailureKind.bad_request, message)


def not_found(message: str = "Not found") -> Fail:
    return Fail(FailureKind.not_found, message)


def forbidden(message: str = "Forbidden", payload: dict[str, Any] | None = None) -> Fail:
    return Fail(FailureKind.forbidden, message, payload)
