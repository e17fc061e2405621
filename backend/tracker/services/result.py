"""
Typed outcome of a service call. Services return Ok or Err; the API layer renders either into
the {success, status, message, data} envelope (see tracker.api.responses).
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


# Duplicate unique fields are reported as 400, not 409
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class Ok:
    data: Any = None
    message: str = "Success"
    status: int = 200

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def status(self) -> int:
        return STATUS_BY_KIND[self.kind]


Result = Ok | Err


def invalid(message: str, detail: str | None = None) -> Err:
    return Err(ErrorKind.VALIDATION, message, detail)


def unauthorized(message: str) -> Err:
    return Err(ErrorKind.UNAUTHORIZED, message)


def forbidden(message: str) -> Err:
    return Err(ErrorKind.FORBIDDEN, message)


def not_found(message: str) -> Err:
    return Err(ErrorKind.NOT_FOUND, message)


def conflict(message: str, detail: str | None = None) -> Err:
    return Err(ErrorKind.CONFLICT, message, detail)
