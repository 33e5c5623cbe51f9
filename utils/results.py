"""
Explicit result types returned by the store and auth layers.

Functions that can fail for an expected reason return a ``Failure``
instead of raising; the HTTP layer turns it into a status code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypeVar, Union


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"          # not found *or* not owned
    INTERNAL = "internal"


HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]


T = TypeVar("T")

Result = Union[T, Failure]
