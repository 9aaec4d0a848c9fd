"""Typed outcomes of directory store calls.

Store calls return either ``Ok`` wrapping the decoded value or an
``ApiError`` describing why the call failed. Callers branch on the result
instead of catching exceptions, since recovery depends on the error kind
(a missing root is created, anything else is reported).

Usage:
    result = await client.fetch(sid)
    if isinstance(result, ApiError):
        ...
    node = result.value
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ApiErrorKind(str, Enum):
    """Failure categories reported by the transport client."""

    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"
    TRANSPORT_ERROR = "transport_error"

    @classmethod
    def from_status(cls, status: int) -> "ApiErrorKind":
        if status == 403:
            return cls.FORBIDDEN
        if status == 404:
            return cls.NOT_FOUND
        return cls.INTERNAL_ERROR


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful store call."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ApiError:
    """Failed store call.

    ``status`` is None for transport errors, where no response was received.
    ``context`` is the human-readable description of what was being attempted.
    """

    kind: ApiErrorKind
    message: str
    status: Optional[int] = None
    context: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False

    def with_context(self, context: str) -> "ApiError":
        return replace(self, context=context)

    def __str__(self) -> str:
        detail = f"{self.status} {self.message}" if self.status is not None else self.message
        if self.context:
            return f"{self.context}: {detail}"
        return detail


ApiResult = Union[Ok[T], ApiError]
