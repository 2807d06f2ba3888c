"""
core/results.py -- Uniform outcome envelope returned by every core service.

Pattern: Result object. Predictable failures (bad input, duplicate user,
wrong password, unknown city, quota spent) are values, not exceptions. The
transport layer maps Result.status to an HTTP status 1:1, which is why the
StatusCode members carry the HTTP numbers directly.

Invariant (checked on construction):
  success <=> status is StatusCode.OK
  failure  => data is None
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Generic, TypeVar

from core.messages import MessageKey

T = TypeVar("T")


class StatusCode(IntEnum):
    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    NOT_FOUND = 404
    CONFLICT = 409
    TOO_MANY_REQUESTS = 429
    INTERNAL_ERROR = 500


@dataclass(frozen=True)
class Result(Generic[T]):
    success: bool
    status: StatusCode
    message: MessageKey
    data: T | None = None

    def __post_init__(self) -> None:
        if self.success != (self.status is StatusCode.OK):
            raise ValueError(f"Result success={self.success} contradicts status {self.status.name}")
        if not self.success and self.data is not None:
            raise ValueError("Failed Result must not carry data")

    @classmethod
    def ok(cls, data: T | None, message: MessageKey) -> Result[T]:
        return cls(success=True, status=StatusCode.OK, message=message, data=data)

    @classmethod
    def fail(cls, status: StatusCode, message: MessageKey) -> Result[T]:
        return cls(success=False, status=status, message=message)


class ResultError(Exception):
    """Carries a failed Result out of a FastAPI dependency.

    Dependencies cannot return a response, so the bearer check and the rate
    guard raise this instead; api/main.py renders it as the same envelope a
    route would have returned.
    """

    def __init__(self, result: Result, headers: dict[str, str] | None = None) -> None:
        if result.success:
            raise ValueError("ResultError requires a failed Result")
        super().__init__(result.message.value)
        self.result = result
        self.headers = headers or {}
