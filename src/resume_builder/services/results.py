"""Explicit outcome type shared by store, editor, client and exporter.

Operations that may fail softly return an ``OperationResult`` instead of
raising, so callers decide whether a failure can be ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

__all__ = ["OperationResult", "ResultStatus"]

T = TypeVar("T")


class ResultStatus(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a soft-failing operation.

    Attributes:
        status: Whether the operation succeeded, failed, or did nothing.
        value: Payload on success.
        error: Human-readable reason on failure or skip.
    """

    status: ResultStatus
    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    @property
    def failed(self) -> bool:
        return self.status is ResultStatus.FAILURE

    @property
    def skipped(self) -> bool:
        return self.status is ResultStatus.SKIPPED

    @classmethod
    def success(cls, value: T | None = None) -> OperationResult[T]:
        return cls(ResultStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, error: str) -> OperationResult[T]:
        return cls(ResultStatus.FAILURE, error=error)

    @classmethod
    def skip(cls, reason: str) -> OperationResult[T]:
        return cls(ResultStatus.SKIPPED, error=reason)
