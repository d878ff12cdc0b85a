"""Typed operation outcomes returned by the attachment service.

Expected failures (missing record, denied access, missing file, failed insert)
are returned as ``Failure`` values instead of being raised, so callers branch
on ``result.ok`` and read either ``value`` or ``reason``/``message``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Literal, TypeVar, Union

T = TypeVar("T")


class FailureReason(str, Enum):
    """Why an attachment operation did not succeed."""

    PERSISTENCE_FAILURE = "persistence_failure"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FILE_MISSING = "file_missing"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> Literal[True]:
        return True


@dataclass(frozen=True)
class Failure:
    reason: FailureReason
    message: str

    @property
    def ok(self) -> Literal[False]:
        return False


Result = Union[Success[T], Failure]
