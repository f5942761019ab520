"""Outcome values returned by the domain services.

Expected rejections (duplicate names, missing records, constraint
violations) travel back to the HTTP layer as `ServiceResult` values
rather than exceptions, so every caller handles them through one channel.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    DUPLICATE_KEY = "duplicate_key"
    NOT_FOUND = "not_found"
    INTEGRITY_VIOLATION = "integrity_violation"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ServiceResult:
    """Either a successful `value` or an `error` kind with a `detail` text."""
    value: Any = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "ServiceResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: Optional[str] = None) -> "ServiceResult":
        return cls(error=error, detail=detail)
