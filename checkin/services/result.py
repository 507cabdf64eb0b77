"""
Result values returned by every public service operation.

Services never let an exception escape to their caller; they return a
``ServiceResult`` that is either a success carrying data or a failure
carrying a typed ``ServiceError``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


class ErrorKind(str, Enum):
    """Failure taxonomy shared by the store adapter and the services."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POLICY_VIOLATION = "POLICY_VIOLATION"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    UNKNOWN = "UNKNOWN"


@dataclass
class ServiceError:
    kind: ErrorKind
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Success/failure outcome of a service operation.

    Attributes:
        is_success: Operation success indicator
        data: Result data (a successful ``None`` is meaningful, e.g. "no facilitator")
        error: Error information (if failed)
        message: Human-readable status message
        partial: Set when some steps were persisted and a later one failed
        metadata: Additional context information
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None
    partial: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(
        cls,
        data: Optional[TData] = None,
        message: Optional[str] = None,
        *,
        partial: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(
            is_success=True,
            data=data,
            message=message,
            partial=partial,
            metadata=metadata or {},
        )

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        data: Optional[TData] = None,
        partial: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(
            is_success=False,
            data=data,
            error=ServiceError(kind=kind, message=message, details=details),
            message=message,
            partial=partial,
        )

    @classmethod
    def from_error(cls, error: ServiceError) -> "ServiceResult[TData]":
        """Re-wrap another operation's failure, e.g. a failed transfer inside assign."""
        return cls(is_success=False, error=error, message=error.message)

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None
