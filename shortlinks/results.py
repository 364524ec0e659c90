"""Tagged results returned by the service layer."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import ErrorKind, ShortenerError


@dataclass
class ServiceResult:
    """Outcome of a service operation: success with data, or failure with a kind."""

    success: bool
    data: Any = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
    details: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str, details: Optional[List[str]] = None) -> "ServiceResult":
        return cls(success=False, error_kind=kind, error=error, details=list(details or [error]))

    @classmethod
    def from_exception(cls, exc: ShortenerError) -> "ServiceResult":
        return cls.fail(exc.kind, exc.message, exc.details)

    @property
    def message(self) -> Optional[str]:
        """First detail, used as the short error message."""
        if self.success:
            return None
        return self.details[0] if self.details else self.error

    def to_error_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error,
            "message": self.message,
            "details": self.details,
        }
