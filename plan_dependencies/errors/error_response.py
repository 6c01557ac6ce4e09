"""
ErrorResponse - standard error envelope

Turns engine errors into the response body the surrounding API returns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from uuid import uuid4

from .exceptions import DependencyEngineError, ErrorCategory


class ErrorType(str, Enum):
    """Error type"""
    AUTH = "auth"
    VALIDATION = "validation"
    BUSINESS = "business"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    """Error severity"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_CATEGORY_TYPES = {
    ErrorCategory.STRUCTURAL: ErrorType.VALIDATION,
    ErrorCategory.SEMANTIC: ErrorType.VALIDATION,
    ErrorCategory.STATE: ErrorType.BUSINESS,
    ErrorCategory.NOT_FOUND: ErrorType.BUSINESS,
    ErrorCategory.ACCESS: ErrorType.AUTH,
}


@dataclass
class ErrorResponse:
    """Standard error response"""
    error_code: str
    message: str
    error_type: ErrorType = ErrorType.SYSTEM
    severity: ErrorSeverity = ErrorSeverity.ERROR
    status_code: int = 500
    details: Optional[Dict[str, Any]] = None
    trace_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "type": self.error_type.value,
                "severity": self.severity.value,
                "message": self.message,
                "details": self.details,
                "traceId": self.trace_id,
                "timestamp": self.timestamp.isoformat()
            }
        }

    @classmethod
    def from_exception(cls, exception: Exception, trace_id: Optional[str] = None):
        """Build an ErrorResponse from an exception"""
        if isinstance(exception, DependencyEngineError):
            return cls(
                error_code=exception.code,
                message=exception.message,
                error_type=_CATEGORY_TYPES.get(exception.category, ErrorType.BUSINESS),
                # State errors are recoverable by the caller via override
                severity=(
                    ErrorSeverity.WARNING
                    if exception.category == ErrorCategory.STATE
                    else ErrorSeverity.ERROR
                ),
                status_code=exception.http_status,
                details=exception.details,
                trace_id=trace_id or str(uuid4())
            )

        return cls(
            error_code="INTERNAL_ERROR",
            message=str(exception),
            error_type=ErrorType.SYSTEM,
            severity=ErrorSeverity.ERROR,
            trace_id=trace_id or str(uuid4())
        )
