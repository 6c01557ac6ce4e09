"""
Errors - typed errors and the standard error response.
"""

from .exceptions import (
    ErrorCategory,
    DependencyEngineError,
    SelfReferenceError,
    DuplicateEdgeError,
    CrossPlanEdgeError,
    CircularDependencyError,
    IncompletePrerequisitesError,
    TaskNotFoundError,
    PlanNotFoundError,
    EdgeNotFoundError,
    AccessDeniedError,
)

from .error_response import ErrorResponse, ErrorType, ErrorSeverity

__all__ = [
    # Exceptions
    "ErrorCategory",
    "DependencyEngineError",
    "SelfReferenceError",
    "DuplicateEdgeError",
    "CrossPlanEdgeError",
    "CircularDependencyError",
    "IncompletePrerequisitesError",
    "TaskNotFoundError",
    "PlanNotFoundError",
    "EdgeNotFoundError",
    "AccessDeniedError",

    # Response
    "ErrorResponse",
    "ErrorType",
    "ErrorSeverity",
]
