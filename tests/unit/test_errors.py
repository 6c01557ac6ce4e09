"""
Error taxonomy and error response tests
"""

import pytest

from plan_dependencies.errors import (
    AccessDeniedError,
    CircularDependencyError,
    DependencyEngineError,
    DuplicateEdgeError,
    EdgeNotFoundError,
    ErrorCategory,
    ErrorResponse,
    ErrorSeverity,
    ErrorType,
    IncompletePrerequisitesError,
    SelfReferenceError,
)
from plan_dependencies.models import TaskRef


class TestExceptions:
    """Exception payloads"""

    def test_circular_dependency_carries_path(self):
        error = CircularDependencyError([3, 2, 1, 3])

        assert error.code == "CIRCULAR_DEPENDENCY"
        assert error.category == ErrorCategory.SEMANTIC
        assert error.details == {"cyclePath": [3, 2, 1, 3]}
        assert "3 -> 2 -> 1 -> 3" in error.message

    def test_incomplete_prerequisites_serializes_tasks(self):
        error = IncompletePrerequisitesError(5, [TaskRef(id=1, plan_id=9, title="Research")])

        assert error.category == ErrorCategory.STATE
        assert error.to_dict()["details"]["incompletePrerequisites"] == [
            {"id": 1, "planId": 9, "status": "not_started", "title": "Research"}
        ]

    @pytest.mark.parametrize(
        "error, category, status",
        [
            (SelfReferenceError(1), ErrorCategory.STRUCTURAL, 400),
            (DuplicateEdgeError(2, 1), ErrorCategory.STRUCTURAL, 409),
            (EdgeNotFoundError(7), ErrorCategory.NOT_FOUND, 404),
            (AccessDeniedError(2, 1), ErrorCategory.ACCESS, 403),
        ],
    )
    def test_categories_and_status(self, error, category, status):
        assert isinstance(error, DependencyEngineError)
        assert error.category == category
        assert error.http_status == status


class TestErrorResponse:
    """ErrorResponse.from_exception"""

    def test_engine_error(self):
        response = ErrorResponse.from_exception(CircularDependencyError([1, 2, 1]), trace_id="t-1")
        body = response.to_dict()

        assert body["success"] is False
        assert body["error"]["code"] == "CIRCULAR_DEPENDENCY"
        assert body["error"]["type"] == ErrorType.VALIDATION.value
        assert body["error"]["details"] == {"cyclePath": [1, 2, 1]}
        assert body["error"]["traceId"] == "t-1"
        assert response.status_code == 400

    def test_state_error_is_a_warning(self):
        response = ErrorResponse.from_exception(IncompletePrerequisitesError(2, []))

        assert response.severity == ErrorSeverity.WARNING
        assert response.error_type == ErrorType.BUSINESS
        assert response.status_code == 409

    def test_access_error(self):
        response = ErrorResponse.from_exception(AccessDeniedError(2, 1))

        assert response.error_type == ErrorType.AUTH
        assert response.status_code == 403

    def test_unexpected_exception(self):
        response = ErrorResponse.from_exception(RuntimeError("boom"))

        assert response.error_code == "INTERNAL_ERROR"
        assert response.status_code == 500
        assert response.to_dict()["error"]["message"] == "boom"
