"""
Exceptions raised by the dependency engine.

Every error carries a stable code, a category used for response mapping and
a details payload with enough structure to render a specific warning.
"""

from typing import Optional, Dict, Any, List, Sequence


class ErrorCategory:
    """Error categories"""
    STRUCTURAL = "structural"
    SEMANTIC = "semantic"
    STATE = "state"
    NOT_FOUND = "not_found"
    ACCESS = "access"


class DependencyEngineError(Exception):
    """Base error for the dependency engine"""

    category: str = ErrorCategory.STRUCTURAL
    http_status: int = 400

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            message: human readable message
            code: stable error code
            details: structured payload for the caller
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert the error to a dictionary"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# =============================================================================
# Structural errors
# =============================================================================

class SelfReferenceError(DependencyEngineError):
    """Raised when a task is made to depend on itself"""

    category = ErrorCategory.STRUCTURAL
    http_status = 400

    def __init__(self, task_id: int):
        super().__init__(
            message="Task cannot depend on itself",
            code="SELF_REFERENCE",
            details={"taskId": task_id}
        )
        self.task_id = task_id


class DuplicateEdgeError(DependencyEngineError):
    """Raised when the dependency pair already exists"""

    category = ErrorCategory.STRUCTURAL
    http_status = 409

    def __init__(self, dependent_task_id: int, prerequisite_task_id: int):
        super().__init__(
            message="Dependency already exists",
            code="DUPLICATE_EDGE",
            details={
                "dependentTaskId": dependent_task_id,
                "prerequisiteTaskId": prerequisite_task_id,
            }
        )
        self.dependent_task_id = dependent_task_id
        self.prerequisite_task_id = prerequisite_task_id


class CrossPlanEdgeError(DependencyEngineError):
    """Raised when the two endpoints belong to different plans"""

    category = ErrorCategory.STRUCTURAL
    http_status = 400

    def __init__(
        self,
        dependent_task_id: int,
        prerequisite_task_id: int,
        dependent_plan_id: int,
        prerequisite_plan_id: int,
    ):
        super().__init__(
            message="Tasks must belong to the same plan",
            code="CROSS_PLAN_EDGE",
            details={
                "dependentTaskId": dependent_task_id,
                "prerequisiteTaskId": prerequisite_task_id,
                "dependentPlanId": dependent_plan_id,
                "prerequisitePlanId": prerequisite_plan_id,
            }
        )


# =============================================================================
# Semantic / state errors
# =============================================================================

class CircularDependencyError(DependencyEngineError):
    """Raised when a new edge would close a cycle"""

    category = ErrorCategory.SEMANTIC
    http_status = 400

    def __init__(self, cycle_path: Sequence[int]):
        path = list(cycle_path)
        rendered = " -> ".join(str(task_id) for task_id in path)
        super().__init__(
            message=f"Cannot add dependency: circular dependency detected ({rendered})",
            code="CIRCULAR_DEPENDENCY",
            details={"cyclePath": path}
        )
        self.cycle_path: List[int] = path


class IncompletePrerequisitesError(DependencyEngineError):
    """Raised when completing a task whose prerequisites are not completed"""

    category = ErrorCategory.STATE
    http_status = 409

    def __init__(self, task_id: int, incomplete: Sequence[Any]):
        prerequisites = list(incomplete)
        super().__init__(
            message=(
                f"Task {task_id} has {len(prerequisites)} incomplete "
                f"prerequisite(s); pass override to complete it anyway"
            ),
            code="INCOMPLETE_PREREQUISITES",
            details={
                "taskId": task_id,
                "incompletePrerequisites": [
                    p.model_dump(mode="json", by_alias=True) if hasattr(p, "model_dump") else p
                    for p in prerequisites
                ],
            }
        )
        self.task_id = task_id
        self.incomplete_prerequisites = prerequisites


# =============================================================================
# Not found / access errors
# =============================================================================

class TaskNotFoundError(DependencyEngineError):
    """Raised when a task cannot be resolved"""

    category = ErrorCategory.NOT_FOUND
    http_status = 404

    def __init__(self, task_id: int):
        super().__init__(
            message=f"Task '{task_id}' not found",
            code="TASK_NOT_FOUND",
            details={"taskId": task_id}
        )
        self.task_id = task_id


class PlanNotFoundError(DependencyEngineError):
    """Raised when a plan cannot be resolved"""

    category = ErrorCategory.NOT_FOUND
    http_status = 404

    def __init__(self, plan_id: int):
        super().__init__(
            message=f"Plan '{plan_id}' not found",
            code="PLAN_NOT_FOUND",
            details={"planId": plan_id}
        )
        self.plan_id = plan_id


class EdgeNotFoundError(DependencyEngineError):
    """Raised when a dependency edge id does not exist"""

    category = ErrorCategory.NOT_FOUND
    http_status = 404

    def __init__(self, edge_id: int):
        super().__init__(
            message=f"Dependency '{edge_id}' not found",
            code="EDGE_NOT_FOUND",
            details={"edgeId": edge_id}
        )
        self.edge_id = edge_id


class AccessDeniedError(DependencyEngineError):
    """Raised when the principal may not access the plan"""

    category = ErrorCategory.ACCESS
    http_status = 403

    def __init__(self, principal_id: Any, plan_id: int):
        super().__init__(
            message="Access denied",
            code="ACCESS_DENIED",
            details={"principalId": principal_id, "planId": plan_id}
        )
        self.principal_id = principal_id
        self.plan_id = plan_id
