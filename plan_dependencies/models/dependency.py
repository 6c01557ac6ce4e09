from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DependencyEdge(_CamelModel):
    """dependent_task_id cannot start until prerequisite_task_id is completed."""

    id: int
    dependent_task_id: int
    prerequisite_task_id: int
    plan_id: int
    created_at: datetime = Field(default_factory=utcnow)


class TaskEdges(_CamelModel):
    as_dependent: List[DependencyEdge] = Field(default_factory=list)
    as_prerequisite: List[DependencyEdge] = Field(default_factory=list)


class TaskDependencies(_CamelModel):
    prerequisites: List[int] = Field(default_factory=list)
    dependents: List[int] = Field(default_factory=list)


class DependencyValidation(_CamelModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    cycle_path: Optional[List[int]] = None


class OverrideEvent(_CamelModel):
    """Audit payload for a completion forced past incomplete prerequisites."""

    task_id: int
    principal_id: Any
    overrode_prerequisites: bool = True
    incomplete_prerequisite_ids: List[int] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utcnow)


class PlanDependencyMap(Dict[int, TaskDependencies]):
    """Per-request view of a plan's graph, keyed by task id."""

    def to_dict(self) -> Dict[str, Dict[str, List[int]]]:
        # JSON object keys must be strings
        return {
            str(task_id): deps.model_dump(mode="json")
            for task_id, deps in self.items()
        }
