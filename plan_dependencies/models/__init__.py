from .task import TaskStatus, TaskRef
from .dependency import (
    DependencyEdge,
    TaskEdges,
    TaskDependencies,
    DependencyValidation,
    OverrideEvent,
    PlanDependencyMap,
    utcnow,
)

__all__ = [
    "TaskStatus",
    "TaskRef",
    "DependencyEdge",
    "TaskEdges",
    "TaskDependencies",
    "DependencyValidation",
    "OverrideEvent",
    "PlanDependencyMap",
    "utcnow",
]
