"""
Derived dependency views over a DependencyGraph.

Blocking is one-hop: a task is blocked when any direct prerequisite is not
completed. Transitive reachability is never consulted.
"""

from typing import Iterable, List, Mapping, Optional, Sequence

from ..models import (
    DependencyValidation,
    PlanDependencyMap,
    TaskDependencies,
    TaskRef,
    TaskStatus,
)
from .adjacency import CandidateEdge, DependencyGraph, EdgeLike
from .cycle_detector import would_create_cycle


def is_blocked(
    task_id: int,
    graph: DependencyGraph,
    statuses: Mapping[int, TaskStatus],
) -> bool:
    """
    A prerequisite missing from statuses is a dangling edge left by a
    deleted task; it does not block.
    """
    return any(
        prereq_id in statuses and statuses[prereq_id] != TaskStatus.COMPLETED
        for prereq_id in graph.prerequisites_of(task_id)
    )


def incomplete_prerequisites(
    task_id: int,
    graph: DependencyGraph,
    tasks: Mapping[int, TaskRef],
) -> List[TaskRef]:
    """Direct prerequisites of task_id that are not completed."""
    return [
        tasks[prereq_id]
        for prereq_id in graph.prerequisites_of(task_id)
        if prereq_id in tasks and not tasks[prereq_id].is_completed
    ]


def ready_tasks(tasks: Sequence[TaskRef], graph: DependencyGraph) -> List[TaskRef]:
    """Tasks that are not started and have no incomplete prerequisite."""
    statuses = {task.id: task.status for task in tasks}
    return [
        task for task in tasks
        if task.status == TaskStatus.NOT_STARTED
        and not is_blocked(task.id, graph, statuses)
    ]


def plan_dependency_map(
    task_ids: Iterable[int],
    edges: Iterable[EdgeLike],
) -> PlanDependencyMap:
    """Every task of the plan is a key, including tasks with no edges."""
    graph = DependencyGraph.from_edges(edges, task_ids=task_ids)
    dependency_map = PlanDependencyMap()
    for task_id in graph.task_ids:
        dependency_map[task_id] = TaskDependencies(
            prerequisites=graph.prerequisites_of(task_id),
            dependents=graph.dependents_of(task_id),
        )
    return dependency_map


def validate_candidate(
    dependent: TaskRef,
    prerequisite: TaskRef,
    plan_edges: Sequence[EdgeLike],
) -> DependencyValidation:
    """
    Report every reason the edge dependent -> prerequisite would be rejected.

    Structural problems are reported without traversing the graph; the
    cycle check only runs when the edge is structurally sound.
    """
    errors: List[str] = []
    cycle_path: Optional[List[int]] = None

    if dependent.id == prerequisite.id:
        errors.append("Task cannot depend on itself")
    if dependent.plan_id != prerequisite.plan_id:
        errors.append("Tasks must belong to the same plan")
    if any(
        edge.dependent_task_id == dependent.id
        and edge.prerequisite_task_id == prerequisite.id
        for edge in plan_edges
    ):
        errors.append("Dependency already exists")

    if not errors:
        report = would_create_cycle(
            plan_edges, CandidateEdge(dependent.id, prerequisite.id)
        )
        if report is not None:
            errors.append("Circular dependency detected")
            cycle_path = report.cycle

    return DependencyValidation(
        is_valid=not errors,
        errors=errors,
        cycle_path=cycle_path,
    )
