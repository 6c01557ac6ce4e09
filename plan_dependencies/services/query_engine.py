"""
Dependency Query Engine

Binds the pure graph views to a store and the task collaborator. Reads take
no lock; they may observe a graph that a concurrent mutation is changing.
"""

import logging
from typing import Dict, List

from ..collaborators import TaskProvider
from ..errors import PlanNotFoundError, TaskNotFoundError
from ..graph import (
    DependencyGraph,
    incomplete_prerequisites,
    plan_dependency_map,
    ready_tasks,
    validate_candidate,
)
from ..models import (
    DependencyValidation,
    PlanDependencyMap,
    TaskDependencies,
    TaskRef,
)
from ..store import DependencyStore

logger = logging.getLogger(__name__)


class DependencyQueryEngine:
    """
    Task-level and plan-level dependency views.

    Every lookup is direct (one hop). Blocking only looks at the completion
    state of direct prerequisites.
    """

    def __init__(self, store: DependencyStore, tasks: TaskProvider):
        self.store = store
        self.tasks = tasks

    async def require_task(self, task_id: int) -> TaskRef:
        task = await self.tasks.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def require_plan_tasks(self, plan_id: int) -> List[TaskRef]:
        plan_tasks = await self.tasks.get_plan_tasks(plan_id)
        if plan_tasks is None:
            raise PlanNotFoundError(plan_id)
        return plan_tasks

    async def get_prerequisites(self, task_id: int) -> List[int]:
        edges = await self.store.edges_for_task(task_id)
        return [edge.prerequisite_task_id for edge in edges.as_dependent]

    async def get_dependents(self, task_id: int) -> List[int]:
        edges = await self.store.edges_for_task(task_id)
        return [edge.dependent_task_id for edge in edges.as_prerequisite]

    async def get_task_dependencies(self, task_id: int) -> TaskDependencies:
        edges = await self.store.edges_for_task(task_id)
        return TaskDependencies(
            prerequisites=[edge.prerequisite_task_id for edge in edges.as_dependent],
            dependents=[edge.dependent_task_id for edge in edges.as_prerequisite],
        )

    async def get_incomplete_prerequisites(self, task_id: int) -> List[TaskRef]:
        """
        Direct prerequisites of task_id that are not completed.

        Raises:
            TaskNotFoundError: task_id does not exist
        """
        await self.require_task(task_id)
        edges = await self.store.edges_for_task(task_id)
        graph = DependencyGraph.from_edges(edges.as_dependent)

        prerequisites: Dict[int, TaskRef] = {}
        for prereq_id in graph.prerequisites_of(task_id):
            prereq = await self.tasks.get_task(prereq_id)
            if prereq is not None:
                prerequisites[prereq_id] = prereq

        return incomplete_prerequisites(task_id, graph, prerequisites)

    async def is_blocked(self, task_id: int) -> bool:
        return bool(await self.get_incomplete_prerequisites(task_id))

    async def get_ready_tasks(self, plan_id: int) -> List[TaskRef]:
        plan_tasks = await self.require_plan_tasks(plan_id)
        graph = DependencyGraph.from_edges(await self.store.edges_for_plan(plan_id))
        return ready_tasks(plan_tasks, graph)

    async def get_plan_dependency_map(self, plan_id: int) -> PlanDependencyMap:
        plan_tasks = await self.require_plan_tasks(plan_id)
        edges = await self.store.edges_for_plan(plan_id)
        return plan_dependency_map((task.id for task in plan_tasks), edges)

    async def validate_dependency(
        self,
        dependent_task_id: int,
        prerequisite_task_id: int,
    ) -> DependencyValidation:
        """
        Dry-run of add-dependency; never mutates.

        Raises:
            TaskNotFoundError: either task does not exist
        """
        dependent = await self.require_task(dependent_task_id)
        prerequisite = await self.require_task(prerequisite_task_id)
        edges = await self.store.edges_for_plan(dependent.plan_id)

        validation = validate_candidate(dependent, prerequisite, edges)
        logger.debug(
            "Validated %s -> %s: valid=%s errors=%s",
            dependent_task_id, prerequisite_task_id, validation.is_valid, validation.errors,
        )
        return validation
