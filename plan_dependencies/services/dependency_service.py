"""
Dependency Service

Operations exposed to the surrounding API: dependency mutation and query,
gated completion, and the cascade hook for task deletion. Every principal
bound operation checks plan access before touching the graph.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..collaborators import (
    AccessPolicy,
    AuditSink,
    InMemoryAuditSink,
    InMemoryTaskBoard,
    TaskProvider,
)
from ..errors import (
    AccessDeniedError,
    CircularDependencyError,
    CrossPlanEdgeError,
    DuplicateEdgeError,
    EdgeNotFoundError,
    PlanNotFoundError,
    SelfReferenceError,
)
from ..graph import CandidateEdge, would_create_cycle
from ..models import (
    DependencyEdge,
    DependencyValidation,
    PlanDependencyMap,
    TaskDependencies,
    TaskRef,
)
from ..store import DependencyStore, create_store
from .override_recorder import OverrideRecorder
from .query_engine import DependencyQueryEngine

logger = logging.getLogger(__name__)


class DependencyService:
    """
    Task dependency operations.

    Example:
        service = create_dependency_service("memory")
        edge = await service.add_dependency(task_b, task_a, user_id)
        ready = await service.get_ready_tasks(plan_id, user_id)
    """

    def __init__(
        self,
        store: DependencyStore,
        tasks: TaskProvider,
        access: AccessPolicy,
        audit: AuditSink,
    ):
        self.store = store
        self.tasks = tasks
        self.access = access
        self.queries = DependencyQueryEngine(store, tasks)
        self.overrides = OverrideRecorder(self.queries, tasks, audit)

    # =========================================================================
    # Access helpers
    # =========================================================================

    async def _authorized_task(self, task_id: int, principal_id: Any) -> TaskRef:
        task = await self.queries.require_task(task_id)
        if not await self.access.can_access_plan(principal_id, task.plan_id):
            raise AccessDeniedError(principal_id, task.plan_id)
        return task

    async def _authorize_plan(self, plan_id: int, principal_id: Any) -> None:
        if await self.access.can_access_plan(principal_id, plan_id):
            return
        if await self.tasks.get_plan_tasks(plan_id) is None:
            raise PlanNotFoundError(plan_id)
        raise AccessDeniedError(principal_id, plan_id)

    # =========================================================================
    # Mutations
    # =========================================================================

    async def add_dependency(
        self,
        dependent_task_id: int,
        prerequisite_task_id: int,
        principal_id: Any,
    ) -> DependencyEdge:
        """
        Make dependent_task_id wait on prerequisite_task_id.

        Structural checks run before any traversal; the cycle check and the
        insert run under the plan lock so two concurrent adds cannot each
        pass validation against a stale graph.

        Raises:
            SelfReferenceError, TaskNotFoundError, AccessDeniedError,
            CrossPlanEdgeError, DuplicateEdgeError, CircularDependencyError
        """
        if dependent_task_id == prerequisite_task_id:
            raise SelfReferenceError(dependent_task_id)

        dependent = await self._authorized_task(dependent_task_id, principal_id)
        prerequisite = await self._authorized_task(prerequisite_task_id, principal_id)

        if dependent.plan_id != prerequisite.plan_id:
            raise CrossPlanEdgeError(
                dependent.id, prerequisite.id, dependent.plan_id, prerequisite.plan_id
            )

        async with self.store.plan_lock(dependent.plan_id):
            plan_edges = await self.store.edges_for_plan(dependent.plan_id)

            if any(
                edge.dependent_task_id == dependent.id
                and edge.prerequisite_task_id == prerequisite.id
                for edge in plan_edges
            ):
                raise DuplicateEdgeError(dependent.id, prerequisite.id)

            report = would_create_cycle(
                plan_edges, CandidateEdge(dependent.id, prerequisite.id)
            )
            if report is not None:
                logger.warning(
                    "Rejected dependency %s -> %s in plan %s: cycle %s",
                    dependent.id, prerequisite.id, dependent.plan_id, report.cycle,
                )
                raise CircularDependencyError(report.cycle)

            return await self.store.add_edge(dependent, prerequisite)

    async def remove_dependency(self, edge_id: int, principal_id: Any) -> None:
        """
        Raises:
            EdgeNotFoundError, AccessDeniedError
        """
        edge = await self.store.get_edge(edge_id)
        if edge is None:
            raise EdgeNotFoundError(edge_id)
        if not await self.access.can_access_plan(principal_id, edge.plan_id):
            raise AccessDeniedError(principal_id, edge.plan_id)

        async with self.store.plan_lock(edge.plan_id):
            await self.store.remove_edge(edge_id)

    async def remove_all_dependencies_for_task(self, task_id: int) -> int:
        """
        Cascade cleanup for a deleted task.

        Works whether the task row is already gone or not; the plan is taken
        from the edges themselves.
        """
        edges = await self.store.edges_for_task(task_id)
        touching = edges.as_dependent + edges.as_prerequisite
        if not touching:
            return 0

        async with self.store.plan_lock(touching[0].plan_id):
            removed = await self.store.remove_all_edges_for_task(task_id)

        logger.info("Removed %d dependencies of deleted task %s", removed, task_id)
        return removed

    # =========================================================================
    # Queries
    # =========================================================================

    async def validate_dependency(
        self,
        dependent_task_id: int,
        prerequisite_task_id: int,
    ) -> DependencyValidation:
        return await self.queries.validate_dependency(dependent_task_id, prerequisite_task_id)

    async def get_task_dependencies(self, task_id: int, principal_id: Any) -> TaskDependencies:
        await self._authorized_task(task_id, principal_id)
        return await self.queries.get_task_dependencies(task_id)

    async def get_incomplete_prerequisites(self, task_id: int, principal_id: Any) -> List[TaskRef]:
        await self._authorized_task(task_id, principal_id)
        return await self.queries.get_incomplete_prerequisites(task_id)

    async def is_task_blocked(self, task_id: int, principal_id: Any) -> bool:
        await self._authorized_task(task_id, principal_id)
        return await self.queries.is_blocked(task_id)

    async def get_ready_tasks(self, plan_id: int, principal_id: Any) -> List[TaskRef]:
        await self._authorize_plan(plan_id, principal_id)
        return await self.queries.get_ready_tasks(plan_id)

    async def get_plan_dependency_map(self, plan_id: int, principal_id: Any) -> PlanDependencyMap:
        await self._authorize_plan(plan_id, principal_id)
        return await self.queries.get_plan_dependency_map(plan_id)

    # =========================================================================
    # Completion
    # =========================================================================

    async def complete_with_override_check(
        self,
        task_id: int,
        principal_id: Any,
        override: bool = False,
    ) -> TaskRef:
        await self._authorized_task(task_id, principal_id)
        return await self.overrides.complete_with_override_check(task_id, principal_id, override)


def create_dependency_service(
    backend: str = "memory",
    session: Optional[AsyncSession] = None,
) -> DependencyService:
    """
    Service factory

    Args:
        backend: "memory" (in-process collaborators) or "sql" (repositories
            bound to session)
        session: request-scoped session, required for "sql"

    Returns:
        DependencyService
    """
    if backend == "memory":
        board = InMemoryTaskBoard()
        return DependencyService(
            store=create_store("memory"),
            tasks=board,
            access=board,
            audit=InMemoryAuditSink(),
        )
    elif backend == "sql":
        from ..database.repositories import AuditRepository, PlanTaskRepository

        if session is None:
            raise ValueError("The sql backend requires a session")
        repository = PlanTaskRepository(session)
        return DependencyService(
            store=create_store("sql", session=session),
            tasks=repository,
            access=repository,
            audit=AuditRepository(session),
        )
    else:
        raise ValueError(f"Unknown service backend: {backend}")
