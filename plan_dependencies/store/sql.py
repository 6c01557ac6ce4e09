"""
SQLAlchemy dependency store

Runs inside the caller's request-scoped session, so a validate-and-write
sequence is one transaction. On PostgreSQL plan_lock() takes a
transaction-scoped advisory lock keyed by plan id; other dialects fall back
to a process-local lock per plan.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.models import TaskDependencyModel
from ..database.repositories import DependencyRepository
from ..models import DependencyEdge, TaskEdges
from .base import DependencyStore
from .locks import PlanLocks

# First key of the two-key advisory lock, so plan locks do not collide with
# other advisory lock users of the same database.
ADVISORY_LOCK_NAMESPACE = 0x5044  # "PD"

_local_plan_locks = PlanLocks()


def to_edge(row: TaskDependencyModel) -> DependencyEdge:
    return DependencyEdge(
        id=row.id,
        dependent_task_id=row.dependent_task_id,
        prerequisite_task_id=row.prerequisite_task_id,
        plan_id=row.plan_id,
        created_at=row.created_at,
    )


class SqlAlchemyDependencyStore(DependencyStore):
    """Edge store over the task_dependencies table."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._repository = DependencyRepository(session)

    @property
    def dialect_name(self) -> str:
        return self.session.get_bind().dialect.name

    async def get_edge(self, edge_id: int) -> Optional[DependencyEdge]:
        row = await self._repository.get_by_id(edge_id)
        return to_edge(row) if row else None

    async def find_edge(
        self, dependent_task_id: int, prerequisite_task_id: int
    ) -> Optional[DependencyEdge]:
        row = await self._repository.get_by_pair(dependent_task_id, prerequisite_task_id)
        return to_edge(row) if row else None

    async def edges_for_task(self, task_id: int) -> TaskEdges:
        return TaskEdges(
            as_dependent=[to_edge(r) for r in await self._repository.get_by_dependent(task_id)],
            as_prerequisite=[to_edge(r) for r in await self._repository.get_by_prerequisite(task_id)],
        )

    async def edges_for_plan(self, plan_id: int) -> List[DependencyEdge]:
        return [to_edge(row) for row in await self._repository.get_by_plan(plan_id)]

    async def remove_all_edges_for_task(self, task_id: int) -> int:
        return await self._repository.delete_for_task(task_id)

    @asynccontextmanager
    async def plan_lock(self, plan_id: int) -> AsyncIterator[None]:
        if self.dialect_name == "postgresql":
            # Released automatically when the transaction ends
            await self.session.execute(
                text("SELECT pg_advisory_xact_lock(:namespace, :plan_id)"),
                {"namespace": ADVISORY_LOCK_NAMESPACE, "plan_id": plan_id},
            )
            yield
        else:
            async with _local_plan_locks.hold(plan_id):
                yield

    async def _insert_edge(
        self, dependent_task_id: int, prerequisite_task_id: int, plan_id: int
    ) -> DependencyEdge:
        row = await self._repository.create(
            dependent_task_id=dependent_task_id,
            prerequisite_task_id=prerequisite_task_id,
            plan_id=plan_id,
        )
        return to_edge(row)

    async def _delete_edge(self, edge_id: int) -> bool:
        return await self._repository.delete(edge_id)
