"""
Dependency edge repository for database operations.
"""

from typing import Optional, List

from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from .base import BaseRepository
from ..models import TaskDependencyModel


class DependencyRepository(BaseRepository[TaskDependencyModel]):
    """Repository for TaskDependency operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, TaskDependencyModel)

    async def get_by_pair(
        self,
        dependent_task_id: int,
        prerequisite_task_id: int,
    ) -> Optional[TaskDependencyModel]:
        """Get the edge for a (dependent, prerequisite) pair."""
        result = await self.session.execute(
            select(TaskDependencyModel)
            .where(TaskDependencyModel.dependent_task_id == dependent_task_id)
            .where(TaskDependencyModel.prerequisite_task_id == prerequisite_task_id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_dependent(self, task_id: int) -> List[TaskDependencyModel]:
        """Edges where the task waits on a prerequisite."""
        result = await self.session.execute(
            select(TaskDependencyModel)
            .where(TaskDependencyModel.dependent_task_id == task_id)
            .order_by(TaskDependencyModel.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_prerequisite(self, task_id: int) -> List[TaskDependencyModel]:
        """Edges where other tasks wait on this task."""
        result = await self.session.execute(
            select(TaskDependencyModel)
            .where(TaskDependencyModel.prerequisite_task_id == task_id)
            .order_by(TaskDependencyModel.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_plan(self, plan_id: int) -> List[TaskDependencyModel]:
        """All edges of a plan."""
        result = await self.session.execute(
            select(TaskDependencyModel)
            .where(TaskDependencyModel.plan_id == plan_id)
            .order_by(TaskDependencyModel.id.asc())
        )
        return list(result.scalars().all())

    async def delete_for_task(self, task_id: int) -> int:
        """Delete edges where the task is either endpoint."""
        result = await self.session.execute(
            delete(TaskDependencyModel).where(
                or_(
                    TaskDependencyModel.dependent_task_id == task_id,
                    TaskDependencyModel.prerequisite_task_id == task_id,
                )
            )
        )
        await self.session.flush()
        return result.rowcount
