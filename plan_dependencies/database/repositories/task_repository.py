"""
Plan and task repository.

Implements the task lookup, status mutation and plan access contracts on
top of the action_plans / plan_tasks tables.
"""

from datetime import datetime, timezone
from typing import Any, Optional, List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .base import BaseRepository
from ..models import PlanModel, PlanTaskModel
from ...collaborators import AccessPolicy, TaskProvider
from ...errors import TaskNotFoundError
from ...models import TaskRef, TaskStatus


def to_task_ref(task: PlanTaskModel) -> TaskRef:
    return TaskRef(
        id=task.id,
        plan_id=task.plan_id,
        status=TaskStatus(task.status),
        title=task.title,
    )


class PlanTaskRepository(BaseRepository[PlanTaskModel], TaskProvider, AccessPolicy):
    """Repository for plan task operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PlanTaskModel)

    async def create_plan(self, user_id: int, title: str) -> PlanModel:
        """Create a plan owned by user_id."""
        plan = PlanModel(user_id=user_id, title=title)
        self.session.add(plan)
        await self.session.flush()
        await self.session.refresh(plan)
        return plan

    async def create_task(
        self,
        plan_id: int,
        title: str,
        status: TaskStatus = TaskStatus.NOT_STARTED,
    ) -> PlanTaskModel:
        """Create a task in a plan."""
        return await self.create(plan_id=plan_id, title=title, status=status.value)

    async def get_task(self, task_id: int) -> Optional[TaskRef]:
        task = await self.get_by_id(task_id)
        return to_task_ref(task) if task else None

    async def get_plan_tasks(self, plan_id: int) -> Optional[List[TaskRef]]:
        plan = await self.session.get(PlanModel, plan_id)
        if plan is None:
            return None
        result = await self.session.execute(
            select(PlanTaskModel)
            .where(PlanTaskModel.plan_id == plan_id)
            .order_by(PlanTaskModel.id.asc())
        )
        return [to_task_ref(task) for task in result.scalars().all()]

    async def set_task_status(self, task_id: int, status: TaskStatus) -> TaskRef:
        """
        Write the status.

        completed_at is stamped when the task becomes completed and cleared
        when it leaves the completed state.
        """
        current = await self.get_by_id(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        now = datetime.now(timezone.utc)
        values = {"status": status.value, "updated_at": now}
        if status == TaskStatus.COMPLETED and current.status != TaskStatus.COMPLETED.value:
            values["completed_at"] = now
        elif status != TaskStatus.COMPLETED and current.status == TaskStatus.COMPLETED.value:
            values["completed_at"] = None

        await self.session.execute(
            update(PlanTaskModel)
            .where(PlanTaskModel.id == task_id)
            .values(**values)
        )
        await self.session.flush()
        await self.session.refresh(current)
        return to_task_ref(current)

    async def can_access_plan(self, principal_id: Any, plan_id: int) -> bool:
        """Only the plan owner has access."""
        result = await self.session.execute(
            select(PlanModel.id)
            .where(PlanModel.id == plan_id)
            .where(PlanModel.user_id == principal_id)
        )
        return result.scalar_one_or_none() is not None
