"""
Collaborator contracts

The engine reads task state, checks plan access, writes completion status
and emits audit records through these interfaces. SQL implementations live
in plan_dependencies.database.repositories; the in-memory ones below serve
tests and local development.
"""

import itertools
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import TaskNotFoundError
from .models import OverrideEvent, TaskRef, TaskStatus


class TaskProvider(ABC):
    """Task lookup and status mutation"""

    @abstractmethod
    async def get_task(self, task_id: int) -> Optional[TaskRef]:
        """Resolve a task, or None when it does not exist"""
        pass

    @abstractmethod
    async def get_plan_tasks(self, plan_id: int) -> Optional[List[TaskRef]]:
        """All tasks of a plan; None when the plan does not exist"""
        pass

    @abstractmethod
    async def set_task_status(self, task_id: int, status: TaskStatus) -> TaskRef:
        """Write a new status; raises TaskNotFoundError for unknown tasks"""
        pass


class AccessPolicy(ABC):
    """Plan-level authorization"""

    @abstractmethod
    async def can_access_plan(self, principal_id: Any, plan_id: int) -> bool:
        pass


class AuditSink(ABC):
    """Receives override records for the task history"""

    @abstractmethod
    async def record_override(
        self,
        task_id: int,
        principal_id: Any,
        timestamp: datetime,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass


class InMemoryTaskBoard(TaskProvider, AccessPolicy):
    """
    Dict-backed plans and tasks.

    A principal can access a plan when it owns it.
    """

    def __init__(self):
        self._tasks: Dict[int, TaskRef] = {}
        self._plan_owners: Dict[int, Any] = {}
        self._task_ids = itertools.count(1)
        self._plan_ids = itertools.count(1)

    def add_plan(self, owner_id: Any, plan_id: Optional[int] = None) -> int:
        plan_id = plan_id if plan_id is not None else next(self._plan_ids)
        self._plan_owners[plan_id] = owner_id
        return plan_id

    def add_task(
        self,
        plan_id: int,
        title: Optional[str] = None,
        status: TaskStatus = TaskStatus.NOT_STARTED,
        task_id: Optional[int] = None,
    ) -> TaskRef:
        if plan_id not in self._plan_owners:
            raise KeyError(f"Unknown plan: {plan_id}")
        task_id = task_id if task_id is not None else next(self._task_ids)
        task = TaskRef(id=task_id, plan_id=plan_id, status=status, title=title)
        self._tasks[task_id] = task
        return task

    def delete_task(self, task_id: int) -> None:
        self._tasks.pop(task_id, None)

    async def get_task(self, task_id: int) -> Optional[TaskRef]:
        return self._tasks.get(task_id)

    async def get_plan_tasks(self, plan_id: int) -> Optional[List[TaskRef]]:
        if plan_id not in self._plan_owners:
            return None
        return [task for task in self._tasks.values() if task.plan_id == plan_id]

    async def set_task_status(self, task_id: int, status: TaskStatus) -> TaskRef:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        updated = task.model_copy(update={"status": status})
        self._tasks[task_id] = updated
        return updated

    async def can_access_plan(self, principal_id: Any, plan_id: int) -> bool:
        return plan_id in self._plan_owners and self._plan_owners[plan_id] == principal_id


class InMemoryAuditSink(AuditSink):
    """Keeps override records in a list."""

    def __init__(self):
        self.records: List[OverrideEvent] = []

    async def record_override(
        self,
        task_id: int,
        principal_id: Any,
        timestamp: datetime,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        self.records.append(OverrideEvent(
            task_id=task_id,
            principal_id=principal_id,
            incomplete_prerequisite_ids=details.get("incompletePrerequisiteIds", []),
            timestamp=timestamp,
        ))

    def for_task(self, task_id: int) -> List[OverrideEvent]:
        return [record for record in self.records if record.task_id == task_id]
