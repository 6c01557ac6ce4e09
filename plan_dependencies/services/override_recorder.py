"""
Override Recorder - completion gate

Decides whether completing a task is rejected, allowed, or allowed as an
override, and emits the override audit record after the status write
succeeds.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Sequence

from ..collaborators import AuditSink, TaskProvider
from ..errors import IncompletePrerequisitesError
from ..models import TaskRef, TaskStatus, utcnow
from .query_engine import DependencyQueryEngine

logger = logging.getLogger(__name__)


class CompletionDecision(str, Enum):
    """Outcome of evaluating a completion request"""
    PROCEED = "proceed"
    REJECT = "reject"
    PROCEED_WITH_OVERRIDE = "proceed_with_override"


def decide_completion(incomplete: Sequence[TaskRef], override: bool) -> CompletionDecision:
    if not incomplete:
        return CompletionDecision.PROCEED
    if override:
        return CompletionDecision.PROCEED_WITH_OVERRIDE
    return CompletionDecision.REJECT


class OverrideRecorder:
    """
    Gate task completion against dependency state.

    The override flag is a per-call parameter, never stored on the task.
    """

    def __init__(
        self,
        queries: DependencyQueryEngine,
        tasks: TaskProvider,
        audit: AuditSink,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.queries = queries
        self.tasks = tasks
        self.audit = audit
        self._clock = clock

    async def complete_with_override_check(
        self,
        task_id: int,
        principal_id: Any,
        override: bool = False,
    ) -> TaskRef:
        """
        Complete a task, enforcing its prerequisites.

        Args:
            task_id: task to complete
            principal_id: who asked
            override: complete even when prerequisites are incomplete

        Returns:
            The task in its new state

        Raises:
            IncompletePrerequisitesError: blocked and override is False;
                nothing is written
            TaskNotFoundError: the task does not exist
        """
        incomplete = await self.queries.get_incomplete_prerequisites(task_id)
        decision = decide_completion(incomplete, override)

        if decision == CompletionDecision.REJECT:
            logger.warning(
                "Rejected completion of task %s: %d incomplete prerequisite(s)",
                task_id, len(incomplete),
            )
            raise IncompletePrerequisitesError(task_id, incomplete)

        # A failed status write propagates before any audit record exists
        updated = await self.tasks.set_task_status(task_id, TaskStatus.COMPLETED)

        if decision == CompletionDecision.PROCEED_WITH_OVERRIDE:
            await self.audit.record_override(
                task_id,
                principal_id,
                self._clock(),
                {"incompletePrerequisiteIds": [task.id for task in incomplete]},
            )
            logger.info(
                "Task %s completed by %s overriding prerequisites %s",
                task_id, principal_id, [task.id for task in incomplete],
            )

        return updated
