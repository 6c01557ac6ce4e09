from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class TaskRef(BaseModel):
    """A plan task as seen by the dependency engine."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    plan_id: int
    status: TaskStatus = TaskStatus.NOT_STARTED
    title: Optional[str] = None  # used only for warning content

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED
