"""
SQLAlchemy ORM models for the plan dependency engine.

Plans and tasks are owned by the task service; they are mapped here so the
engine's SQL collaborators can resolve tasks, check plan ownership and
write the completion status.
"""

from datetime import datetime, timezone
from typing import Optional, List

from sqlalchemy import (
    String,
    Text,
    Integer,
    DateTime,
    ForeignKey,
    JSON,
    CheckConstraint,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class PlanModel(Base):
    """Action plan ORM model."""
    __tablename__ = "action_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False
    )

    # Relationships
    tasks: Mapped[List["PlanTaskModel"]] = relationship(
        "PlanTaskModel",
        back_populates="plan",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Plan(id={self.id}, title='{self.title}', user_id={self.user_id})>"


class PlanTaskModel(Base):
    """Plan task ORM model."""
    __tablename__ = "plan_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("action_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="not_started")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    # Relationships
    plan: Mapped["PlanModel"] = relationship("PlanModel", back_populates="tasks")

    def __repr__(self) -> str:
        return f"<PlanTask(id={self.id}, title='{self.title}', status='{self.status}')>"


class TaskDependencyModel(Base):
    """Dependency edge: dependent_task_id waits on prerequisite_task_id."""
    __tablename__ = "task_dependencies"
    __table_args__ = (
        UniqueConstraint(
            "dependent_task_id", "prerequisite_task_id", name="uq_task_dependencies_pair"
        ),
        CheckConstraint(
            "dependent_task_id <> prerequisite_task_id", name="ck_task_dependencies_no_self"
        ),
        Index("ix_task_dependencies_plan_id", "plan_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dependent_task_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("plan_tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    prerequisite_task_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("plan_tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("action_plans.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<TaskDependency(id={self.id}, dependent={self.dependent_task_id}, "
            f"prerequisite={self.prerequisite_task_id})>"
        )


class AuditLogModel(Base):
    """Audit log ORM model for tracking changes."""
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    old_value: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    new_value: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    performed_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, entity_type='{self.entity_type}', action='{self.action}')>"
