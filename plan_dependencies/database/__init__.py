"""
Database module for the plan dependency engine.
Provides async SQLAlchemy connection management, ORM models and repositories.
"""

from .connection import (
    get_database,
    Database,
)
from .models import Base, PlanModel, PlanTaskModel, TaskDependencyModel, AuditLogModel

__all__ = [
    "get_database",
    "Database",
    "Base",
    "PlanModel",
    "PlanTaskModel",
    "TaskDependencyModel",
    "AuditLogModel",
]
