"""
Repository pattern implementations for database access.
"""

from .base import BaseRepository
from .dependency_repository import DependencyRepository
from .task_repository import PlanTaskRepository
from .audit_repository import AuditRepository

__all__ = [
    "BaseRepository",
    "DependencyRepository",
    "PlanTaskRepository",
    "AuditRepository",
]
