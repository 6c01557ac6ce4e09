"""
Plan dependency engine.

Task-to-task dependencies inside an execution plan: cycle-safe edge
mutation, blocked/ready views and audited completion overrides.
"""

from .services import DependencyService, create_dependency_service

__version__ = "1.0.0"

__all__ = [
    "DependencyService",
    "create_dependency_service",
    "__version__",
]
