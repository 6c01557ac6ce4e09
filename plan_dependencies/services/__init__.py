"""
Dependency engine services.
"""

from .query_engine import DependencyQueryEngine
from .override_recorder import CompletionDecision, OverrideRecorder, decide_completion
from .dependency_service import DependencyService, create_dependency_service

__all__ = [
    "DependencyQueryEngine",
    "CompletionDecision",
    "OverrideRecorder",
    "decide_completion",
    "DependencyService",
    "create_dependency_service",
]
