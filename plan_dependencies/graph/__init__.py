"""
Dependency graph primitives: adjacency value, cycle detection and views.
"""

from .adjacency import CandidateEdge, DependencyGraph, EdgeLike
from .cycle_detector import (
    CycleReport,
    would_create_cycle,
    find_cycle,
    is_acyclic,
)
from .queries import (
    is_blocked,
    incomplete_prerequisites,
    ready_tasks,
    plan_dependency_map,
    validate_candidate,
)

__all__ = [
    # Adjacency
    "CandidateEdge",
    "DependencyGraph",
    "EdgeLike",
    # Cycle detection
    "CycleReport",
    "would_create_cycle",
    "find_cycle",
    "is_acyclic",
    # Views
    "is_blocked",
    "incomplete_prerequisites",
    "ready_tasks",
    "plan_dependency_map",
    "validate_candidate",
]
