"""
Cycle detection for dependency edges.

Pure functions: nothing here reads from or writes to a store.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .adjacency import CandidateEdge, DependencyGraph, EdgeLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleReport:
    """
    A discovered cycle.

    cycle is a closed path: the first task id is repeated at the end,
    e.g. [3, 2, 1, 3].
    """
    cycle: List[int]

    @property
    def task_ids(self) -> List[int]:
        """Distinct task ids on the cycle, in path order."""
        return self.cycle[:-1]

    def __len__(self) -> int:
        return len(self.task_ids)


def _walk(adjacency: Dict[int, List[int]], start: int, visited: set) -> Optional[List[int]]:
    """
    Iterative depth-first walk from start along prerequisite links.

    visited is shared across calls so a full-graph scan stays O(V+E).
    Returns the closed cycle path on the first back edge, or None.
    """
    if start in visited:
        return None

    visited.add(start)
    path: List[int] = [start]
    on_path = {start}
    stack = [iter(adjacency.get(start, ()))]

    while stack:
        advanced = False
        for child in stack[-1]:
            if child in on_path:
                return path[path.index(child):] + [child]
            if child not in visited:
                visited.add(child)
                on_path.add(child)
                path.append(child)
                stack.append(iter(adjacency.get(child, ())))
                advanced = True
                break

        if not advanced:
            stack.pop()
            on_path.discard(path.pop())

    return None


def would_create_cycle(
    plan_edges: Iterable[EdgeLike],
    candidate: EdgeLike,
) -> Optional[CycleReport]:
    """
    Check whether adding candidate to plan_edges closes a cycle.

    The search starts at the candidate's prerequisite and follows
    prerequisite links; reaching a task already on the current path
    (normally the candidate's dependent) means a cycle.

    Args:
        plan_edges: the plan's current edges
        candidate: the edge being considered

    Returns:
        CycleReport with the closed path, or None when the edge is safe
    """
    adjacency = DependencyGraph.from_edges(itertools.chain(plan_edges, [candidate])).adjacency()

    cycle = _walk(adjacency, candidate.prerequisite_task_id, set())
    if cycle is None:
        return None

    logger.debug(
        "Edge %s -> %s closes cycle %s",
        candidate.dependent_task_id,
        candidate.prerequisite_task_id,
        cycle,
    )
    return CycleReport(cycle=cycle)


def find_cycle(edges: Iterable[EdgeLike]) -> Optional[CycleReport]:
    """Scan a whole edge set for any cycle."""
    adjacency = DependencyGraph.from_edges(edges).adjacency()
    visited: set = set()
    for task_id in adjacency:
        cycle = _walk(adjacency, task_id, visited)
        if cycle is not None:
            return CycleReport(cycle=cycle)
    return None


def is_acyclic(edges: Iterable[EdgeLike]) -> bool:
    return find_cycle(edges) is None


__all__ = [
    "CandidateEdge",
    "CycleReport",
    "would_create_cycle",
    "find_cycle",
    "is_acyclic",
]
