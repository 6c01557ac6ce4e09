"""
Adjacency view of a plan's dependency edges.
"""

from typing import Dict, Iterable, List, NamedTuple, Protocol


class EdgeLike(Protocol):
    """Anything carrying a dependent and a prerequisite task id."""
    dependent_task_id: int
    prerequisite_task_id: int


class CandidateEdge(NamedTuple):
    """An edge that has not been persisted yet."""
    dependent_task_id: int
    prerequisite_task_id: int


class DependencyGraph:
    """
    Immutable-by-convention graph value keyed by task id.

    Holds both directions so one-hop lookups are O(1):
    prerequisites (dependent -> prerequisites) and dependents
    (prerequisite -> dependents). Neighbour lists keep edge insertion order.
    """

    def __init__(self) -> None:
        self._prerequisites: Dict[int, List[int]] = {}
        self._dependents: Dict[int, List[int]] = {}

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[EdgeLike],
        task_ids: Iterable[int] = (),
    ) -> "DependencyGraph":
        """
        Build a graph from edges.

        Args:
            edges: edges of a single plan
            task_ids: tasks to register even when they have no edges

        Returns:
            DependencyGraph
        """
        graph = cls()
        for task_id in task_ids:
            graph._touch(task_id)
        for edge in edges:
            graph._link(edge.dependent_task_id, edge.prerequisite_task_id)
        return graph

    def _touch(self, task_id: int) -> None:
        self._prerequisites.setdefault(task_id, [])
        self._dependents.setdefault(task_id, [])

    def _link(self, dependent_id: int, prerequisite_id: int) -> None:
        self._touch(dependent_id)
        self._touch(prerequisite_id)
        self._prerequisites[dependent_id].append(prerequisite_id)
        self._dependents[prerequisite_id].append(dependent_id)

    @property
    def task_ids(self) -> List[int]:
        return list(self._prerequisites.keys())

    def prerequisites_of(self, task_id: int) -> List[int]:
        """Direct prerequisites only."""
        return list(self._prerequisites.get(task_id, ()))

    def dependents_of(self, task_id: int) -> List[int]:
        """Direct dependents only."""
        return list(self._dependents.get(task_id, ()))

    def adjacency(self) -> Dict[int, List[int]]:
        """dependent -> prerequisites, the direction the cycle check walks."""
        return {task_id: list(prereqs) for task_id, prereqs in self._prerequisites.items()}

    def edge_count(self) -> int:
        return sum(len(prereqs) for prereqs in self._prerequisites.values())

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._prerequisites

    def __len__(self) -> int:
        return len(self._prerequisites)
