"""
In-memory dependency store

Used by tests and local development.
"""

import itertools
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from ..models import DependencyEdge, TaskEdges, utcnow
from .base import DependencyStore
from .locks import PlanLocks


class InMemoryDependencyStore(DependencyStore):
    """Dict-backed store; edges keep insertion order."""

    def __init__(self):
        self._edges: Dict[int, DependencyEdge] = {}
        self._ids = itertools.count(1)
        self._locks = PlanLocks()

    async def get_edge(self, edge_id: int) -> Optional[DependencyEdge]:
        return self._edges.get(edge_id)

    async def find_edge(
        self, dependent_task_id: int, prerequisite_task_id: int
    ) -> Optional[DependencyEdge]:
        for edge in self._edges.values():
            if (
                edge.dependent_task_id == dependent_task_id
                and edge.prerequisite_task_id == prerequisite_task_id
            ):
                return edge
        return None

    async def edges_for_task(self, task_id: int) -> TaskEdges:
        return TaskEdges(
            as_dependent=[e for e in self._edges.values() if e.dependent_task_id == task_id],
            as_prerequisite=[e for e in self._edges.values() if e.prerequisite_task_id == task_id],
        )

    async def edges_for_plan(self, plan_id: int) -> List[DependencyEdge]:
        return [edge for edge in self._edges.values() if edge.plan_id == plan_id]

    async def remove_all_edges_for_task(self, task_id: int) -> int:
        doomed = [
            edge_id for edge_id, edge in self._edges.items()
            if task_id in (edge.dependent_task_id, edge.prerequisite_task_id)
        ]
        for edge_id in doomed:
            del self._edges[edge_id]
        return len(doomed)

    @asynccontextmanager
    async def plan_lock(self, plan_id: int) -> AsyncIterator[None]:
        async with self._locks.hold(plan_id):
            yield

    async def _insert_edge(
        self, dependent_task_id: int, prerequisite_task_id: int, plan_id: int
    ) -> DependencyEdge:
        edge = DependencyEdge(
            id=next(self._ids),
            dependent_task_id=dependent_task_id,
            prerequisite_task_id=prerequisite_task_id,
            plan_id=plan_id,
            created_at=utcnow(),
        )
        self._edges[edge.id] = edge
        return edge

    async def _delete_edge(self, edge_id: int) -> bool:
        return self._edges.pop(edge_id, None) is not None
