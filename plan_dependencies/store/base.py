"""
Dependency Store - edge persistence

Abstract store for dependency edges. Backends implement the raw
persistence hooks; the structural invariants (no self reference, no cross
plan edge, no duplicate pair) are enforced here for every backend.
"""

import logging
from abc import ABC, abstractmethod
from typing import AsyncContextManager, List, Optional

from ..errors import (
    CrossPlanEdgeError,
    DuplicateEdgeError,
    EdgeNotFoundError,
    SelfReferenceError,
)
from ..models import DependencyEdge, TaskEdges, TaskRef

logger = logging.getLogger(__name__)


class DependencyStore(ABC):
    """
    Edge store interface.

    Mutations that depend on the current graph shape must run inside
    plan_lock() for the plan they touch.
    """

    async def add_edge(self, dependent: TaskRef, prerequisite: TaskRef) -> DependencyEdge:
        """
        Persist dependent -> prerequisite.

        Args:
            dependent: the task that must wait
            prerequisite: the task that must finish first

        Returns:
            The stored DependencyEdge

        Raises:
            SelfReferenceError: both ends are the same task
            CrossPlanEdgeError: the tasks belong to different plans
            DuplicateEdgeError: the pair is already stored
        """
        if dependent.id == prerequisite.id:
            raise SelfReferenceError(dependent.id)
        if dependent.plan_id != prerequisite.plan_id:
            raise CrossPlanEdgeError(
                dependent.id, prerequisite.id, dependent.plan_id, prerequisite.plan_id
            )
        if await self.find_edge(dependent.id, prerequisite.id) is not None:
            raise DuplicateEdgeError(dependent.id, prerequisite.id)

        edge = await self._insert_edge(dependent.id, prerequisite.id, dependent.plan_id)
        logger.info(
            "Stored dependency %s: task %s waits on task %s (plan %s)",
            edge.id, edge.dependent_task_id, edge.prerequisite_task_id, edge.plan_id,
        )
        return edge

    async def remove_edge(self, edge_id: int) -> None:
        """Delete an edge; raises EdgeNotFoundError when it does not exist."""
        if not await self._delete_edge(edge_id):
            raise EdgeNotFoundError(edge_id)
        logger.info("Removed dependency %s", edge_id)

    @abstractmethod
    async def get_edge(self, edge_id: int) -> Optional[DependencyEdge]:
        """Look up an edge by id"""
        pass

    @abstractmethod
    async def find_edge(
        self, dependent_task_id: int, prerequisite_task_id: int
    ) -> Optional[DependencyEdge]:
        """Look up an edge by its endpoint pair"""
        pass

    @abstractmethod
    async def edges_for_task(self, task_id: int) -> TaskEdges:
        """Edges where task_id is the dependent and where it is the prerequisite"""
        pass

    @abstractmethod
    async def edges_for_plan(self, plan_id: int) -> List[DependencyEdge]:
        """Every edge of a plan, in creation order"""
        pass

    @abstractmethod
    async def remove_all_edges_for_task(self, task_id: int) -> int:
        """Cascade cleanup: drop edges touching task_id, return how many"""
        pass

    @abstractmethod
    def plan_lock(self, plan_id: int) -> AsyncContextManager[None]:
        """Serialize validate-and-write sequences for one plan"""
        pass

    @abstractmethod
    async def _insert_edge(
        self, dependent_task_id: int, prerequisite_task_id: int, plan_id: int
    ) -> DependencyEdge:
        pass

    @abstractmethod
    async def _delete_edge(self, edge_id: int) -> bool:
        pass
