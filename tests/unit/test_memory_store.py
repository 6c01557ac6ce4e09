"""
In-memory dependency store tests
"""

import asyncio

import pytest

from plan_dependencies.errors import (
    CrossPlanEdgeError,
    DuplicateEdgeError,
    EdgeNotFoundError,
    SelfReferenceError,
)
from plan_dependencies.models import TaskRef
from plan_dependencies.store import (
    InMemoryDependencyStore,
    PlanLocks,
    SqlAlchemyDependencyStore,
    create_store,
)


def task(task_id: int, plan_id: int = 1) -> TaskRef:
    return TaskRef(id=task_id, plan_id=plan_id)


class TestInMemoryDependencyStore:
    """InMemoryDependencyStore"""

    @pytest.fixture
    def store(self):
        return InMemoryDependencyStore()

    @pytest.mark.asyncio
    async def test_add_and_get(self, store):
        edge = await store.add_edge(task(2), task(1))

        assert edge.dependent_task_id == 2
        assert edge.prerequisite_task_id == 1
        assert edge.plan_id == 1
        assert await store.get_edge(edge.id) == edge
        assert await store.find_edge(2, 1) == edge

    @pytest.mark.asyncio
    async def test_rejects_self_reference(self, store):
        with pytest.raises(SelfReferenceError):
            await store.add_edge(task(1), task(1))

    @pytest.mark.asyncio
    async def test_rejects_duplicate(self, store):
        await store.add_edge(task(2), task(1))

        with pytest.raises(DuplicateEdgeError) as exc_info:
            await store.add_edge(task(2), task(1))

        assert exc_info.value.details == {"dependentTaskId": 2, "prerequisiteTaskId": 1}

    @pytest.mark.asyncio
    async def test_rejects_cross_plan(self, store):
        with pytest.raises(CrossPlanEdgeError):
            await store.add_edge(task(2, plan_id=1), task(1, plan_id=2))
        assert await store.edges_for_plan(1) == []

    @pytest.mark.asyncio
    async def test_remove_edge(self, store):
        edge = await store.add_edge(task(2), task(1))

        await store.remove_edge(edge.id)

        assert await store.get_edge(edge.id) is None
        with pytest.raises(EdgeNotFoundError):
            await store.remove_edge(edge.id)

    @pytest.mark.asyncio
    async def test_edges_for_task_splits_directions(self, store):
        await store.add_edge(task(2), task(1))
        await store.add_edge(task(3), task(2))

        edges = await store.edges_for_task(2)

        assert [e.prerequisite_task_id for e in edges.as_dependent] == [1]
        assert [e.dependent_task_id for e in edges.as_prerequisite] == [3]

    @pytest.mark.asyncio
    async def test_edges_for_plan_is_scoped(self, store):
        await store.add_edge(task(2), task(1))
        await store.add_edge(task(12, plan_id=2), task(11, plan_id=2))

        assert [e.dependent_task_id for e in await store.edges_for_plan(1)] == [2]
        assert [e.dependent_task_id for e in await store.edges_for_plan(2)] == [12]

    @pytest.mark.asyncio
    async def test_remove_all_edges_for_task(self, store):
        await store.add_edge(task(2), task(1))
        await store.add_edge(task(3), task(2))
        await store.add_edge(task(3), task(1))

        removed = await store.remove_all_edges_for_task(2)

        assert removed == 2
        assert [(e.dependent_task_id, e.prerequisite_task_id) for e in await store.edges_for_plan(1)] == [(3, 1)]

    @pytest.mark.asyncio
    async def test_plan_lock_serializes(self, store):
        order = []

        async def critical(name):
            async with store.plan_lock(1):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(critical("first"), critical("second"))

        assert order == ["first-in", "first-out", "second-in", "second-out"]


class TestPlanLocks:
    """PlanLocks"""

    @pytest.mark.asyncio
    async def test_entry_dropped_after_release(self):
        locks = PlanLocks()
        seen = []

        async def hold():
            async with locks.hold(7):
                seen.append(locks.active())
                await asyncio.sleep(0)

        await asyncio.gather(hold(), hold())

        assert seen == [1, 1]
        assert locks.active() == 0

    @pytest.mark.asyncio
    async def test_plans_do_not_block_each_other(self):
        locks = PlanLocks()
        async with locks.hold(1):
            async with locks.hold(2):
                assert locks.active() == 2

    def test_contention_across_event_loops(self):
        locks = PlanLocks()

        async def contend():
            order = []

            async def critical(name):
                async with locks.hold(7):
                    order.append(f"{name}-in")
                    await asyncio.sleep(0.01)
                    order.append(f"{name}-out")

            await asyncio.gather(critical("first"), critical("second"))
            return order

        expected = ["first-in", "first-out", "second-in", "second-out"]
        assert asyncio.run(contend()) == expected
        assert asyncio.run(contend()) == expected


class TestCreateStore:
    """create_store factory"""

    def test_memory_backend(self):
        assert isinstance(create_store("memory"), InMemoryDependencyStore)

    def test_sql_backend_requires_session(self):
        with pytest.raises(ValueError):
            create_store("sql")

    def test_sql_backend(self):
        assert isinstance(create_store("sql", session=object()), SqlAlchemyDependencyStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_store("redis")
