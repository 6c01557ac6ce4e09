"""
SQL backend tests (SQLite in memory)

Same service operations as the in-memory tests, run against the
SQLAlchemy store and repositories inside one request-scoped session.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from plan_dependencies.database import Database, TaskDependencyModel
from plan_dependencies.database.repositories import (
    AuditRepository,
    DependencyRepository,
    PlanTaskRepository,
)
from plan_dependencies.errors import (
    CircularDependencyError,
    DuplicateEdgeError,
    EdgeNotFoundError,
    IncompletePrerequisitesError,
    TaskNotFoundError,
)
from plan_dependencies.models import TaskStatus
from plan_dependencies.services import create_dependency_service
from plan_dependencies.store import SqlAlchemyDependencyStore

OWNER_ID = 1
OTHER_USER_ID = 2


async def seed_chain(session):
    """Plan with three not-started tasks"""
    repository = PlanTaskRepository(session)
    plan = await repository.create_plan(user_id=OWNER_ID, title="Go to market")
    a = await repository.create_task(plan.id, "Validate market")
    b = await repository.create_task(plan.id, "Interview customers")
    c = await repository.create_task(plan.id, "Launch")
    return plan.id, a.id, b.id, c.id


class TestDatabase:
    """Database connection manager"""

    def test_engine_requires_connect(self):
        db = Database(database_url="sqlite+aiosqlite:///:memory:")
        with pytest.raises(RuntimeError):
            db.engine

    @pytest.mark.asyncio
    async def test_session_rolls_back_on_error(self, database):
        with pytest.raises(CircularDependencyError):
            async with database.session() as session:
                plan_id, a, b, c = await seed_chain(session)
                service = create_dependency_service("sql", session=session)
                await service.add_dependency(b, a, OWNER_ID)
                await service.add_dependency(a, b, OWNER_ID)

        async with database.session() as session:
            result = await session.execute(select(TaskDependencyModel))
            assert result.scalars().all() == []

    @pytest.mark.asyncio
    async def test_drop_tables(self, database):
        await database.drop_tables()

        with pytest.raises(OperationalError):
            async with database.session() as session:
                await session.execute(select(TaskDependencyModel))

        await database.create_tables()
        async with database.session() as session:
            result = await session.execute(select(TaskDependencyModel))
            assert result.scalars().all() == []


class TestSqlDependencyStore:
    """SqlAlchemyDependencyStore"""

    @pytest.mark.asyncio
    async def test_edges_round_trip(self, database):
        async with database.session() as session:
            plan_id, a, b, c = await seed_chain(session)
            tasks = PlanTaskRepository(session)
            store = SqlAlchemyDependencyStore(session)

            first = await store.add_edge(await tasks.get_task(b), await tasks.get_task(a))
            await store.add_edge(await tasks.get_task(c), await tasks.get_task(b))

            assert store.dialect_name == "sqlite"
            assert (await store.get_edge(first.id)).prerequisite_task_id == a
            assert (await store.find_edge(b, a)).id == first.id
            edges = await store.edges_for_task(b)
            assert [e.prerequisite_task_id for e in edges.as_dependent] == [a]
            assert [e.dependent_task_id for e in edges.as_prerequisite] == [c]
            assert len(await store.edges_for_plan(plan_id)) == 2

            with pytest.raises(DuplicateEdgeError):
                await store.add_edge(await tasks.get_task(b), await tasks.get_task(a))

            await store.remove_edge(first.id)
            with pytest.raises(EdgeNotFoundError):
                await store.remove_edge(first.id)

            assert await store.remove_all_edges_for_task(c) == 1
            assert await DependencyRepository(session).get_by_plan(plan_id) == []

    @pytest.mark.asyncio
    async def test_plan_lock_falls_back_to_local_lock(self, database):
        async with database.session() as session:
            store = SqlAlchemyDependencyStore(session)
            async with store.plan_lock(1):
                pass

    def test_local_plan_lock_across_event_loops(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "sqlite"

        async def contend():
            order = []

            async def critical(name):
                async with SqlAlchemyDependencyStore(session).plan_lock(7):
                    order.append(f"{name}-in")
                    await asyncio.sleep(0.01)
                    order.append(f"{name}-out")

            await asyncio.gather(critical("first"), critical("second"))
            return order

        expected = ["first-in", "first-out", "second-in", "second-out"]
        assert asyncio.run(contend()) == expected
        assert asyncio.run(contend()) == expected
        session.execute.assert_not_called()


class TestSqlService:
    """DependencyService over the SQL backend"""

    @pytest.mark.asyncio
    async def test_simple_chain_scenario(self, database):
        async with database.session() as session:
            plan_id, a, b, c = await seed_chain(session)
            service = create_dependency_service("sql", session=session)
            await service.add_dependency(b, a, OWNER_ID)
            await service.add_dependency(c, b, OWNER_ID)

            async def ready():
                return [t.id for t in await service.get_ready_tasks(plan_id, OWNER_ID)]

            assert await ready() == [a]
            await service.complete_with_override_check(a, OWNER_ID)
            assert await ready() == [b]
            await service.complete_with_override_check(b, OWNER_ID)
            assert await ready() == [c]

            dependency_map = await service.get_plan_dependency_map(plan_id, OWNER_ID)
            assert dependency_map.to_dict()[str(b)] == {"prerequisites": [a], "dependents": [c]}

    @pytest.mark.asyncio
    async def test_override_writes_one_audit_row(self, database):
        async with database.session() as session:
            plan_id, a, b, c = await seed_chain(session)
            service = create_dependency_service("sql", session=session)
            await service.add_dependency(b, a, OWNER_ID)

            with pytest.raises(IncompletePrerequisitesError):
                await service.complete_with_override_check(b, OWNER_ID)
            audit = AuditRepository(session)
            assert await audit.get_by_entity("task", b) == []

            task = await service.complete_with_override_check(b, OWNER_ID, override=True)

            assert task.status == TaskStatus.COMPLETED
            rows = await audit.get_by_entity("task", b)
            assert len(rows) == 1
            assert rows[0].action == "completed"
            assert rows[0].performed_by == str(OWNER_ID)
            assert rows[0].new_value["overridePrerequisites"] is True
            assert rows[0].new_value["incompletePrerequisiteIds"] == [a]

    @pytest.mark.asyncio
    async def test_rejected_cycle(self, database):
        async with database.session() as session:
            plan_id, a, b, c = await seed_chain(session)
            service = create_dependency_service("sql", session=session)
            await service.add_dependency(b, a, OWNER_ID)
            await service.add_dependency(c, b, OWNER_ID)

            with pytest.raises(CircularDependencyError) as exc_info:
                await service.add_dependency(a, c, OWNER_ID)

            assert sorted(exc_info.value.cycle_path[:-1]) == sorted([a, b, c])

            validation = await service.validate_dependency(a, c)
            assert validation.is_valid is False
            assert validation.cycle_path == exc_info.value.cycle_path


class TestPlanTaskRepository:
    """PlanTaskRepository collaborator contract"""

    @pytest.mark.asyncio
    async def test_task_lookup_and_access(self, database):
        async with database.session() as session:
            plan_id, a, b, c = await seed_chain(session)
            repository = PlanTaskRepository(session)

            task = await repository.get_task(a)
            assert task.plan_id == plan_id
            assert task.title == "Validate market"
            assert await repository.get_task(404) is None
            assert [t.id for t in await repository.get_plan_tasks(plan_id)] == [a, b, c]
            assert await repository.get_plan_tasks(404) is None
            assert await repository.can_access_plan(OWNER_ID, plan_id) is True
            assert await repository.can_access_plan(OTHER_USER_ID, plan_id) is False

    @pytest.mark.asyncio
    async def test_set_task_status_tracks_completion_time(self, database):
        async with database.session() as session:
            plan_id, a, b, c = await seed_chain(session)
            repository = PlanTaskRepository(session)

            await repository.set_task_status(a, TaskStatus.COMPLETED)
            assert (await repository.get_by_id(a)).completed_at is not None

            reopened = await repository.set_task_status(a, TaskStatus.IN_PROGRESS)
            assert reopened.status == TaskStatus.IN_PROGRESS
            assert (await repository.get_by_id(a)).completed_at is None

            with pytest.raises(TaskNotFoundError):
                await repository.set_task_status(404, TaskStatus.COMPLETED)
