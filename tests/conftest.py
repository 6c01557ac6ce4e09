"""
Pytest configuration and shared fixtures.
"""

from types import SimpleNamespace

import pytest
import pytest_asyncio

from plan_dependencies.collaborators import InMemoryAuditSink, InMemoryTaskBoard
from plan_dependencies.database import Database
from plan_dependencies.services import DependencyService
from plan_dependencies.store import InMemoryDependencyStore

OWNER_ID = 1
OTHER_USER_ID = 2


@pytest.fixture
def board() -> InMemoryTaskBoard:
    """Plans and tasks"""
    return InMemoryTaskBoard()


@pytest.fixture
def audit() -> InMemoryAuditSink:
    """Override audit records"""
    return InMemoryAuditSink()


@pytest.fixture
def store() -> InMemoryDependencyStore:
    """Edge store"""
    return InMemoryDependencyStore()


@pytest.fixture
def service(store, board, audit) -> DependencyService:
    """DependencyService over in-memory collaborators"""
    return DependencyService(store=store, tasks=board, access=board, audit=audit)


@pytest.fixture
def plan(board) -> SimpleNamespace:
    """One plan owned by OWNER_ID with four not-started tasks a, b, c, d"""
    plan_id = board.add_plan(OWNER_ID)
    return SimpleNamespace(
        id=plan_id,
        a=board.add_task(plan_id, "Validate market").id,
        b=board.add_task(plan_id, "Interview customers").id,
        c=board.add_task(plan_id, "Build landing page").id,
        d=board.add_task(plan_id, "Launch").id,
    )


@pytest.fixture
def other_plan(board) -> SimpleNamespace:
    """A second plan owned by OTHER_USER_ID"""
    plan_id = board.add_plan(OTHER_USER_ID)
    return SimpleNamespace(
        id=plan_id,
        x=board.add_task(plan_id, "Foreign task").id,
    )


@pytest_asyncio.fixture
async def database():
    """In-memory SQLite database with all tables"""
    db = Database(database_url="sqlite+aiosqlite:///:memory:")
    await db.connect()
    await db.create_tables()
    yield db
    await db.drop_tables()
    await db.disconnect()
