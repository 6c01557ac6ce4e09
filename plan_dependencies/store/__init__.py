"""
Dependency edge stores.
"""

from .base import DependencyStore
from .memory import InMemoryDependencyStore
from .sql import SqlAlchemyDependencyStore
from .locks import PlanLocks


def create_store(
    backend: str = "memory",
    **kwargs
) -> DependencyStore:
    """
    Store factory

    Args:
        backend: "memory" or "sql"
        **kwargs: backend options ("sql" requires session)

    Returns:
        DependencyStore implementation
    """
    if backend == "memory":
        return InMemoryDependencyStore()
    elif backend == "sql":
        session = kwargs.get("session")
        if session is None:
            raise ValueError("The sql store backend requires a session")
        return SqlAlchemyDependencyStore(session)
    else:
        raise ValueError(f"Unknown store backend: {backend}")


__all__ = [
    "DependencyStore",
    "InMemoryDependencyStore",
    "SqlAlchemyDependencyStore",
    "PlanLocks",
    "create_store",
]
