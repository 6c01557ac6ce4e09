"""
Process-local plan locks

asyncio.Lock binds to the event loop it is first contended in, so locks are
kept per running loop. An entry lives only while some coroutine holds or
waits for it.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, MutableMapping


class PlanLocks:
    """Per-plan asyncio locks, scoped to the running event loop."""

    def __init__(self):
        # loop -> plan_id -> [lock, users]
        self._loops: MutableMapping[asyncio.AbstractEventLoop, Dict[int, List]] = (
            weakref.WeakKeyDictionary()
        )

    def active(self) -> int:
        """Number of plans with a holder or waiter on the current loop."""
        return len(self._loops.get(asyncio.get_running_loop(), {}))

    @asynccontextmanager
    async def hold(self, plan_id: int) -> AsyncIterator[None]:
        locks = self._loops.setdefault(asyncio.get_running_loop(), {})
        entry = locks.setdefault(plan_id, [asyncio.Lock(), 0])
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del locks[plan_id]
