"""
Per-participant mutual exclusion for the read-busy-then-insert region.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, Optional


class ParticipantLockRegistry:
    """
    Hands out one ``asyncio.Lock`` per participant id.

    ``hold`` always acquires in ascending id order, so two callers that
    share participants can never wait on each other in a cycle.

    Locks belong to the event loop that created them. When the registry is
    used from a new loop (a second ``asyncio.run`` on the same scheduler) it
    starts over with fresh locks; the old loop can no longer be holding any.
    """

    def __init__(self) -> None:
        self._locks: Dict[int, asyncio.Lock] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _lock_for(self, participant_id: int) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            self._locks = {}
            self._loop = loop

        lock = self._locks.get(participant_id)
        if lock is None:
            lock = self._locks[participant_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, participant_ids: Iterable[int]) -> AsyncIterator[None]:
        locks = [self._lock_for(pid) for pid in sorted(set(participant_ids))]
        acquired = []
        try:
            for lock in locks:
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
