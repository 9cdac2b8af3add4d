"""
Keyed asyncio locks.

Serializes coroutines that work on the same key while letting different keys
proceed concurrently. Locks are created on demand and released once no
coroutine holds or waits on them, so the registry does not grow with the
number of keys ever seen.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable


class KeyedLock:
    """Registry of per-key ``asyncio.Lock`` objects with reference counting."""
    
    def __init__(self) -> None:
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}
    
    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """
        Hold the lock for ``key`` for the duration of the ``async with`` block.
        
        Args:
            key: The key to serialize on
        """
        # No await between lookup and registration, so this is atomic on the loop
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]
    
    def locked(self, key: Hashable) -> bool:
        """Whether some coroutine currently holds the lock for ``key``."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
    
    def __len__(self) -> int:
        """Number of keys currently held or waited on."""
        return len(self._locks)
