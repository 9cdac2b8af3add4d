"""
Snapshot Cache Module

A single-entry, time-bounded cache for whole-table snapshots. The cached value
is always swapped as a complete object, so a reader sees either the previous
snapshot or the new one, never a partially built value.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from quizbackend.common.cache.entry import CacheEntry, Clock

V = TypeVar('V')

logger = logging.getLogger(__name__)


class SnapshotCache(Generic[V]):
    """
    Holds at most one value with a fixed TTL.
    
    Lifecycle:
    - populated lazily by ``get_or_load`` on a miss or after expiry
    - expired passively once the TTL elapses
    - invalidated explicitly by ``invalidate``, which also bumps a generation
      counter so that a load started before the invalidation cannot install
      its result afterwards
    
    Concurrent misses share one load: callers queue on a refresh lock and
    re-check the entry once they acquire it.
    """
    
    def __init__(self, ttl: float, clock: Clock = time.monotonic, name: str = "snapshot"):
        """
        Initialize the snapshot cache.
        
        Args:
            ttl: Time-to-live in seconds for each installed snapshot
            clock: Time source, injectable for tests
            name: Name used in log messages and stats
        """
        self._ttl = ttl
        self._clock = clock
        self._name = name
        self._entry: Optional[CacheEntry[V]] = None
        self._generation = 0
        self._refresh_lock = asyncio.Lock()
        
        # Statistics
        self._hits = 0
        self._misses = 0
        self._loads = 0
        self._invalidations = 0
    
    @property
    def name(self) -> str:
        return self._name
    
    @property
    def generation(self) -> int:
        return self._generation
    
    def peek(self) -> Optional[V]:
        """Return the cached value if present and unexpired, without loading."""
        entry = self._entry
        if entry is None or entry.is_expired():
            return None
        entry.access()
        return entry.value
    
    def install(self, value: V, generation: int) -> bool:
        """
        Install a freshly loaded value.
        
        Args:
            value: The new snapshot
            generation: The generation observed when the load started
            
        Returns:
            True if installed, False if an invalidation happened meanwhile
        """
        if generation != self._generation:
            logger.debug(f"Discarding {self._name} snapshot loaded before invalidation")
            return False
        self._entry = CacheEntry(value, ttl=self._ttl, clock=self._clock)
        return True
    
    def invalidate(self) -> None:
        """Drop the current snapshot and reject any load already in flight."""
        self._generation += 1
        self._entry = None
        self._invalidations += 1
    
    async def get_or_load(self, loader: Callable[[], Awaitable[Optional[V]]]) -> Optional[V]:
        """
        Return the cached snapshot, loading it on a miss.
        
        Args:
            loader: Coroutine factory producing a new snapshot, or None on failure.
                Failures are never cached.
            
        Returns:
            The snapshot, or None if there was none and the load failed
        """
        value = self.peek()
        if value is not None:
            self._hits += 1
            return value
        
        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            value = self.peek()
            if value is not None:
                self._hits += 1
                return value
            
            self._misses += 1
            generation = self._generation
            value = await loader()
            self._loads += 1
            if value is not None:
                self.install(value, generation)
            return value
    
    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the cache."""
        entry = self._entry
        return {
            'name': self._name,
            'populated': entry is not None and not entry.is_expired(),
            'ttl_remaining': entry.get_ttl() if entry is not None else None,
            'age': entry.get_age() if entry is not None else None,
            'entry_reads': entry.access_count if entry is not None else 0,
            'hits': self._hits,
            'misses': self._misses,
            'loads': self._loads,
            'invalidations': self._invalidations,
            'generation': self._generation
        }
