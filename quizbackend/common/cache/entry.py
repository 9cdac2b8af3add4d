"""
Cache Entry Module

This module provides the CacheEntry class, which wraps a cached value with the
metadata needed to decide when it expires.
"""

import time
from typing import Callable, Generic, Optional, TypeVar

# Type variable for cached value
V = TypeVar('V')

Clock = Callable[[], float]


class CacheEntry(Generic[V]):
    """
    Represents a cached value with metadata.
    
    Entries are never mutated after construction apart from their access
    statistics; replacing a cached value means building a new entry.
    
    Attributes:
        value: The cached value
        created_at: When the entry was created (clock time)
        expires_at: When the entry expires (clock time), or None for no expiration
        access_count: Number of times the entry has been read
        last_accessed: When the entry was last read (clock time)
    """
    
    def __init__(self, value: V, ttl: Optional[float] = None, clock: Clock = time.monotonic):
        """
        Initialize a cache entry with a value and optional TTL.
        
        Args:
            value: The value to cache
            ttl: Time-to-live in seconds, or None for no expiration
            clock: Time source, injectable for tests
        """
        self.value = value
        self._clock = clock
        self.created_at = clock()
        self.expires_at = None if ttl is None else self.created_at + ttl
        self.access_count = 0
        self.last_accessed = self.created_at
    
    def is_expired(self) -> bool:
        """Check if the entry has expired."""
        if self.expires_at is None:
            return False
        return self._clock() >= self.expires_at
    
    def access(self) -> None:
        """Record a read of this entry."""
        self.access_count += 1
        self.last_accessed = self._clock()
    
    def get_age(self) -> float:
        """Seconds since the entry was created."""
        return self._clock() - self.created_at
    
    def get_ttl(self) -> Optional[float]:
        """
        Get the remaining TTL in seconds.
        
        Returns:
            Remaining TTL in seconds, or None if no expiration
        """
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self._clock())
