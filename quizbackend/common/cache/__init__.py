"""
Caching primitives

In-memory, time-bounded caching used for whole-table snapshots.
"""

from quizbackend.common.cache.entry import CacheEntry
from quizbackend.common.cache.snapshot import SnapshotCache

__all__ = [
    'CacheEntry',
    'SnapshotCache',
]
