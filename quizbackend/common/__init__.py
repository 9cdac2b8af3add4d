"""
Common Components

Infrastructure shared across the quiz backend:
1. Logging - Centralized logging configuration
2. Exceptions - Error hierarchy for remote store failures
3. Caching - Time-bounded snapshot cache
4. Locks - Per-key serialization for read-modify-write sequences
"""

from quizbackend.common.logger import app_logger
from quizbackend.common.exceptions import (
    BaseError, ConfigurationError, StoreError, StoreUnavailableError,
    StoreResponseError, StorePayloadError
)
from quizbackend.common.cache import CacheEntry, SnapshotCache
from quizbackend.common.locks import KeyedLock

__all__ = [
    'app_logger',
    'BaseError', 'ConfigurationError', 'StoreError', 'StoreUnavailableError',
    'StoreResponseError', 'StorePayloadError',
    'CacheEntry', 'SnapshotCache',
    'KeyedLock',
]
