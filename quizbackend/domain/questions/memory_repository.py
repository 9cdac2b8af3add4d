"""
Memory Question Statistics Store Module

This module provides an in-memory implementation of the QuestionStatsStore
interface for development and testing purposes.
"""

import asyncio
import dataclasses
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from quizbackend.common.exceptions import StoreResponseError
from quizbackend.difficulty.classifier import classify, compute_success_rate
from .model import QuestionRecord, utcnow
from .repository import QuestionStatsStore

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class MemoryQuestionStatsStore(QuestionStatsStore):
    """
    In-memory implementation of the QuestionStatsStore.
    
    Behaves like the REST-backed store: the question file is a unique key,
    reads return copies, and patches touch only the given fields. An optional
    latency is awaited inside every operation so tests can force
    interleavings between concurrent callers.
    """
    
    def __init__(
        self,
        initial_data: Optional[Iterable[QuestionRecord]] = None,
        latency: float = 0.0
    ):
        """
        Initialize the store with optional initial data.
        
        Args:
            initial_data: Optional records to start with
            latency: Seconds to sleep inside each operation
        """
        self._records: Dict[str, QuestionRecord] = {}
        self._latency = latency
        self.calls: Dict[str, int] = {}
        
        if initial_data:
            for record in initial_data:
                self._records[record.question_file] = record
    
    async def _tick(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        # Always yield so concurrent callers can interleave
        await asyncio.sleep(self._latency)
    
    async def fetch_one(self, question_file: str) -> Optional[QuestionRecord]:
        await self._tick("fetch_one")
        return self._records.get(question_file)
    
    async def fetch_difficulty_map(self) -> Dict[str, str]:
        await self._tick("fetch_difficulty_map")
        return {
            name: record.difficulty.value
            for name, record in self._records.items()
        }
    
    async def fetch_page(self, limit: int, offset: int) -> List[QuestionRecord]:
        await self._tick("fetch_page")
        ordered = sorted(self._records.values(), key=lambda r: r.question_file)
        ordered.sort(key=lambda r: r.last_updated or _EPOCH, reverse=True)
        return ordered[offset:offset + limit]
    
    async def insert(self, record: QuestionRecord) -> None:
        await self._tick("insert")
        if record.question_file in self._records:
            raise StoreResponseError(
                f"duplicate key value for {record.question_file}",
                status_code=409,
                operation="insert"
            )
        self._records[record.question_file] = record
    
    async def patch(self, question_file: str, changes: Dict[str, Any]) -> None:
        await self._tick("patch")
        existing = self._records.get(question_file)
        if existing is None:
            # Filtered update that matches no rows
            return
        self._records[question_file] = dataclasses.replace(existing, **changes)
    
    async def recalculate_all(self) -> int:
        await self._tick("recalculate_all")
        affected = 0
        now = utcnow()
        for name, record in list(self._records.items()):
            if record.manual_override or record.total_attempts == 0:
                continue
            rate = compute_success_rate(record.correct_attempts, record.total_attempts)
            self._records[name] = dataclasses.replace(
                record,
                success_rate=rate,
                difficulty=classify(rate),
                last_updated=now
            )
            affected += 1
        return affected
    
    def __len__(self) -> int:
        return len(self._records)
    
    def snapshot(self) -> Dict[str, QuestionRecord]:
        """Copy of all stored records keyed by question file."""
        return dict(self._records)
