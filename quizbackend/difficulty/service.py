"""
Question Difficulty Service

Entry point of the difficulty subsystem. Records quiz attempts against the
remote store, reclassifies question difficulty from the running success
rate, serves the cached difficulty map to question selection, and exposes
the bulk operations used by admin tooling.

Every write for a question file runs under a per-file lock, so concurrent
attempts on the same question inside one process cannot lose each other's
increments. Remote failures never propagate: they are logged with their
cause and reported as ``False`` (or an empty result), while the
``*_outcome`` methods return the tagged StoreOutcome.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Union

from quizbackend.common.exceptions import StoreError
from quizbackend.common.locks import KeyedLock
from quizbackend.difficulty.accumulator import (
    apply_attempt,
    attempt_changes,
    manual_override_changes,
    new_attempt_record,
    new_unrated_record,
)
from quizbackend.difficulty.cache import DifficultyCache
from quizbackend.difficulty.loader import BulkLoader, DEFAULT_MAX_ROWS
from quizbackend.difficulty.results import OutcomeStatus, StoreOutcome
from quizbackend.domain.questions.model import Difficulty, QuestionRecord, utcnow
from quizbackend.domain.questions.repository import QuestionStatsStore

logger = logging.getLogger(__name__)


@dataclass
class BootstrapSummary:
    """Counts from pre-populating the store with unrated records."""
    created: int = 0
    skipped: int = 0
    failed: int = 0
    
    @property
    def total(self) -> int:
        return self.created + self.skipped + self.failed
    
    def to_dict(self) -> Dict[str, int]:
        return {
            'created': self.created,
            'skipped': self.skipped,
            'failed': self.failed,
            'total': self.total,
        }


class QuestionDifficultyService:
    """
    Adaptive difficulty rating for quiz questions.
    
    The store is the only source of truth for attempt counters; the cache
    only ever holds the derived ``file -> tier`` mapping and is cleared after
    every successful write.
    """
    
    def __init__(
        self,
        store: QuestionStatsStore,
        cache: Optional[DifficultyCache] = None,
        loader: Optional[BulkLoader] = None,
        locks: Optional[KeyedLock] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize the service.
        
        Args:
            store: Remote record store
            cache: Difficulty snapshot cache (defaults to one over ``store``)
            loader: Bulk loader (defaults to one over ``store``)
            locks: Per-question lock registry
            clock: Source of UTC timestamps for written records
        """
        self._store = store
        self.cache = cache or DifficultyCache(store)
        self.loader = loader or BulkLoader(store)
        self._locks = locks or KeyedLock()
        self._clock = clock
    
    @property
    def store(self) -> QuestionStatsStore:
        return self._store
    
    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    
    async def get_all_difficulties_map(self) -> Dict[str, str]:
        """Mapping of question file to tier name, served from the cache."""
        return await self.cache.get_all()
    
    async def get_questions_by_difficulty(self, tier: Union[Difficulty, str]) -> List[str]:
        """Question files currently rated ``tier``."""
        return await self.cache.get_by_difficulty(tier)
    
    async def lookup(self, question_file: str) -> StoreOutcome:
        """Fetch one record fresh from the store, as a tagged outcome."""
        try:
            record = await self._store.fetch_one(question_file)
        except StoreError as e:
            return self._failure("lookup", question_file, e)
        if record is None:
            return StoreOutcome.not_found()
        return StoreOutcome.success(record)
    
    async def get_one(self, question_file: str) -> Optional[QuestionRecord]:
        """The current record for ``question_file``, or None if absent or unreadable."""
        return (await self.lookup(question_file)).record
    
    async def load_all(self, max_rows: int = DEFAULT_MAX_ROWS) -> List[QuestionRecord]:
        """Every record in the store, up to ``max_rows``, newest first."""
        return await self.loader.load_all(max_rows)
    
    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    
    async def record_attempt_outcome(self, question_file: str, is_correct: bool) -> StoreOutcome:
        """
        Record one attempt and reclassify the question.
        
        Creates the record on the first attempt. Existing records get a
        partial update of the counters, rate, tier and timestamp; the tier
        is left alone when it was set manually.
        
        Args:
            question_file: The question answered
            is_correct: Whether the answer was correct
            
        Returns:
            SUCCESS with the written record, or the failure cause
        """
        async with self._locks.hold(question_file):
            try:
                existing = await self._store.fetch_one(question_file)
                now = self._clock()
                if existing is None:
                    record = new_attempt_record(question_file, is_correct, now)
                    await self._store.insert(record)
                else:
                    record = apply_attempt(existing, is_correct, now)
                    await self._store.patch(question_file, attempt_changes(record))
            except StoreError as e:
                return self._failure("record_attempt", question_file, e)
        
        self.cache.invalidate()
        if existing is None:
            logger.info(f"Created difficulty record for {question_file}: {record.difficulty.value}")
        elif existing.difficulty != record.difficulty:
            logger.info(
                f"Difficulty of {question_file} changed "
                f"{existing.difficulty.value} -> {record.difficulty.value} "
                f"(success rate {record.success_rate}%)"
            )
        return StoreOutcome.success(record)
    
    async def record_attempt(self, question_file: str, is_correct: bool) -> bool:
        """Record one attempt. Returns False if it could not be persisted."""
        return (await self.record_attempt_outcome(question_file, is_correct)).ok
    
    async def set_manual_difficulty_outcome(
        self,
        question_file: str,
        difficulty: Union[Difficulty, str]
    ) -> StoreOutcome:
        """
        Pin the difficulty of a question and stop automatic reclassification.
        
        Args:
            question_file: The question to pin
            difficulty: The tier to pin it to
            
        Raises:
            ValueError: If ``difficulty`` is not a known tier
        """
        tier = Difficulty.parse(difficulty)
        async with self._locks.hold(question_file):
            try:
                await self._store.patch(
                    question_file, manual_override_changes(tier, self._clock())
                )
            except StoreError as e:
                return self._failure("set_manual_difficulty", question_file, e)
        
        self.cache.invalidate()
        logger.info(f"Difficulty of {question_file} pinned to {tier.value}")
        return StoreOutcome.success()
    
    async def set_manual_difficulty(
        self,
        question_file: str,
        difficulty: Union[Difficulty, str]
    ) -> bool:
        """Pin the difficulty of a question. Returns False on store failure."""
        return (await self.set_manual_difficulty_outcome(question_file, difficulty)).ok
    
    async def bootstrap_unrated_outcome(self, question_file: str) -> StoreOutcome:
        """
        Insert a zero-attempt, unrated record unless one already exists.
        
        Returns:
            SUCCESS with the new record, SKIPPED with the existing one, or the
            failure cause. A failed existence check never leads to an insert.
        """
        async with self._locks.hold(question_file):
            try:
                existing = await self._store.fetch_one(question_file)
                if existing is not None:
                    return StoreOutcome.skipped(existing)
                record = new_unrated_record(question_file, self._clock())
                await self._store.insert(record)
            except StoreError as e:
                return self._failure("bootstrap_unrated", question_file, e)
        
        self.cache.invalidate()
        return StoreOutcome.success(record)
    
    async def bootstrap_unrated(self, question_file: str) -> bool:
        """
        Make sure ``question_file`` has a record, creating an unrated one if needed.
        
        Returns True both when a record was created and when one already
        existed (which is left untouched).
        """
        return (await self.bootstrap_unrated_outcome(question_file)).ok
    
    async def bootstrap_many(self, question_files: Iterable[str]) -> BootstrapSummary:
        """Bootstrap every file in ``question_files``, one at a time."""
        summary = BootstrapSummary()
        for question_file in question_files:
            outcome = await self.bootstrap_unrated_outcome(question_file)
            if outcome.status == OutcomeStatus.SUCCESS:
                summary.created += 1
            elif outcome.status == OutcomeStatus.SKIPPED:
                summary.skipped += 1
            else:
                summary.failed += 1
        logger.info(
            f"Bootstrap finished: {summary.created} created, "
            f"{summary.skipped} skipped, {summary.failed} failed"
        )
        return summary
    
    async def recalculate_all(self) -> int:
        """
        Run the store-side recompute of every difficulty.
        
        Returns:
            Number of rows the store reports as affected, 0 on failure
        """
        try:
            count = await self._store.recalculate_all()
        except StoreError as e:
            self._failure("recalculate_all", "*", e)
            return 0
        self.cache.invalidate()
        logger.info(f"Recalculated difficulties for {count} questions")
        return count
    
    def clear_cache(self) -> None:
        """Drop the cached difficulty map."""
        self.cache.invalidate()
    
    def _failure(self, operation: str, question_file: str, error: StoreError) -> StoreOutcome:
        outcome = StoreOutcome.from_error(error)
        logger.warning(
            f"{operation} failed for {question_file} ({outcome.status.value}): {error}"
        )
        return outcome
