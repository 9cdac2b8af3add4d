"""
Difficulty cache.

In-memory snapshot of the whole ``question file -> difficulty`` mapping,
read through to the store on a miss or after the TTL. Attempt counters are
never cached here.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Union

from quizbackend.common.cache import SnapshotCache
from quizbackend.common.cache.entry import Clock
from quizbackend.common.exceptions import StoreError
from quizbackend.difficulty.results import StoreOutcome
from quizbackend.domain.questions.model import Difficulty
from quizbackend.domain.questions.repository import QuestionStatsStore

DEFAULT_TTL_SECONDS = 2 * 60 * 60

logger = logging.getLogger(__name__)


class DifficultyCache:
    """
    Time-bounded, explicitly invalidated snapshot of question difficulties.
    
    A failed refresh yields an empty mapping and leaves the cache empty; an
    expired snapshot is never served.
    """
    
    def __init__(
        self,
        store: QuestionStatsStore,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Clock = time.monotonic
    ):
        self._store = store
        self._snapshot: SnapshotCache[Dict[str, str]] = SnapshotCache(
            ttl=ttl, clock=clock, name="difficulties"
        )
        self.last_failure: Optional[StoreOutcome] = None
    
    async def _load(self) -> Optional[Dict[str, str]]:
        try:
            mapping = await self._store.fetch_difficulty_map()
        except StoreError as e:
            self.last_failure = StoreOutcome.from_error(e)
            logger.warning(
                f"Difficulty map refresh failed ({self.last_failure.status.value}): {e}"
            )
            return None
        self.last_failure = None
        logger.debug(f"Loaded difficulty map with {len(mapping)} entries")
        return mapping
    
    async def get_all(self) -> Dict[str, str]:
        """
        The full mapping of question file to tier name.
        
        Returns:
            A copy of the cached snapshot, or an empty dict if the store could
            not be read
        """
        mapping = await self._snapshot.get_or_load(self._load)
        return dict(mapping) if mapping is not None else {}
    
    async def get_by_difficulty(self, tier: Union[Difficulty, str]) -> List[str]:
        """
        Question files whose stored tier equals ``tier``.
        
        Reflects whatever the store last said; never reclassifies.
        """
        wanted = Difficulty.parse(tier).value
        mapping = await self.get_all()
        return [name for name, value in mapping.items() if value == wanted]
    
    def invalidate(self) -> None:
        """Clear the snapshot so the next read refetches."""
        self._snapshot.invalidate()
    
    def get_stats(self) -> Dict[str, Any]:
        stats = self._snapshot.get_stats()
        stats['last_failure'] = self.last_failure.status.value if self.last_failure else None
        return stats
