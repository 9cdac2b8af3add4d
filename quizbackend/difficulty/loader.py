"""
Bulk loading of question statistics.

Pages through the whole statistics table for reporting and bootstrap.
Pages are ordered by last update, newest first. A row updated while the
scan is running moves to the front of that order, so it can be skipped or
returned twice across page boundaries; callers that need an exact snapshot
must not run the scan alongside writes.
"""

import logging
from typing import List, Optional

from quizbackend.common.exceptions import StoreError
from quizbackend.common.logger import log_execution_time
from quizbackend.difficulty.results import StoreOutcome
from quizbackend.domain.questions.model import QuestionRecord
from quizbackend.domain.questions.repository import QuestionStatsStore

# Stays under the REST gateway's per-request row cap
DEFAULT_PAGE_SIZE = 1100
DEFAULT_MAX_ROWS = 10000

logger = logging.getLogger(__name__)


class BulkLoader:
    """Paginated full-table scan over a QuestionStatsStore."""
    
    def __init__(self, store: QuestionStatsStore, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._store = store
        self.page_size = page_size
        self.last_failure: Optional[StoreOutcome] = None
    
    @log_execution_time(logger)
    async def load_all(self, max_rows: int = DEFAULT_MAX_ROWS) -> List[QuestionRecord]:
        """
        Load up to ``max_rows`` records, page by page.
        
        Stops at the first short page or once ``max_rows`` records have been
        collected. On a store failure the rows gathered so far are returned.
        
        Args:
            max_rows: Upper bound on the number of records returned
            
        Returns:
            The loaded records, most recently updated first
        """
        records: List[QuestionRecord] = []
        offset = 0
        self.last_failure = None
        
        while len(records) < max_rows:
            limit = min(self.page_size, max_rows - len(records))
            try:
                page = await self._store.fetch_page(limit=limit, offset=offset)
            except StoreError as e:
                self.last_failure = StoreOutcome.from_error(e)
                logger.warning(
                    f"Bulk load stopped at offset {offset} "
                    f"({self.last_failure.status.value}): {e}"
                )
                break
            
            records.extend(record for record in page if record.question_file.strip())
            if len(page) < limit:
                break
            offset += len(page)
        
        logger.info(f"Bulk load returned {len(records)} records")
        return records[:max_rows]
