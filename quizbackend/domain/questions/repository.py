"""
Question Statistics Store Module

This module defines the narrow contract the difficulty subsystem needs from
the remote record store. Implementations raise subclasses of
``StoreError`` for every failure; absence of a record is not an error.
"""

import abc
from typing import Any, Dict, List, Optional

from .model import QuestionRecord


class QuestionStatsStore(abc.ABC):
    """
    Abstract base class for per-question statistics stores.
    
    The store is the single source of truth for attempt counters and
    difficulty; callers never cache counters between calls.
    """
    
    @abc.abstractmethod
    async def fetch_one(self, question_file: str) -> Optional[QuestionRecord]:
        """
        Exact-match lookup by question file.
        
        Args:
            question_file: The key to look up
            
        Returns:
            The record if present, None otherwise
        """
        pass
    
    @abc.abstractmethod
    async def fetch_difficulty_map(self) -> Dict[str, str]:
        """
        Projected full-table read of question file and difficulty only.
        
        Returns:
            Mapping of question file to difficulty tier name
        """
        pass
    
    @abc.abstractmethod
    async def fetch_page(self, limit: int, offset: int) -> List[QuestionRecord]:
        """
        Read one page of records ordered by last update, most recent first.
        
        Args:
            limit: Maximum number of rows to return
            offset: Number of rows to skip
            
        Returns:
            The records on this page
        """
        pass
    
    @abc.abstractmethod
    async def insert(self, record: QuestionRecord) -> None:
        """
        Insert a new record. Fails if a record for the same file exists.
        
        Args:
            record: The record to insert
        """
        pass
    
    @abc.abstractmethod
    async def patch(self, question_file: str, changes: Dict[str, Any]) -> None:
        """
        Partially update the record for a question file.
        
        Args:
            question_file: The key of the row to update
            changes: Python field names mapped to their new values
        """
        pass
    
    @abc.abstractmethod
    async def recalculate_all(self) -> int:
        """
        Run the store-side recompute of every difficulty classification.
        
        Returns:
            Number of rows affected
        """
        pass
    
    async def close(self) -> None:
        """Release any held resources."""
        pass
