"""
Question domain module.

This module contains the statistics record for quiz questions and the store
contract used to persist it. Concrete stores live in ``memory_repository``
(in-process) and ``rest_repository`` (hosted Postgres behind a REST API).
"""

from .model import QuestionRecord, Difficulty
from .repository import QuestionStatsStore

__all__ = [
    'QuestionRecord',
    'Difficulty',
    'QuestionStatsStore',
]
