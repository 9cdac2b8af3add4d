"""
Attempt accumulation.

Pure functions that turn an attempt outcome into the next state of a
question's statistics record. Persistence and locking live in the service.
"""

import dataclasses
from datetime import datetime
from typing import Any, Dict

from quizbackend.domain.questions.model import Difficulty, QuestionRecord
from quizbackend.difficulty.classifier import classify, compute_success_rate

# Fields rewritten when an attempt is recorded against an existing record.
# manual_override and created_at are deliberately absent.
ATTEMPT_FIELDS = (
    'total_attempts',
    'correct_attempts',
    'success_rate',
    'difficulty',
    'last_updated',
)


def new_attempt_record(question_file: str, is_correct: bool, now: datetime) -> QuestionRecord:
    """Record for a question seen for the first time through an attempt."""
    correct = 1 if is_correct else 0
    rate = compute_success_rate(correct, 1)
    return QuestionRecord(
        question_file=question_file,
        difficulty=classify(rate),
        success_rate=rate,
        total_attempts=1,
        correct_attempts=correct,
        manual_override=False,
        created_at=now,
        last_updated=now,
    )


def new_unrated_record(question_file: str, now: datetime) -> QuestionRecord:
    """Zero-attempt placeholder used to pre-populate the store."""
    return QuestionRecord(
        question_file=question_file,
        difficulty=Difficulty.UNRATED,
        created_at=now,
        last_updated=now,
    )


def apply_attempt(record: QuestionRecord, is_correct: bool, now: datetime) -> QuestionRecord:
    """
    Next state of ``record`` after one more attempt.
    
    The difficulty is reclassified unless the record is manually pinned.
    """
    total = record.total_attempts + 1
    correct = record.correct_attempts + (1 if is_correct else 0)
    rate = compute_success_rate(correct, total)
    difficulty = record.difficulty if record.manual_override else classify(rate)
    return dataclasses.replace(
        record,
        total_attempts=total,
        correct_attempts=correct,
        success_rate=rate,
        difficulty=difficulty,
        last_updated=now,
    )


def attempt_changes(record: QuestionRecord) -> Dict[str, Any]:
    """The partial update that persists an applied attempt."""
    return {name: getattr(record, name) for name in ATTEMPT_FIELDS}


def manual_override_changes(difficulty: Difficulty, now: datetime) -> Dict[str, Any]:
    """The partial update that pins a difficulty."""
    return {
        'difficulty': difficulty,
        'manual_override': True,
        'last_updated': now,
    }
