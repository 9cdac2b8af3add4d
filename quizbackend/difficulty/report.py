"""
Admin difficulty report.

Merges the statistics table with the questions discovered in the image
store, so that questions never attempted still appear (as unrated) and
records whose image has gone missing are still shown.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from quizbackend.difficulty.loader import DEFAULT_MAX_ROWS
from quizbackend.difficulty.service import QuestionDifficultyService
from quizbackend.domain.questions.model import Difficulty, QuestionRecord
from quizbackend.quiz.images import GROUP_SIZE, ImageSource, sort_images

logger = logging.getLogger(__name__)


@dataclass
class DifficultyReport:
    """Per-question rows plus tier counts for the admin dashboard."""
    questions: List[QuestionRecord] = field(default_factory=list)
    
    def count(self, tier: Difficulty) -> int:
        return sum(1 for record in self.questions if record.difficulty == tier)
    
    @property
    def easy_count(self) -> int:
        return self.count(Difficulty.EASY)
    
    @property
    def medium_count(self) -> int:
        return self.count(Difficulty.MEDIUM)
    
    @property
    def hard_count(self) -> int:
        return self.count(Difficulty.HARD)
    
    @property
    def unrated_count(self) -> int:
        return self.count(Difficulty.UNRATED)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'questions': [record.to_dict() for record in self.questions],
            'easy_count': self.easy_count,
            'medium_count': self.medium_count,
            'hard_count': self.hard_count,
            'unrated_count': self.unrated_count,
            'total': len(self.questions),
        }


async def discover_question_files(source: ImageSource) -> List[str]:
    """
    Question image names from ``source``: every fifth image in sorted order.
    
    A trailing incomplete group still contributes its first image. Returns an
    empty list if the source cannot be listed.
    """
    try:
        names = await source.list_files()
    except OSError as e:
        logger.error(f"Could not list quiz images: {e}")
        return []
    return sort_images(names)[::GROUP_SIZE]


async def build_difficulty_report(
    service: QuestionDifficultyService,
    image_source: ImageSource,
    max_rows: int = DEFAULT_MAX_ROWS
) -> DifficultyReport:
    """
    Build the admin report.
    
    Store records are matched to discovered files case-insensitively. When
    several records differ only by case, the most recently updated wins.
    
    Args:
        service: Difficulty service used for the bulk load
        image_source: Where question images are listed from
        max_rows: Upper bound on records loaded from the store
    """
    by_file: Dict[str, QuestionRecord] = {}
    for record in await service.load_all(max_rows):
        by_file.setdefault(record.question_file.lower(), record)
    
    discovered = await discover_question_files(image_source)
    seen = set()
    rows: List[QuestionRecord] = []
    for name in discovered:
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        rows.append(by_file.get(key) or QuestionRecord(question_file=name))
    
    rows.extend(record for key, record in by_file.items() if key not in seen)
    rows.sort(key=lambda record: (record.question_file.lower(), record.question_file))
    return DifficultyReport(questions=rows)
