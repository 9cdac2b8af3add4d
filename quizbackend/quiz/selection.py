"""
Random question selection and answer checking.
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from quizbackend.difficulty.service import QuestionDifficultyService
from quizbackend.domain.questions.model import Difficulty
from quizbackend.quiz.images import ImageSource, QuestionGroup, load_question_groups

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuizQuestion:
    """A question as served to a player: the answer options are shuffled."""
    question_file: str
    options: List[str]
    difficulty: str = Difficulty.UNRATED.value
    
    def to_dict(self) -> Dict[str, object]:
        return {
            'question_file': self.question_file,
            'options': list(self.options),
            'difficulty': self.difficulty,
        }


@dataclass(frozen=True)
class AnswerResult:
    """Outcome of answering a question."""
    question_file: str
    is_correct: bool
    correct_file: str
    recorded: bool
    
    def to_dict(self) -> Dict[str, object]:
        return {
            'question_file': self.question_file,
            'is_correct': self.is_correct,
            'correct_file': self.correct_file,
            'recorded': self.recorded,
        }


class QuestionSelector:
    """
    Serves random questions, optionally restricted to one difficulty tier,
    and feeds answers back into the difficulty service.
    """
    
    def __init__(
        self,
        images: ImageSource,
        difficulty_service: QuestionDifficultyService,
        rng: Optional[random.Random] = None
    ):
        self._images = images
        self._difficulty = difficulty_service
        self._rng = rng or random.Random()
    
    async def _groups(self) -> List[QuestionGroup]:
        try:
            return await load_question_groups(self._images)
        except OSError as e:
            logger.error(f"Could not list quiz images: {e}")
            return []
    
    async def next_question(
        self,
        tier: Optional[Union[Difficulty, str]] = None
    ) -> Optional[QuizQuestion]:
        """
        Pick a random question.
        
        Args:
            tier: Restrict to questions currently rated this tier. When no
                question has that tier, any question may be returned.
            
        Returns:
            The question with shuffled options, or None if there are no images
        """
        groups = await self._groups()
        if not groups:
            return None
        
        difficulties = await self._difficulty.get_all_difficulties_map()
        candidates = groups
        if tier is not None:
            wanted = Difficulty.parse(tier).value
            matching = [
                group for group in groups
                if difficulties.get(group.question_file, Difficulty.UNRATED.value) == wanted
            ]
            if matching:
                candidates = matching
            else:
                logger.info(f"No questions rated {wanted}; choosing from all questions")
        
        chosen = self._rng.choice(candidates)
        options = chosen.answer_files
        self._rng.shuffle(options)
        return QuizQuestion(
            question_file=chosen.question_file,
            options=options,
            difficulty=difficulties.get(chosen.question_file, Difficulty.UNRATED.value)
        )
    
    async def find_group(self, question_file: str) -> Optional[QuestionGroup]:
        for group in await self._groups():
            if group.question_file == question_file:
                return group
        return None
    
    async def submit_answer(self, question_file: str, selected_file: str) -> Optional[AnswerResult]:
        """
        Check an answer and record the attempt.
        
        Args:
            question_file: The question being answered
            selected_file: The answer image the player chose
            
        Returns:
            The result, or None if ``question_file`` is not a known question
        """
        group = await self.find_group(question_file)
        if group is None:
            return None
        
        is_correct = selected_file == group.correct_file
        recorded = await self._difficulty.record_attempt(question_file, is_correct)
        if not recorded:
            logger.warning(f"Attempt on {question_file} was not recorded")
        return AnswerResult(
            question_file=question_file,
            is_correct=is_correct,
            correct_file=group.correct_file,
            recorded=recorded
        )
