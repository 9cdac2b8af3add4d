"""
Difficulty classification.

Maps a success rate (percentage of correct attempts) to a difficulty tier.
Thresholds are closed at the lower bound and evaluated from easiest down.
"""

import math
from decimal import Decimal
from typing import Union

from quizbackend.domain.questions.model import Difficulty, round_rate

EASY_THRESHOLD = 70
MEDIUM_THRESHOLD = 40

Rate = Union[Decimal, float, int]


def classify(success_rate: Rate) -> Difficulty:
    """
    Classify a success rate into EASY, MEDIUM or HARD.
    
    Never called for zero-attempt records; those stay UNRATED.
    
    Args:
        success_rate: Percentage in [0, 100]
        
    Returns:
        The difficulty tier
        
    Raises:
        ValueError: If the rate is NaN or outside [0, 100]
    """
    if isinstance(success_rate, float) and math.isnan(success_rate):
        raise ValueError("Success rate must be a number")
    if isinstance(success_rate, Decimal) and success_rate.is_nan():
        raise ValueError("Success rate must be a number")
    if success_rate < 0 or success_rate > 100:
        raise ValueError(f"Success rate must be within [0, 100], got {success_rate}")
    
    if success_rate >= EASY_THRESHOLD:
        return Difficulty.EASY
    if success_rate >= MEDIUM_THRESHOLD:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def compute_success_rate(correct_attempts: int, total_attempts: int) -> Decimal:
    """
    Percentage of correct attempts, rounded to two places.
    
    Returns 0 when there are no attempts.
    """
    if total_attempts <= 0:
        return Decimal("0")
    return round_rate(Decimal(correct_attempts) / Decimal(total_attempts) * 100)
