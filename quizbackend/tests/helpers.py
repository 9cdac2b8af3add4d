"""Shared test doubles."""

from datetime import datetime, timedelta, timezone
from typing import List

from quizbackend.quiz.images import ImageSource


class FakeClock:
    """Manually advanced monotonic clock."""
    
    def __init__(self, start: float = 1000.0):
        self.now = start
    
    def __call__(self) -> float:
        return self.now
    
    def advance(self, seconds: float) -> None:
        self.now += seconds


class SteppingUtcClock:
    """UTC clock that moves forward one second per call."""
    
    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.current = start
    
    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


class ListImageSource(ImageSource):
    """Image source over a fixed list of names."""
    
    def __init__(self, names: List[str]):
        self.names = list(names)
    
    async def list_files(self) -> List[str]:
        return list(self.names)


class BrokenImageSource(ImageSource):
    async def list_files(self) -> List[str]:
        raise OSError("storage offline")


def quiz_images(count: int) -> List[str]:
    """``count`` complete question groups: q, correct, three wrong answers each."""
    names = []
    for index in range(count):
        prefix = f"q{index:03d}"
        names.extend([
            f"{prefix}_0_question.png",
            f"{prefix}_1_correct.png",
            f"{prefix}_2_wrong.png",
            f"{prefix}_3_wrong.png",
            f"{prefix}_4_wrong.png",
        ])
    return names
