"""
Quiz image listing and grouping.
"""

import abc
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: Tuple[str, ...] = (".png", ".jpg", ".jpeg", ".webp")
GROUP_SIZE = 5


@dataclass(frozen=True)
class QuestionGroup:
    """One quiz question: its image, the correct answer and three distractors."""
    question_file: str
    correct_file: str
    wrong_files: Tuple[str, str, str]
    
    @property
    def answer_files(self) -> List[str]:
        return [self.correct_file, *self.wrong_files]


class ImageSource(abc.ABC):
    """Lists the file names of quiz images."""
    
    @abc.abstractmethod
    async def list_files(self) -> List[str]:
        """
        List image file names (not paths).
        
        Raises:
            OSError: If the underlying storage cannot be listed
        """
        pass


class LocalImageSource(ImageSource):
    """Images stored in a directory on local disk."""
    
    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
    
    def _scan(self) -> List[str]:
        if not self.directory.is_dir():
            logger.warning(f"Quiz image directory not found: {self.directory}")
            return []
        return [entry.name for entry in self.directory.iterdir() if entry.is_file()]
    
    async def list_files(self) -> List[str]:
        return await asyncio.to_thread(self._scan)


def is_image(name: str) -> bool:
    return name.lower().endswith(IMAGE_EXTENSIONS)


def sort_images(names: Iterable[str]) -> List[str]:
    """Image names only, sorted case-insensitively with an ordinal tiebreak."""
    return sorted(
        (name for name in names if name and is_image(name)),
        key=lambda name: (name.lower(), name)
    )


def group_questions(images: Sequence[str]) -> List[QuestionGroup]:
    """
    Split sorted image names into complete runs of five.
    
    A trailing incomplete run is ignored.
    """
    groups = []
    for start in range(0, len(images) - GROUP_SIZE + 1, GROUP_SIZE):
        question, correct, *wrong = images[start:start + GROUP_SIZE]
        groups.append(QuestionGroup(question, correct, tuple(wrong)))
    return groups


async def load_question_groups(source: ImageSource) -> List[QuestionGroup]:
    """List, filter, sort and group the images of ``source``."""
    return group_questions(sort_images(await source.list_files()))
