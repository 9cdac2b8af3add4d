"""Tests for quiz image grouping and question selection."""

import random
from pathlib import Path

import pytest

from quizbackend.difficulty.service import QuestionDifficultyService
from quizbackend.domain.questions.memory_repository import MemoryQuestionStatsStore
from quizbackend.domain.questions.model import Difficulty, QuestionRecord
from quizbackend.quiz.images import (
    LocalImageSource,
    QuestionGroup,
    group_questions,
    load_question_groups,
    sort_images,
)
from quizbackend.quiz.selection import QuestionSelector
from quizbackend.tests.helpers import BrokenImageSource, ListImageSource, quiz_images


class TestImages:
    
    def test_sort_is_case_insensitive_and_filters_non_images(self):
        names = ["B.png", "a.PNG", "notes.txt", "c.jpg", "", "D.webp", "e.jpeg"]
        assert sort_images(names) == ["a.PNG", "B.png", "c.jpg", "D.webp", "e.jpeg"]
    
    def test_sort_breaks_case_ties_ordinally(self):
        assert sort_images(["a.png", "A.png"]) == ["A.png", "a.png"]
    
    def test_groups_of_five(self):
        names = quiz_images(2)
        groups = group_questions(names)
        
        assert groups[0] == QuestionGroup(
            "q000_0_question.png",
            "q000_1_correct.png",
            ("q000_2_wrong.png", "q000_3_wrong.png", "q000_4_wrong.png"),
        )
        assert groups[1].question_file == "q001_0_question.png"
    
    def test_trailing_partial_group_is_ignored(self):
        names = quiz_images(3)[:-2]
        assert [g.question_file for g in group_questions(names)] == [
            "q000_0_question.png", "q001_0_question.png"
        ]
        assert group_questions(names[:4]) == []
    
    @pytest.mark.asyncio
    async def test_load_groups_sorts_before_grouping(self):
        names = list(reversed(quiz_images(2)))
        groups = await load_question_groups(ListImageSource(names))
        assert [g.question_file for g in groups] == ["q000_0_question.png", "q001_0_question.png"]
    
    @pytest.mark.asyncio
    async def test_local_image_source(self, tmp_path: Path):
        for name in quiz_images(1):
            (tmp_path / name).write_bytes(b"")
        (tmp_path / "nested").mkdir()
        
        names = await LocalImageSource(tmp_path).list_files()
        assert sorted(names) == quiz_images(1)
    
    @pytest.mark.asyncio
    async def test_local_image_source_missing_directory(self, tmp_path: Path):
        assert await LocalImageSource(tmp_path / "missing").list_files() == []


@pytest.fixture
def store():
    return MemoryQuestionStatsStore([
        QuestionRecord("q001_0_question.png", Difficulty.EASY, total_attempts=1, correct_attempts=1),
        QuestionRecord("q002_0_question.png", Difficulty.HARD, total_attempts=1),
    ])


@pytest.fixture
def service(store):
    return QuestionDifficultyService(store)


def make_selector(service, names=None, seed=7):
    source = ListImageSource(quiz_images(4) if names is None else names)
    return QuestionSelector(source, service, rng=random.Random(seed))


class TestQuestionSelector:
    
    @pytest.mark.asyncio
    async def test_question_has_shuffled_options(self, service):
        selector = make_selector(service)
        question = await selector.next_question()
        
        prefix = question.question_file[:4]
        assert sorted(question.options) == [
            f"{prefix}_1_correct.png",
            f"{prefix}_2_wrong.png",
            f"{prefix}_3_wrong.png",
            f"{prefix}_4_wrong.png",
        ]
    
    @pytest.mark.asyncio
    async def test_tier_filter(self, service):
        selector = make_selector(service)
        for _ in range(10):
            question = await selector.next_question("easy")
            assert question.question_file == "q001_0_question.png"
            assert question.difficulty == "easy"
    
    @pytest.mark.asyncio
    async def test_unattempted_questions_count_as_unrated(self, service):
        selector = make_selector(service)
        seen = {(await selector.next_question(Difficulty.UNRATED)).question_file for _ in range(30)}
        assert seen <= {"q000_0_question.png", "q003_0_question.png"}
    
    @pytest.mark.asyncio
    async def test_tier_without_questions_falls_back_to_all(self, service):
        selector = make_selector(service)
        question = await selector.next_question("medium")
        assert question is not None
    
    @pytest.mark.asyncio
    async def test_unknown_tier_raises(self, service):
        with pytest.raises(ValueError):
            await make_selector(service).next_question("legendary")
    
    @pytest.mark.asyncio
    async def test_no_images(self, service):
        assert await make_selector(service, names=[]).next_question() is None
    
    @pytest.mark.asyncio
    async def test_broken_image_source(self, service):
        selector = QuestionSelector(BrokenImageSource(), service)
        assert await selector.next_question() is None
        assert await selector.submit_answer("q000_0_question.png", "x.png") is None
    
    @pytest.mark.asyncio
    async def test_correct_answer_is_recorded(self, service):
        selector = make_selector(service)
        
        result = await selector.submit_answer("q000_0_question.png", "q000_1_correct.png")
        
        assert result.is_correct
        assert result.recorded
        assert result.correct_file == "q000_1_correct.png"
        record = await service.get_one("q000_0_question.png")
        assert record.total_attempts == 1
        assert record.difficulty == Difficulty.EASY
    
    @pytest.mark.asyncio
    async def test_wrong_answer_is_recorded(self, service):
        selector = make_selector(service)
        
        result = await selector.submit_answer("q001_0_question.png", "q001_3_wrong.png")
        
        assert not result.is_correct
        record = await service.get_one("q001_0_question.png")
        assert (record.total_attempts, record.correct_attempts) == (2, 1)
        assert record.difficulty == Difficulty.MEDIUM
    
    @pytest.mark.asyncio
    async def test_unknown_question(self, service, store):
        selector = make_selector(service)
        assert await selector.submit_answer("q000_1_correct.png", "q000_1_correct.png") is None
        assert "insert" not in store.calls
