"""Tests for the admin difficulty report."""

from datetime import datetime, timedelta, timezone

import pytest

from quizbackend.difficulty.report import build_difficulty_report, discover_question_files
from quizbackend.difficulty.service import QuestionDifficultyService
from quizbackend.domain.questions.memory_repository import MemoryQuestionStatsStore
from quizbackend.domain.questions.model import Difficulty, QuestionRecord
from quizbackend.tests.helpers import BrokenImageSource, ListImageSource, quiz_images

NOW = datetime(2026, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def service():
    store = MemoryQuestionStatsStore([
        QuestionRecord(
            "Q000_0_question.png", Difficulty.HARD, total_attempts=4,
            last_updated=NOW - timedelta(days=3)
        ),
        QuestionRecord(
            "q000_0_question.png", Difficulty.EASY, total_attempts=2, correct_attempts=2,
            last_updated=NOW
        ),
        QuestionRecord(
            "gone.png", Difficulty.MEDIUM, total_attempts=2, correct_attempts=1,
            last_updated=NOW - timedelta(days=1)
        ),
    ])
    return QuestionDifficultyService(store)


@pytest.mark.asyncio
async def test_report_merges_store_and_images(service):
    report = await build_difficulty_report(service, ListImageSource(quiz_images(2)))
    
    assert [record.question_file for record in report.questions] == [
        "gone.png", "q000_0_question.png", "q001_0_question.png"
    ]
    by_name = {record.question_file: record for record in report.questions}
    assert by_name["q000_0_question.png"].difficulty == Difficulty.EASY
    assert by_name["q001_0_question.png"].difficulty == Difficulty.UNRATED
    assert by_name["q001_0_question.png"].total_attempts == 0


@pytest.mark.asyncio
async def test_report_counts(service):
    report = await build_difficulty_report(service, ListImageSource(quiz_images(2)))
    
    assert report.to_dict()["total"] == 3
    assert (report.easy_count, report.medium_count, report.hard_count, report.unrated_count) == (1, 1, 0, 1)
    assert sum(report.count(tier) for tier in Difficulty) == 3


@pytest.mark.asyncio
async def test_report_without_images_lists_store_records(service):
    report = await build_difficulty_report(service, BrokenImageSource())
    assert [record.question_file for record in report.questions] == [
        "gone.png", "q000_0_question.png"
    ]


@pytest.mark.asyncio
async def test_report_respects_max_rows(service):
    report = await build_difficulty_report(service, ListImageSource([]), max_rows=1)
    assert [record.question_file for record in report.questions] == ["q000_0_question.png"]


@pytest.mark.asyncio
async def test_discover_question_files():
    names = quiz_images(2) + ["readme.txt"]
    assert await discover_question_files(ListImageSource(names)) == [
        "q000_0_question.png", "q001_0_question.png"
    ]


@pytest.mark.asyncio
async def test_discover_includes_trailing_partial_group():
    names = quiz_images(2) + ["zz_0_question.png", "zz_1_correct.png"]
    assert await discover_question_files(ListImageSource(names)) == [
        "q000_0_question.png", "q001_0_question.png", "zz_0_question.png"
    ]


@pytest.mark.asyncio
async def test_report_lists_question_of_partial_group(service):
    names = quiz_images(1) + ["zz_0_question.png"]
    report = await build_difficulty_report(service, ListImageSource(names))
    by_name = {record.question_file: record for record in report.questions}
    assert by_name["zz_0_question.png"].difficulty == Difficulty.UNRATED
