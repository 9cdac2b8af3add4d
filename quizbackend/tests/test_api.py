"""
API tests for the image quiz backend.

The application is built with the in-memory store and a fixed image list,
so every endpoint can be exercised without network access.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from quizbackend import create_app
from quizbackend.common.exceptions import StoreUnavailableError
from quizbackend.config import Settings
from quizbackend.domain.questions.memory_repository import MemoryQuestionStatsStore
from quizbackend.domain.questions.model import Difficulty, QuestionRecord
from quizbackend.tests.helpers import FakeClock, ListImageSource, quiz_images

BASE = "/api/v1"


@pytest.fixture
def store():
    return MemoryQuestionStatsStore([
        QuestionRecord("q001_0_question.png", Difficulty.HARD, total_attempts=2),
    ])


@pytest.fixture
def client(store):
    settings = Settings(STORE_BACKEND="memory", PRELOAD_CACHE=False, LOG_LEVEL="WARNING")
    app = create_app(
        settings=settings,
        store=store,
        image_source=ListImageSource(quiz_images(3)),
        clock=FakeClock(),
    )
    with TestClient(app) as client:
        yield client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestDifficultyEndpoints:
    
    def test_difficulty_map(self, client):
        response = client.get(f"{BASE}/difficulty/difficulties")
        assert response.status_code == 200
        assert response.json() == {"q001_0_question.png": "hard"}
    
    def test_questions_by_tier(self, client):
        assert client.get(f"{BASE}/difficulty/difficulties/hard").json() == ["q001_0_question.png"]
        assert client.get(f"{BASE}/difficulty/difficulties/easy").json() == []
    
    def test_unknown_tier_is_rejected(self, client):
        response = client.get(f"{BASE}/difficulty/difficulties/legendary")
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
    
    def test_record_attempt(self, client):
        response = client.post(
            f"{BASE}/difficulty/attempts",
            json={"question_file": "q000_0_question.png", "is_correct": True}
        )
        
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "success"
        assert data["record"]["difficulty"] == "easy"
        assert data["record"]["success_rate"] == 100.0
        
        difficulties = client.get(f"{BASE}/difficulty/difficulties").json()
        assert difficulties["q000_0_question.png"] == "easy"
    
    def test_record_attempt_validation(self, client):
        response = client.post(f"{BASE}/difficulty/attempts", json={"question_file": ""})
        assert response.status_code == 422
    
    def test_record_attempt_store_failure(self, client, store):
        error = StoreUnavailableError("timed out", "fetch_one")
        with patch.object(store, "fetch_one", AsyncMock(side_effect=error)):
            response = client.post(
                f"{BASE}/difficulty/attempts",
                json={"question_file": "q000_0_question.png", "is_correct": False}
            )
        
        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["status"] == "unavailable"
    
    def test_get_question(self, client):
        response = client.get(f"{BASE}/difficulty/questions/q001_0_question.png")
        assert response.status_code == 200
        assert response.json()["total_attempts"] == 2
        
        assert client.get(f"{BASE}/difficulty/questions/missing.png").status_code == 404
    
    def test_get_question_store_failure(self, client, store):
        error = StoreUnavailableError("connection refused", "fetch_one")
        with patch.object(store, "fetch_one", AsyncMock(side_effect=error)):
            response = client.get(f"{BASE}/difficulty/questions/q001_0_question.png")
        assert response.status_code == 503
    
    def test_manual_difficulty(self, client):
        response = client.put(
            f"{BASE}/difficulty/questions/q001_0_question.png/difficulty",
            json={"difficulty": "easy"}
        )
        assert response.json()["success"] is True
        
        client.post(
            f"{BASE}/difficulty/attempts",
            json={"question_file": "q001_0_question.png", "is_correct": False}
        )
        record = client.get(f"{BASE}/difficulty/questions/q001_0_question.png").json()
        assert record["difficulty"] == "easy"
        assert record["manual_override"] is True
        assert record["total_attempts"] == 3
    
    def test_manual_difficulty_rejects_unknown_tier(self, client):
        response = client.put(
            f"{BASE}/difficulty/questions/q001_0_question.png/difficulty",
            json={"difficulty": "brutal"}
        )
        assert response.status_code == 422
    
    def test_bootstrap(self, client):
        response = client.post(f"{BASE}/difficulty/bootstrap")
        assert response.json() == {"created": 2, "skipped": 1, "failed": 0, "total": 3}
        
        response = client.post(f"{BASE}/difficulty/bootstrap")
        assert response.json()["skipped"] == 3
    
    def test_list_questions(self, client):
        client.post(f"{BASE}/difficulty/bootstrap")
        response = client.get(f"{BASE}/difficulty/questions", params={"max_rows": 2})
        assert response.status_code == 200
        assert len(response.json()) == 2
    
    def test_recalculate(self, client):
        response = client.post(f"{BASE}/difficulty/recalculate")
        assert response.json() == {"updated": 1}
    
    def test_admin_report(self, client):
        response = client.get(f"{BASE}/difficulty/admin/report")
        
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["hard_count"] == 1
        assert data["unrated_count"] == 2
    
    def test_cache_endpoints(self, client, store):
        client.get(f"{BASE}/difficulty/difficulties")
        assert client.get(f"{BASE}/difficulty/cache/stats").json()["populated"] is True
        
        assert client.delete(f"{BASE}/difficulty/cache").status_code == 204
        assert client.get(f"{BASE}/difficulty/cache/stats").json()["populated"] is False
        
        client.get(f"{BASE}/difficulty/difficulties")
        assert store.calls["fetch_difficulty_map"] == 2


class TestQuizEndpoints:
    
    def test_next_question(self, client):
        response = client.get(f"{BASE}/quiz/next")
        assert response.status_code == 200
        data = response.json()
        assert data["question_file"].endswith("_0_question.png")
        assert len(data["options"]) == 4
    
    def test_next_question_by_tier(self, client):
        for _ in range(5):
            data = client.get(f"{BASE}/quiz/next", params={"difficulty": "hard"}).json()
            assert data["question_file"] == "q001_0_question.png"
            assert data["difficulty"] == "hard"
    
    def test_answer(self, client):
        response = client.post(
            f"{BASE}/quiz/answer",
            json={"question_file": "q002_0_question.png", "selected_file": "q002_3_wrong.png"}
        )
        
        assert response.status_code == 200
        assert response.json() == {
            "question_file": "q002_0_question.png",
            "is_correct": False,
            "correct_file": "q002_1_correct.png",
            "recorded": True,
        }
    
    def test_answer_unknown_question(self, client):
        response = client.post(
            f"{BASE}/quiz/answer",
            json={"question_file": "nope.png", "selected_file": "q002_1_correct.png"}
        )
        assert response.status_code == 404


def test_no_images():
    settings = Settings(STORE_BACKEND="memory", PRELOAD_CACHE=False)
    app = create_app(
        settings=settings,
        store=MemoryQuestionStatsStore(),
        image_source=ListImageSource([]),
    )
    with TestClient(app) as client:
        assert client.get(f"{BASE}/quiz/next").status_code == 404


def test_preload_warms_cache():
    store = MemoryQuestionStatsStore([QuestionRecord("a.png", Difficulty.EASY, total_attempts=1, correct_attempts=1)])
    settings = Settings(STORE_BACKEND="memory", PRELOAD_CACHE=True)
    app = create_app(settings=settings, store=store, image_source=ListImageSource([]))
    
    with TestClient(app) as client:
        client.get(f"{BASE}/difficulty/difficulties")
    
    assert store.calls["fetch_difficulty_map"] == 1
