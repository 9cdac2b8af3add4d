"""
FastAPI dependencies resolving the services built by the application lifespan.
"""

from fastapi import Request

from quizbackend.config import Settings
from quizbackend.difficulty.service import QuestionDifficultyService
from quizbackend.quiz.images import ImageSource
from quizbackend.quiz.selection import QuestionSelector


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_difficulty_service(request: Request) -> QuestionDifficultyService:
    return request.app.state.difficulty_service


def get_image_source(request: Request) -> ImageSource:
    return request.app.state.image_source


def get_question_selector(request: Request) -> QuestionSelector:
    return request.app.state.question_selector
