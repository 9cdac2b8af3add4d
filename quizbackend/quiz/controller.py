"""
Quiz Controller

Endpoints that serve random questions and accept answers.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from quizbackend.dependencies import get_question_selector
from quizbackend.domain.questions.model import Difficulty
from quizbackend.quiz.selection import QuestionSelector

router = APIRouter()


class QuizQuestionResponse(BaseModel):
    question_file: str
    options: List[str]
    difficulty: str


class SubmitAnswerRequest(BaseModel):
    question_file: str = Field(..., min_length=1, description="Question image file name")
    selected_file: str = Field(..., min_length=1, description="Answer image the player chose")


class AnswerResponse(BaseModel):
    question_file: str
    is_correct: bool
    correct_file: str
    recorded: bool


@router.get("/next", response_model=QuizQuestionResponse)
async def next_question(
    difficulty: Optional[Difficulty] = Query(None, description="Preferred difficulty tier"),
    selector: QuestionSelector = Depends(get_question_selector)
):
    """Serve a random question with shuffled answer options."""
    question = await selector.next_question(difficulty)
    if question is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No questions available")
    return question.to_dict()


@router.post("/answer", response_model=AnswerResponse)
async def submit_answer(
    request: SubmitAnswerRequest,
    selector: QuestionSelector = Depends(get_question_selector)
):
    """Check an answer and update the question's difficulty statistics."""
    result = await selector.submit_answer(request.question_file, request.selected_file)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown question")
    return result.to_dict()
