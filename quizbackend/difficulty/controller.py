"""
Question Difficulty Controller

HTTP endpoints over the QuestionDifficultyService: difficulty lookups for
question selection, attempt recording, and the admin operations (manual
overrides, bootstrap, recompute, report, cache invalidation).
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from quizbackend.config import Settings
from quizbackend.dependencies import get_difficulty_service, get_image_source, get_settings
from quizbackend.difficulty.report import build_difficulty_report, discover_question_files
from quizbackend.difficulty.service import QuestionDifficultyService
from quizbackend.domain.questions.model import Difficulty
from quizbackend.quiz.images import ImageSource

router = APIRouter()


# Request / response models
class QuestionRecordResponse(BaseModel):
    question_file: str
    difficulty: Difficulty
    success_rate: float
    total_attempts: int
    correct_attempts: int
    manual_override: bool
    created_at: Optional[str] = None
    last_updated: Optional[str] = None


class RecordAttemptRequest(BaseModel):
    question_file: str = Field(..., min_length=1, description="Question image file name")
    is_correct: bool = Field(..., description="Whether the answer was correct")


class ManualDifficultyRequest(BaseModel):
    difficulty: Difficulty = Field(..., description="Tier to pin the question to")


class WriteResponse(BaseModel):
    success: bool
    status: str
    record: Optional[QuestionRecordResponse] = None


class BootstrapResponse(BaseModel):
    created: int
    skipped: int
    failed: int
    total: int


class RecalculateResponse(BaseModel):
    updated: int


class DifficultyReportResponse(BaseModel):
    questions: List[QuestionRecordResponse]
    easy_count: int
    medium_count: int
    hard_count: int
    unrated_count: int
    total: int


@router.get("/difficulties", response_model=Dict[str, str])
async def get_difficulties(
    service: QuestionDifficultyService = Depends(get_difficulty_service)
) -> Dict[str, str]:
    """Mapping of every rated question file to its tier."""
    return await service.get_all_difficulties_map()


@router.get("/difficulties/{tier}", response_model=List[str])
async def get_questions_by_difficulty(
    tier: Difficulty,
    service: QuestionDifficultyService = Depends(get_difficulty_service)
) -> List[str]:
    """Question files currently rated ``tier``."""
    return await service.get_questions_by_difficulty(tier)


@router.get("/questions", response_model=List[QuestionRecordResponse])
async def list_questions(
    max_rows: int = Query(10000, gt=0, le=100000),
    service: QuestionDifficultyService = Depends(get_difficulty_service)
):
    """All statistics records, newest first."""
    return [record.to_dict() for record in await service.load_all(max_rows)]


@router.get("/questions/{question_file}", response_model=QuestionRecordResponse)
async def get_question(
    question_file: str,
    service: QuestionDifficultyService = Depends(get_difficulty_service)
):
    outcome = await service.lookup(question_file)
    if outcome.failed:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Difficulty store unavailable ({outcome.status.value})"
        )
    if outcome.record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    return outcome.record.to_dict()


@router.post("/attempts", response_model=WriteResponse)
async def record_attempt(
    request: RecordAttemptRequest,
    service: QuestionDifficultyService = Depends(get_difficulty_service)
):
    """Record one answer to a question."""
    outcome = await service.record_attempt_outcome(request.question_file, request.is_correct)
    return {
        "success": outcome.ok,
        "status": outcome.status.value,
        "record": outcome.record.to_dict() if outcome.record else None,
    }


@router.put("/questions/{question_file}/difficulty", response_model=WriteResponse)
async def set_manual_difficulty(
    question_file: str,
    request: ManualDifficultyRequest,
    service: QuestionDifficultyService = Depends(get_difficulty_service)
):
    """Pin a question's tier; later attempts no longer reclassify it."""
    outcome = await service.set_manual_difficulty_outcome(question_file, request.difficulty)
    return {"success": outcome.ok, "status": outcome.status.value, "record": None}


@router.post("/bootstrap", response_model=BootstrapResponse)
async def bootstrap(
    service: QuestionDifficultyService = Depends(get_difficulty_service),
    images: ImageSource = Depends(get_image_source)
):
    """Create unrated records for every question image that has none."""
    files = await discover_question_files(images)
    summary = await service.bootstrap_many(files)
    return summary.to_dict()


@router.post("/recalculate", response_model=RecalculateResponse)
async def recalculate(service: QuestionDifficultyService = Depends(get_difficulty_service)):
    """Run the store-side recompute of every difficulty."""
    return {"updated": await service.recalculate_all()}


@router.get("/admin/report", response_model=DifficultyReportResponse)
async def difficulty_report(
    service: QuestionDifficultyService = Depends(get_difficulty_service),
    images: ImageSource = Depends(get_image_source),
    settings: Settings = Depends(get_settings)
):
    report = await build_difficulty_report(service, images, max_rows=settings.ADMIN_MAX_ROWS)
    return report.to_dict()


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(service: QuestionDifficultyService = Depends(get_difficulty_service)):
    service.clear_cache()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/cache/stats")
async def cache_stats(service: QuestionDifficultyService = Depends(get_difficulty_service)):
    return service.cache.get_stats()
