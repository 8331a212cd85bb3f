"""
Sectional practice API routes.
"""

from fastapi import APIRouter, status
import structlog

from satprep.api.dependencies import PracticeServiceDep
from satprep.api.schemas import (
    AnswerReviewSchema,
    PracticeComplete,
    PracticeCompleteResponse,
    PracticeCreate,
    PracticeResponse,
    PracticeReviewResponse,
    QuestionSchema,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/practice", tags=["practice"])


@router.post(
    "",
    response_model=PracticeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_practice(request: PracticeCreate, service: PracticeServiceDep):
    """Start a practice set for one domain/subunit."""
    session, questions = await service.start(
        user_id=request.user_id,
        domain_id=request.domain_id,
        subunit_id=request.subunit_id,
        difficulty=request.difficulty,
        question_count=request.question_count,
    )
    return PracticeResponse(
        session_id=session.id,
        questions=[QuestionSchema.from_question(q) for q in questions],
    )


@router.post("/{session_id}/complete", response_model=PracticeCompleteResponse)
async def complete_practice(
    session_id: str,
    request: PracticeComplete,
    service: PracticeServiceDep,
):
    """Grade a finished practice set and return the answer review."""
    outcome = await service.complete(
        session_id,
        answers=request.answers,
        time_spent=request.time_spent,
    )
    return PracticeCompleteResponse(
        session_id=outcome.session.id,
        total_questions=outcome.session.total_questions,
        correct_answers=outcome.session.correct_answers,
        score_percentage=outcome.session.score_percentage,
        xp_earned=outcome.xp_earned,
        progress=outcome.progress,
        review=[AnswerReviewSchema.model_validate(r.model_dump()) for r in outcome.review],
    )


@router.get("/{session_id}/review", response_model=PracticeReviewResponse)
async def review_practice(session_id: str, service: PracticeServiceDep):
    """Answer review for a completed practice set."""
    review = await service.review(session_id)
    return PracticeReviewResponse(
        session_id=session_id,
        review=[AnswerReviewSchema.model_validate(r.model_dump()) for r in review],
    )


@router.post(
    "/{session_id}/retry",
    response_model=PracticeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def retry_incorrect(session_id: str, service: PracticeServiceDep):
    """Start a new practice set from the questions missed in a completed one."""
    session, questions = await service.retry_incorrect(session_id)
    return PracticeResponse(
        session_id=session.id,
        questions=[QuestionSchema.from_question(q) for q in questions],
    )
