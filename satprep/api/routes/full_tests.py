"""
Full-length test API routes.

Endpoints for starting a test, serving each module's questions and
submitting module answers.
"""

from typing import Dict

from fastapi import APIRouter, status
import structlog

from satprep.api.dependencies import FullTestServiceDep
from satprep.api.schemas import (
    FullTestCreate,
    FullTestResponse,
    ModuleQuestionsResponse,
    ModuleSubmitRequest,
    ModuleSubmitResponse,
    QuestionSchema,
    SectionAttemptSchema,
)
from satprep.domain.models.scoring import SectionType
from satprep.domain.models.session import PracticeSession
from satprep.services.scoring import SectionAttempt, select_pool

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/full-tests", tags=["full-tests"])


def _attempt_schema(attempt: SectionAttempt) -> SectionAttemptSchema:
    difficulty = None
    if attempt.decision is not None:
        difficulty = "Hard" if attempt.decision.qualifies_for_hard_module_2 else "Easy"

    return SectionAttemptSchema(
        section_type=attempt.section_type,
        state=attempt.state,
        module_1_raw_score=attempt.module_one.raw_score if attempt.module_one else None,
        module_2_raw_score=attempt.module_two.raw_score if attempt.module_two else None,
        module_2_difficulty=difficulty,
        scaled_score=attempt.scaled_score.value if attempt.scaled_score else None,
    )


def _test_response(
    session: PracticeSession, attempts: Dict[SectionType, SectionAttempt]
) -> FullTestResponse:
    return FullTestResponse(
        id=session.id,
        user_id=session.user_id,
        status=session.status,
        started_at=session.started_at,
        completed_at=session.completed_at,
        composite_score=session.composite_score,
        sections=[_attempt_schema(a) for a in attempts.values()],
    )


@router.post(
    "",
    response_model=FullTestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_full_test(
    request: FullTestCreate,
    service: FullTestServiceDep,
):
    """Start a full-length test with one attempt per requested section."""
    session = await service.start(request.user_id, request.sections)
    session, attempts = await service.get_status(session.id)
    return _test_response(session, attempts)


@router.get("/{session_id}", response_model=FullTestResponse)
async def get_full_test(session_id: str, service: FullTestServiceDep):
    """Current state of every section plus any recorded scores."""
    session, attempts = await service.get_status(session_id)
    return _test_response(session, attempts)


@router.get(
    "/{session_id}/sections/{section}/modules/{module_number}/questions",
    response_model=ModuleQuestionsResponse,
)
async def get_module_questions(
    session_id: str,
    section: SectionType,
    module_number: int,
    service: FullTestServiceDep,
):
    """
    Serve a module's questions.

    The first request starts the module; repeating it while the module is in
    progress returns the same questions. Answer keys are never included.
    """
    module = await service.module_questions(session_id, section, module_number)

    return ModuleQuestionsResponse(
        section_type=module.section_type,
        module_number=module.module_number,
        difficulty=module.difficulty,
        time_limit_minutes=module.time_limit_minutes,
        questions=[QuestionSchema.from_question(q) for q in module.questions],
    )


@router.post(
    "/{session_id}/sections/{section}/modules/{module_number}/submit",
    response_model=ModuleSubmitResponse,
)
async def submit_module(
    session_id: str,
    section: SectionType,
    module_number: int,
    request: ModuleSubmitRequest,
    service: FullTestServiceDep,
):
    """
    Submit answers for a module.

    Module 1 returns the routing decision for Module 2. Module 2 returns the
    section's scaled score, and the composite once every section is scored.
    """
    submission = await service.submit_module(
        session_id, section, module_number, request.answers
    )

    pool = submission.pool
    if pool is None and submission.decision is not None:
        pool = select_pool(submission.decision)

    return ModuleSubmitResponse(
        section_type=submission.section_type,
        module_number=submission.module_number,
        raw_score=submission.result.raw_score,
        total_questions=submission.result.total_questions,
        qualifies_for_hard_module_2=submission.decision.qualifies_for_hard_module_2
        if submission.decision
        else None,
        module_2_difficulties=list(pool.difficulties) if pool else None,
        scaled_score=submission.scaled_score.value if submission.scaled_score else None,
        composite_score=submission.composite_score.value
        if submission.composite_score
        else None,
        session_completed=submission.session_completed,
    )
