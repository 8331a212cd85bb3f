"""
User progress API routes.

Dashboard aggregates and client-reported results (e.g. daily challenges).
"""

from fastapi import APIRouter, status
import structlog

from satprep.api.dependencies import ProgressServiceDep
from satprep.api.schemas import DashboardResponse, ResultCreate, ResultResponse
from satprep.core.config import gamification_config

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/users", tags=["progress"])


@router.get("/{user_id}/progress", response_model=DashboardResponse)
async def get_dashboard(user_id: str, service: ProgressServiceDep):
    """Progress, recent scores, weekly activity and domain accuracy."""
    progress = await service.get_progress(user_id)
    extremes = await service.strongest_and_weakest(user_id)

    return DashboardResponse(
        progress=progress,
        next_level_xp=progress.level * gamification_config.xp_per_level,
        recent_scores=await service.recent_scores(user_id),
        weekly=await service.weekly_data(user_id),
        overall=await service.overall_accuracy(user_id),
        domains=await service.domain_accuracy(user_id),
        strongest=extremes["strongest"],
        weakest=extremes["weakest"],
    )


@router.post(
    "/{user_id}/results",
    response_model=ResultResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_result(
    user_id: str,
    request: ResultCreate,
    service: ProgressServiceDep,
):
    """Record a finished activity and award XP."""
    result, progress = await service.record_result(
        user_id=user_id,
        result_type=request.result_type,
        section=request.section,
        total_questions=request.total_questions,
        correct_answers=request.correct_answers,
        domain=request.domain,
        time_spent=request.time_spent,
    )

    log.info("client_result_recorded", user_id=user_id, result_id=result.id)

    return ResultResponse(
        result_id=result.id,
        xp_earned=result.xp_earned,
        progress=progress,
    )
