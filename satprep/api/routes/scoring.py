"""
Stateless scoring routes.

Direct access to the adaptive scoring engine without a stored session.
Inputs that cannot be scored return 400 with no score.
"""

from fastapi import APIRouter

from satprep.api.schemas import (
    CompositeRequest,
    CompositeResponse,
    DecideRequest,
    DecideResponse,
    ModuleResultSchema,
    ScaleRequest,
    ScaleResponse,
)
from satprep.domain.models.scoring import ModuleResult, ScaledScore, SectionType
from satprep.services.scoring import combine_modules, composite, decide, scale, select_pool

router = APIRouter(prefix="/scoring", tags=["scoring"])


def _module_result(module: ModuleResultSchema, section: SectionType) -> ModuleResult:
    return ModuleResult(
        raw_score=module.raw_score,
        total_questions=module.total_questions,
        section_type=section,
    )


@router.post("/decide", response_model=DecideResponse)
async def decide_module_two(request: DecideRequest):
    """Route Module 2 from a Module 1 result."""
    decision = decide(
        _module_result(request.module_one, request.section_type), request.section_type
    )
    return DecideResponse(
        section_type=decision.section_type,
        qualifies_for_hard_module_2=decision.qualifies_for_hard_module_2,
        threshold=decision.threshold,
        module_2_difficulties=list(select_pool(decision).difficulties),
    )


@router.post("/scale", response_model=ScaleResponse)
async def scale_section(request: ScaleRequest):
    """Scale both modules of a section to 200-800."""
    combined = combine_modules(
        _module_result(request.module_one, request.section_type),
        _module_result(request.module_two, request.section_type),
    )
    scaled = scale(combined, request.is_hard_module_2, request.section_type)
    return ScaleResponse(
        section_type=request.section_type,
        raw_score=combined.raw_score,
        scaled_score=scaled.value,
    )


@router.post("/composite", response_model=CompositeResponse)
async def composite_score(request: CompositeRequest):
    total = composite(ScaledScore(request.reading_score), ScaledScore(request.math_score))
    return CompositeResponse(composite_score=total.value)
