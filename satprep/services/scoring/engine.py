"""Adaptive scoring engine.

Pure functions for the two-module adaptive section:
- decide: route Module 2 to the hard or easy pool from Module 1's raw score
- select_pool: difficulty filter for the Module 2 question draw
- combine_modules: sum both module results into a section result
- scale: convert a section raw score to the 200-800 scale
- composite: reading + math

No I/O and no shared state. Invalid input raises ValidationError and is
never scored.
"""

import math

import structlog

from satprep.core.exceptions import ValidationError
from satprep.domain.models.scoring import (
    SCALED_MAX,
    SCALED_MIN,
    AdaptiveDecision,
    CompositeScore,
    Difficulty,
    ModuleResult,
    PoolSelection,
    ScaledScore,
    SectionType,
)
from satprep.services.scoring.policy import (
    EASY_POOL_PENALTY,
    HARD_POOL_CEILING,
    SCALE_FLOOR,
    SCALE_SPAN,
    policy_for,
)

logger = structlog.get_logger(__name__)


def _section(section_type) -> SectionType:
    try:
        return SectionType(section_type)
    except ValueError:
        raise ValidationError(f"Unknown section type: {section_type!r}")


def _check_section(result: ModuleResult, section: SectionType) -> None:
    if result.section_type != section:
        raise ValidationError(
            f"Module result is for {result.section_type.value}, "
            f"expected {section.value}"
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def decide(module_one_result: ModuleResult, section_type: SectionType) -> AdaptiveDecision:
    """Decide whether Module 2 draws from the hard pool.

    Args:
        module_one_result: Submitted Module 1 result
        section_type: Section the module belongs to

    Returns:
        AdaptiveDecision; qualifies when raw_score >= the section threshold

    Raises:
        ValidationError: If the section does not match or the module is not
            the section's fixed size
    """
    section = _section(section_type)
    _check_section(module_one_result, section)
    policy = policy_for(section)

    if module_one_result.total_questions != policy.module_size:
        raise ValidationError(
            f"{section.value} Module 1 must have {policy.module_size} questions, "
            f"got {module_one_result.total_questions}"
        )

    qualifies = module_one_result.raw_score >= policy.hard_threshold

    logger.debug(
        "adaptive_decision",
        section=section.value,
        raw_score=module_one_result.raw_score,
        threshold=policy.hard_threshold,
        hard_module_2=qualifies,
    )

    return AdaptiveDecision(
        qualifies_for_hard_module_2=qualifies,
        section_type=section,
        threshold=policy.hard_threshold,
    )


def select_pool(decision: AdaptiveDecision) -> PoolSelection:
    """Difficulty pool for Module 2: {Hard, Medium} or {Easy, Medium}."""
    if decision.qualifies_for_hard_module_2:
        return PoolSelection(Difficulty.HARD, Difficulty.MEDIUM)
    return PoolSelection(Difficulty.EASY, Difficulty.MEDIUM)


def combine_modules(module_one: ModuleResult, module_two: ModuleResult) -> ModuleResult:
    """Sum Module 1 and Module 2 into a section result.

    Raises:
        ValidationError: If the modules belong to different sections or
            either is not the section's fixed size
    """
    _check_section(module_two, module_one.section_type)
    policy = policy_for(module_one.section_type)

    for number, module in ((1, module_one), (2, module_two)):
        if module.total_questions != policy.module_size:
            raise ValidationError(
                f"{policy.section_type.value} Module {number} must have "
                f"{policy.module_size} questions, got {module.total_questions}"
            )

    return ModuleResult(
        raw_score=module_one.raw_score + module_two.raw_score,
        total_questions=module_one.total_questions + module_two.total_questions,
        section_type=module_one.section_type,
    )


def scale(
    section_result: ModuleResult, is_hard_module_2: bool, section_type: SectionType
) -> ScaledScore:
    """Scale a section raw score to 200-800.

    base = 200 + raw / max_raw * 600. The easy pool takes a flat 130-point
    penalty floored at 200; the hard pool is capped at 800. The result is
    rounded half up.

    Args:
        section_result: Combined Module 1 + Module 2 result
        is_hard_module_2: Whether Module 2 was drawn from the hard pool
        section_type: Section being scored

    Raises:
        ValidationError: If the result does not cover the full section
    """
    section = _section(section_type)
    _check_section(section_result, section)
    policy = policy_for(section)

    if section_result.total_questions != policy.max_raw:
        raise ValidationError(
            f"{section.value} section must total {policy.max_raw} questions, "
            f"got {section_result.total_questions}"
        )

    base = SCALE_FLOOR + (section_result.raw_score / policy.max_raw) * SCALE_SPAN

    if is_hard_module_2:
        adjusted = min(base, HARD_POOL_CEILING)
    else:
        adjusted = max(SCALED_MIN, base - EASY_POOL_PENALTY)

    value = min(SCALED_MAX, max(SCALED_MIN, _round_half_up(adjusted)))

    logger.debug(
        "section_scaled",
        section=section.value,
        raw_score=section_result.raw_score,
        hard_module_2=is_hard_module_2,
        base=round(base, 2),
        scaled=value,
    )

    return ScaledScore(value)


def composite(reading_scaled: ScaledScore, math_scaled: ScaledScore) -> CompositeScore:
    """Total score from both section scores."""
    return CompositeScore(reading_scaled.value + math_scaled.value)
