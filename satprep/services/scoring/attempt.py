"""Per-section state machine for an adaptive test attempt.

NotStarted -> Module1InProgress -> Module1Submitted -> Module2InProgress
-> Module2Submitted -> Scored

Entering Module2InProgress runs decide + select_pool exactly once.
Entering Scored runs scale. Scored is terminal.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from satprep.core.exceptions import InvalidTransitionError, ValidationError
from satprep.domain.models.scoring import (
    AdaptiveDecision,
    ModuleResult,
    PoolSelection,
    ScaledScore,
    SectionType,
)
from satprep.domain.models.session import NEXT_SECTION_STATE, SectionState
from satprep.services.scoring import engine

logger = structlog.get_logger(__name__)


@dataclass
class SectionAttempt:
    """Scoring state for one section of one test attempt."""

    section_type: SectionType
    state: SectionState = SectionState.NOT_STARTED
    module_one: Optional[ModuleResult] = None
    decision: Optional[AdaptiveDecision] = None
    pool: Optional[PoolSelection] = None
    module_two: Optional[ModuleResult] = None
    scaled_score: Optional[ScaledScore] = None

    def __post_init__(self):
        self.section_type = SectionType(self.section_type)
        self.state = SectionState(self.state)

    @property
    def is_scored(self) -> bool:
        return self.state == SectionState.SCORED

    def _advance(self, target: SectionState) -> None:
        expected = NEXT_SECTION_STATE.get(self.state)
        if expected != target:
            raise InvalidTransitionError(
                f"{self.section_type.value} section cannot move from "
                f"{self.state.value} to {target.value}"
            )
        self.state = target

    def _check_section(self, result: ModuleResult) -> None:
        if result.section_type != self.section_type:
            raise ValidationError(
                f"Module result is for {result.section_type.value}, "
                f"expected {self.section_type.value}"
            )

    def start_module_one(self) -> None:
        self._advance(SectionState.MODULE1_IN_PROGRESS)

    def submit_module_one(self, result: ModuleResult) -> AdaptiveDecision:
        """Submit Module 1 and compute the routing decision.

        The decision is computed before any state change so a rejected
        result leaves the attempt untouched.
        """
        self._check_section(result)
        if self.state != SectionState.MODULE1_IN_PROGRESS:
            raise InvalidTransitionError(
                f"{self.section_type.value} Module 1 is not in progress "
                f"(state: {self.state.value})"
            )
        decision = engine.decide(result, self.section_type)
        self._advance(SectionState.MODULE1_SUBMITTED)
        self.module_one = result
        self.decision = decision
        return decision

    def start_module_two(self) -> PoolSelection:
        """Enter Module 2 and fix its difficulty pool."""
        self._advance(SectionState.MODULE2_IN_PROGRESS)
        self.pool = engine.select_pool(self.decision)
        logger.info(
            "module_two_pool_selected",
            section=self.section_type.value,
            hard_module_2=self.decision.qualifies_for_hard_module_2,
            difficulties=[d.value for d in self.pool.difficulties],
        )
        return self.pool

    def submit_module_two(self, result: ModuleResult) -> ScaledScore:
        """Submit Module 2, then scale the combined section result."""
        self._check_section(result)
        if self.state != SectionState.MODULE2_IN_PROGRESS:
            raise InvalidTransitionError(
                f"{self.section_type.value} Module 2 is not in progress "
                f"(state: {self.state.value})"
            )
        combined = engine.combine_modules(self.module_one, result)
        score = engine.scale(
            combined, self.decision.qualifies_for_hard_module_2, self.section_type
        )
        self._advance(SectionState.MODULE2_SUBMITTED)
        self.module_two = result
        self._advance(SectionState.SCORED)
        self.scaled_score = score
        return score
