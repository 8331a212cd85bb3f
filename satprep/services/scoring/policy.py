"""Section policy table for adaptive routing and score scaling.

Single source of truth for every per-section constant used by the
scoring engine. Not runtime configurable.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from satprep.domain.models.scoring import SCALED_MAX, SCALED_MIN, SectionType


@dataclass(frozen=True)
class SectionPolicy:
    """Fixed module size and Module 2 routing threshold for a section."""

    section_type: SectionType
    module_size: int
    hard_threshold: int
    module_minutes: int

    @property
    def max_raw(self) -> int:
        """Raw score ceiling for the section (both modules)."""
        return 2 * self.module_size


SECTION_POLICIES: Mapping[SectionType, SectionPolicy] = MappingProxyType(
    {
        SectionType.READING: SectionPolicy(
            section_type=SectionType.READING,
            module_size=27,
            hard_threshold=19,
            module_minutes=32,
        ),
        SectionType.MATH: SectionPolicy(
            section_type=SectionType.MATH,
            module_size=22,
            hard_threshold=15,
            module_minutes=35,
        ),
    }
)

# Scaling rule shared by both sections
SCALE_FLOOR = SCALED_MIN
SCALE_SPAN = SCALED_MAX - SCALED_MIN
EASY_POOL_PENALTY = 130
HARD_POOL_CEILING = SCALED_MAX


def policy_for(section_type: SectionType) -> SectionPolicy:
    """Look up the policy for a section."""
    return SECTION_POLICIES[SectionType(section_type)]
