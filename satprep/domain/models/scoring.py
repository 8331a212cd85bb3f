"""Scoring value types for the adaptive section test.

Core Models:
    - ModuleResult: Raw score for one submitted module (or a combined section)
    - AdaptiveDecision: Whether Module 2 draws from the hard pool
    - PoolSelection: Difficulty filter handed to the question repository
    - ScaledScore: Section score in [200, 800]
    - CompositeScore: Reading + math in [400, 1600]

All types are immutable. Construction validates the fields and raises
ValidationError on malformed input so that bad data never reaches scoring.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from satprep.core.exceptions import ValidationError


class SectionType(str, Enum):
    """Test section."""

    READING = "reading"
    MATH = "math"


class Difficulty(str, Enum):
    """Question difficulty tier."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


SCALED_MIN = 200
SCALED_MAX = 800


def _require_int(name: str, value) -> None:
    # bool is an int subclass; a True raw score is a caller bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class ModuleResult:
    """Raw result for a submitted module.

    A combined section result (Module 1 + Module 2) uses the same type
    with the summed counts.
    """

    raw_score: int
    total_questions: int
    section_type: SectionType

    def __post_init__(self):
        _require_int("raw_score", self.raw_score)
        _require_int("total_questions", self.total_questions)
        if self.total_questions <= 0:
            raise ValidationError(
                f"total_questions must be positive, got {self.total_questions}"
            )
        if self.raw_score < 0:
            raise ValidationError(f"raw_score must be >= 0, got {self.raw_score}")
        if self.raw_score > self.total_questions:
            raise ValidationError(
                f"raw_score {self.raw_score} exceeds total_questions "
                f"{self.total_questions}"
            )
        try:
            section = SectionType(self.section_type)
        except ValueError:
            raise ValidationError(f"Unknown section type: {self.section_type!r}")
        object.__setattr__(self, "section_type", section)


@dataclass(frozen=True)
class AdaptiveDecision:
    """Module 2 routing decision derived from Module 1."""

    qualifies_for_hard_module_2: bool
    section_type: SectionType
    threshold: int


@dataclass(frozen=True)
class PoolSelection:
    """Difficulty tiers Module 2 questions are drawn from."""

    primary_difficulty: Difficulty
    secondary_difficulty: Difficulty

    @property
    def difficulties(self) -> Tuple[Difficulty, Difficulty]:
        return (self.primary_difficulty, self.secondary_difficulty)

    @property
    def is_hard(self) -> bool:
        return self.primary_difficulty == Difficulty.HARD


@dataclass(frozen=True)
class ScaledScore:
    """Section score reported on the 200-800 scale."""

    value: int

    def __post_init__(self):
        _require_int("value", self.value)
        if not SCALED_MIN <= self.value <= SCALED_MAX:
            raise ValidationError(
                f"Scaled score must be in [{SCALED_MIN}, {SCALED_MAX}], got {self.value}"
            )


@dataclass(frozen=True)
class CompositeScore:
    """Sum of the reading and math scaled scores."""

    value: int

    def __post_init__(self):
        _require_int("value", self.value)
        if not 2 * SCALED_MIN <= self.value <= 2 * SCALED_MAX:
            raise ValidationError(
                f"Composite score must be in [{2 * SCALED_MIN}, {2 * SCALED_MAX}], "
                f"got {self.value}"
            )
