"""Domain models package."""

from .scoring import (
    SectionType,
    Difficulty,
    ModuleResult,
    AdaptiveDecision,
    PoolSelection,
    ScaledScore,
    CompositeScore,
)
from .session import PracticeSession, SessionType, SessionStatus, SectionState
from .question import Question, Domain, Subunit, BlueprintItem, AnswerReview
from .progress import (
    TestResult,
    ResultType,
    ResultSection,
    UserProgress,
    RecentScore,
    WeeklyData,
    DomainAccuracy,
)

__all__ = [
    "SectionType",
    "Difficulty",
    "ModuleResult",
    "AdaptiveDecision",
    "PoolSelection",
    "ScaledScore",
    "CompositeScore",
    "PracticeSession",
    "SessionType",
    "SessionStatus",
    "SectionState",
    "Question",
    "Domain",
    "Subunit",
    "BlueprintItem",
    "AnswerReview",
    "TestResult",
    "ResultType",
    "ResultSection",
    "UserProgress",
    "RecentScore",
    "WeeklyData",
    "DomainAccuracy",
]
