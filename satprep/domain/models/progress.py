"""Progress tracking and gamification models."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ResultType(str, Enum):
    """Activity that produced a result."""

    FULL = "full"
    SECTIONAL = "sectional"
    DAILY = "daily"


class ResultSection(str, Enum):
    """Section(s) covered by a result."""

    READING = "reading"
    MATH = "math"
    BOTH = "both"


class TestResult(BaseModel):
    """A finished practice set, daily challenge or full test."""

    __test__ = False  # not a pytest test class

    id: str
    user_id: str
    result_type: ResultType
    section: ResultSection
    domain: Optional[str] = None
    total_questions: int = Field(ge=0)
    correct_answers: int = Field(ge=0)
    reading_score: Optional[int] = Field(default=None, ge=200, le=800)
    math_score: Optional[int] = Field(default=None, ge=200, le=800)
    total_score: Optional[int] = Field(default=None, ge=400, le=1600)
    time_spent: int = Field(default=0, ge=0, description="Seconds")
    xp_earned: int = 0
    completed_at: datetime


class UserProgress(BaseModel):
    """XP, level, streak and badge for a user."""

    user_id: str
    name: str = "Student"
    level: int = 1
    current_xp: int = 0
    total_xp: int = 0
    streak: int = 0
    badge: str = "SAT Rookie"
    last_activity_date: Optional[date] = None


class RecentScore(BaseModel):
    """Full-test score summary for the dashboard."""

    completed_at: datetime
    score_range: str
    reading_score: int
    math_score: int
    total_score: int


class WeeklyData(BaseModel):
    """Questions attempted and answered correctly in a seven-day window."""

    period: str
    attempted: int
    correct: int
    percentage: int


class DomainAccuracy(BaseModel):
    """Accuracy for one content domain."""

    domain: str
    accuracy: int
    total_questions: int
    correct_answers: int
