"""
API request/response schemas.

Pydantic models for API validation and serialization.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from satprep.domain.models.progress import (
    DomainAccuracy,
    RecentScore,
    ResultSection,
    ResultType,
    UserProgress,
    WeeklyData,
)
from satprep.domain.models.question import Question
from satprep.domain.models.scoring import Difficulty, SectionType
from satprep.domain.models.session import SectionState, SessionStatus


# ============ QUESTION SCHEMAS ============


class QuestionSchema(BaseModel):
    """Question as served to a test taker (no answer key)."""

    id: str
    domain_id: str
    subunit_id: str
    difficulty: Difficulty
    question_text: str
    choices: List[str]
    passage_text: Optional[str] = None

    @classmethod
    def from_question(cls, question: Question) -> "QuestionSchema":
        return cls(
            id=question.id,
            domain_id=question.domain_id,
            subunit_id=question.subunit_id,
            difficulty=question.difficulty,
            question_text=question.question_text,
            choices=question.choices,
            passage_text=question.passage_text,
        )


class SubunitSchema(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class DomainSchema(BaseModel):
    id: str
    name: str
    section_type: SectionType
    description: Optional[str] = None
    subunits: List[SubunitSchema] = Field(default_factory=list)


class DomainListResponse(BaseModel):
    domains: List[DomainSchema]


# ============ FULL TEST SCHEMAS ============


class FullTestCreate(BaseModel):
    """Request to start a full-length test."""

    user_id: str = Field(..., min_length=1)
    sections: List[SectionType] = Field(
        default_factory=lambda: [SectionType.READING, SectionType.MATH],
        min_length=1,
        max_length=2,
    )


class SectionAttemptSchema(BaseModel):
    section_type: SectionType
    state: SectionState
    module_1_raw_score: Optional[int] = None
    module_2_raw_score: Optional[int] = None
    module_2_difficulty: Optional[str] = None
    scaled_score: Optional[int] = None


class FullTestResponse(BaseModel):
    """Full test status."""

    id: str
    user_id: str
    status: SessionStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    composite_score: Optional[int] = None
    sections: List[SectionAttemptSchema]


class ModuleQuestionsResponse(BaseModel):
    section_type: SectionType
    module_number: int
    difficulty: str
    time_limit_minutes: int
    questions: List[QuestionSchema]


class ModuleSubmitRequest(BaseModel):
    """Answers for a module: question ID -> chosen choice index (null if skipped)."""

    answers: Dict[str, Optional[int]] = Field(default_factory=dict)


class ModuleSubmitResponse(BaseModel):
    section_type: SectionType
    module_number: int
    raw_score: int
    total_questions: int
    qualifies_for_hard_module_2: Optional[bool] = None
    module_2_difficulties: Optional[List[Difficulty]] = None
    scaled_score: Optional[int] = None
    composite_score: Optional[int] = None
    session_completed: bool = False


# ============ PRACTICE SCHEMAS ============


class PracticeCreate(BaseModel):
    """Request to start a sectional practice set."""

    user_id: str = Field(..., min_length=1)
    domain_id: str
    subunit_id: str
    difficulty: Optional[Difficulty] = Field(
        default=None, description="Requested tier; null for mixed"
    )
    question_count: int = Field(default=10, ge=1, le=50)


class PracticeResponse(BaseModel):
    session_id: str
    questions: List[QuestionSchema]


class PracticeComplete(BaseModel):
    """Answers for a practice set: question ID -> chosen choice index (null if skipped)."""

    answers: Dict[str, Optional[int]] = Field(default_factory=dict)
    time_spent: int = Field(default=0, ge=0)


class AnswerReviewSchema(BaseModel):
    question_id: str
    question_text: str
    choices: List[str]
    selected_answer: Optional[int] = None
    correct_answer: int
    is_correct: bool
    explanation: Optional[str] = None


class PracticeCompleteResponse(BaseModel):
    session_id: str
    total_questions: int
    correct_answers: int
    score_percentage: float
    xp_earned: int
    progress: Optional[UserProgress] = None
    review: List[AnswerReviewSchema]


class PracticeReviewResponse(BaseModel):
    session_id: str
    review: List[AnswerReviewSchema]


# ============ PROGRESS SCHEMAS ============


class ResultCreate(BaseModel):
    """A finished activity reported by the client (e.g. a daily challenge)."""

    result_type: ResultType
    section: ResultSection
    total_questions: int = Field(..., ge=0)
    correct_answers: int = Field(..., ge=0)
    domain: Optional[str] = None
    time_spent: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def correct_within_total(self) -> "ResultCreate":
        if self.correct_answers > self.total_questions:
            raise ValueError("correct_answers cannot exceed total_questions")
        return self


class ResultResponse(BaseModel):
    result_id: str
    xp_earned: int
    progress: UserProgress


class DashboardResponse(BaseModel):
    progress: UserProgress
    next_level_xp: int
    recent_scores: List[RecentScore]
    weekly: List[WeeklyData]
    overall: Dict[str, int]
    domains: List[DomainAccuracy]
    strongest: Optional[DomainAccuracy] = None
    weakest: Optional[DomainAccuracy] = None


# ============ SCORING SCHEMAS ============


class ModuleResultSchema(BaseModel):
    raw_score: int
    total_questions: int


class DecideRequest(BaseModel):
    section_type: SectionType
    module_one: ModuleResultSchema


class DecideResponse(BaseModel):
    section_type: SectionType
    qualifies_for_hard_module_2: bool
    threshold: int
    module_2_difficulties: List[Difficulty]


class ScaleRequest(BaseModel):
    section_type: SectionType
    module_one: ModuleResultSchema
    module_two: ModuleResultSchema
    is_hard_module_2: bool


class ScaleResponse(BaseModel):
    section_type: SectionType
    raw_score: int
    scaled_score: int


class CompositeRequest(BaseModel):
    reading_score: int
    math_score: int


class CompositeResponse(BaseModel):
    composite_score: int
