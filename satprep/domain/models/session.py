"""Practice session domain models.

Core Models:
    - PracticeSession: Top-level record for a sectional practice set or a
      full-length test attempt
    - SectionState: Per-section lifecycle of an adaptive test attempt

Session Lifecycle:
    1. Created with user_id and session_type
    2. Full tests move each section through SectionState
    3. Status: active -> completed
    4. A retry is a new session, never a reset of an old one
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from satprep.domain.models.scoring import Difficulty


class SessionType(str, Enum):
    """Kind of practice session."""

    SECTIONAL = "sectional"
    FULL_TEST = "full_test"


class SessionStatus(str, Enum):
    """Session lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"


class SectionState(str, Enum):
    """Lifecycle of one section within a test attempt."""

    NOT_STARTED = "not_started"
    MODULE1_IN_PROGRESS = "module1_in_progress"
    MODULE1_SUBMITTED = "module1_submitted"
    MODULE2_IN_PROGRESS = "module2_in_progress"
    MODULE2_SUBMITTED = "module2_submitted"
    SCORED = "scored"


# Only forward single-step transitions are legal; SCORED is terminal.
NEXT_SECTION_STATE = {
    SectionState.NOT_STARTED: SectionState.MODULE1_IN_PROGRESS,
    SectionState.MODULE1_IN_PROGRESS: SectionState.MODULE1_SUBMITTED,
    SectionState.MODULE1_SUBMITTED: SectionState.MODULE2_IN_PROGRESS,
    SectionState.MODULE2_IN_PROGRESS: SectionState.MODULE2_SUBMITTED,
    SectionState.MODULE2_SUBMITTED: SectionState.SCORED,
}


class PracticeSession(BaseModel):
    """A practice set or full-test attempt.

    Attributes:
        - session_type: sectional or full_test
        - domain_id/subunit_id/difficulty: sectional filters (None for full tests)
        - total_questions/correct_answers/score_percentage: sectional results
        - composite_score: full-test total once every section is scored
    """

    id: str
    user_id: str
    session_type: SessionType
    status: SessionStatus = SessionStatus.ACTIVE
    domain_id: Optional[str] = None
    subunit_id: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_questions: Optional[int] = Field(default=None, ge=0)
    correct_answers: Optional[int] = Field(default=None, ge=0)
    score_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    composite_score: Optional[int] = Field(default=None, ge=400, le=1600)
