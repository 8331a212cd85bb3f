"""Question bank domain models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from satprep.domain.models.scoring import Difficulty, SectionType


class Subunit(BaseModel):
    """Skill subunit within a content domain."""

    id: str
    domain_id: str
    name: str
    description: Optional[str] = None


class Domain(BaseModel):
    """Content domain (e.g. Algebra, Craft and Structure)."""

    id: str
    name: str
    section_type: SectionType
    description: Optional[str] = None
    subunits: List[Subunit] = Field(default_factory=list)


class Question(BaseModel):
    """A multiple-choice question."""

    id: str
    domain_id: str
    subunit_id: str
    difficulty: Difficulty
    question_text: str
    choices: List[str] = Field(min_length=2)
    answer: int = Field(ge=0, description="0-based index of the correct choice")
    explanation: Optional[str] = None
    passage_text: Optional[str] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def answer_in_choices(self) -> "Question":
        if self.answer >= len(self.choices):
            raise ValueError(
                f"answer index {self.answer} out of range for {len(self.choices)} choices"
            )
        return self

    def is_correct(self, choice: Optional[int]) -> bool:
        return choice is not None and choice == self.answer


class AnswerReview(BaseModel):
    """One graded question: the chosen and correct choice plus the explanation."""

    question_id: str
    question_text: str
    choices: List[str]
    selected_answer: Optional[int] = None
    correct_answer: int
    is_correct: bool
    explanation: Optional[str] = None

    @classmethod
    def grade(cls, question: Question, selected: Optional[int]) -> "AnswerReview":
        return cls(
            question_id=question.id,
            question_text=question.question_text,
            choices=question.choices,
            selected_answer=selected,
            correct_answer=question.answer,
            is_correct=question.is_correct(selected),
            explanation=question.explanation,
        )


class BlueprintItem(BaseModel):
    """One position in a module's content blueprint."""

    id: str
    section_type: SectionType
    question_number: int = Field(ge=1)
    domain_id: str
    subunit_id: str
    description: Optional[str] = None
