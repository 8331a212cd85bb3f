"""Repository implementations."""

from satprep.persistence.repositories.session_repo import SessionRepository
from satprep.persistence.repositories.question_repo import QuestionRepository
from satprep.persistence.repositories.progress_repo import ProgressRepository

__all__ = [
    "SessionRepository",
    "QuestionRepository",
    "ProgressRepository",
]
