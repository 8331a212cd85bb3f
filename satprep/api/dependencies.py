"""Dependency injection for API routes."""

from typing import Annotated

from fastapi import Depends

from satprep.core.config import settings
from satprep.persistence.repositories.progress_repo import ProgressRepository
from satprep.persistence.repositories.question_repo import QuestionRepository
from satprep.persistence.repositories.session_repo import SessionRepository
from satprep.services.full_test_service import FullTestService
from satprep.services.practice_service import PracticeService
from satprep.services.progress_service import ProgressService


def get_session_repository() -> SessionRepository:
    """FastAPI dependency injection for SessionRepository."""
    return SessionRepository(str(settings.database_path))


def get_question_repository() -> QuestionRepository:
    """FastAPI dependency injection for QuestionRepository."""
    return QuestionRepository(str(settings.database_path))


def get_progress_service() -> ProgressService:
    """FastAPI dependency injection for ProgressService."""
    return ProgressService(ProgressRepository(str(settings.database_path)))


def get_full_test_service(
    progress_service: ProgressService = Depends(get_progress_service),
) -> FullTestService:
    """FastAPI dependency injection for FullTestService.

    Wires the session and question repositories plus progress tracking so a
    completed test awards XP.
    """
    return FullTestService(
        session_repo=get_session_repository(),
        question_repo=get_question_repository(),
        progress_service=progress_service,
    )


def get_practice_service(
    progress_service: ProgressService = Depends(get_progress_service),
) -> PracticeService:
    """FastAPI dependency injection for PracticeService."""
    return PracticeService(
        session_repo=get_session_repository(),
        question_repo=get_question_repository(),
        progress_service=progress_service,
    )


# Type aliases for dependency injection
QuestionRepoDep = Annotated[QuestionRepository, Depends(get_question_repository)]
ProgressServiceDep = Annotated[ProgressService, Depends(get_progress_service)]
FullTestServiceDep = Annotated[FullTestService, Depends(get_full_test_service)]
PracticeServiceDep = Annotated[PracticeService, Depends(get_practice_service)]
