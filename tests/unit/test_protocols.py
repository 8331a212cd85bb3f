"""The aiosqlite repositories satisfy the scoring collaborator interfaces."""

from satprep.persistence.repositories.question_repo import QuestionRepository
from satprep.persistence.repositories.session_repo import SessionRepository
from satprep.services.protocols import IQuestionRepository, ISessionStore


def test_question_repository_is_question_source():
    assert isinstance(QuestionRepository("unused.db"), IQuestionRepository)


def test_session_repository_is_session_store():
    assert isinstance(SessionRepository("unused.db"), ISessionStore)


def test_session_store_is_not_question_source():
    assert not isinstance(SessionRepository("unused.db"), IQuestionRepository)
