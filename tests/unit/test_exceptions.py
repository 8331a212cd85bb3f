"""Tests for exception hierarchy."""

import pytest


def test_exception_hierarchy():
    """All exceptions inherit from SatPrepError."""
    from satprep.core.exceptions import (
        SatPrepError,
        ConfigurationError,
        ValidationError,
        ScoringError,
        InvalidTransitionError,
        QuestionBankError,
        PoolExhaustionError,
        SessionError,
        SessionNotFoundError,
        SessionCompletedError,
    )

    assert issubclass(ConfigurationError, SatPrepError)
    assert issubclass(ValidationError, SatPrepError)
    assert issubclass(ScoringError, SatPrepError)
    assert issubclass(InvalidTransitionError, ScoringError)
    assert issubclass(QuestionBankError, SatPrepError)
    assert issubclass(PoolExhaustionError, QuestionBankError)
    assert issubclass(SessionError, SatPrepError)
    assert issubclass(SessionNotFoundError, SessionError)
    assert issubclass(SessionCompletedError, SessionError)


def test_exceptions_can_be_raised():
    """Exceptions can be raised and caught."""
    from satprep.core.exceptions import SessionNotFoundError

    with pytest.raises(SessionNotFoundError):
        raise SessionNotFoundError("Session test-123 not found")


def test_message_attribute():
    from satprep.core.exceptions import PoolExhaustionError

    error = PoolExhaustionError("No unused questions")
    assert error.message == "No unused questions"
    assert str(error) == "No unused questions"


@pytest.mark.parametrize(
    "error,status_code",
    [
        ("SessionNotFoundError", 404),
        ("ValidationError", 400),
        ("InvalidTransitionError", 400),
        ("SessionCompletedError", 400),
        ("PoolExhaustionError", 409),
        ("ConfigurationError", 500),
        ("QuestionBankError", 500),
    ],
)
def test_http_status_for_error(error, status_code):
    from satprep.api.exception_handlers import status_for
    from satprep.core import exceptions

    assert status_for(getattr(exceptions, error)("boom")) == status_code
