"""
Custom exception hierarchy for the SAT prep service.

All application exceptions inherit from SatPrepError.
"""


class SatPrepError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(SatPrepError):
    """Invalid or missing configuration."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(SatPrepError):
    """Input validation failed.

    Raised for malformed module results: a raw score outside
    [0, total_questions] or a question count that does not match the
    section's fixed module size. A validation failure means the attempt
    cannot be scored.
    """

    pass


# =============================================================================
# Scoring Errors
# =============================================================================


class ScoringError(SatPrepError):
    """Base for scoring-related errors."""

    pass


class InvalidTransitionError(ScoringError):
    """Section attempt asked to move to a state it cannot reach."""

    pass


# =============================================================================
# Question Bank Errors
# =============================================================================


class QuestionBankError(SatPrepError):
    """Question bank operation error."""

    pass


class PoolExhaustionError(QuestionBankError):
    """No unused questions remain for the requested pool."""

    pass


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(SatPrepError):
    """Session-related error."""

    pass


class SessionNotFoundError(SessionError):
    """Session does not exist."""

    pass


class SessionCompletedError(SessionError):
    """Attempted operation on completed session."""

    pass
