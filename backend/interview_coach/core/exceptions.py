"""
Interview Errors
Exception taxonomy shared by the state machine, the services and the API.
"""


class InterviewError(Exception):
    """Base class for all interview errors."""
    pass


class CandidateValidationError(InterviewError):
    """Raised when candidate details or an answer fail validation."""

    def __init__(self, message: str, missing_fields: list[str] | None = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class ScoringUnavailableError(InterviewError):
    """Raised when the external scorer errors or times out."""
    pass


class QuestionOutOfRangeError(InterviewError):
    """Raised when the sequencer is advanced past its last question."""
    pass


class InvalidSessionError(InterviewError):
    """Raised when a session cannot be appended to the ledger."""
    pass


class SessionNotFoundError(InterviewError):
    """Raised when no session exists for the given id."""
    pass
