"""
Error taxonomy for the interview core.

Each error carries a ``status_code`` hint so a thin request layer can map it
to a response without inspecting messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mock_interview_coach.orchestrator.schemas import Assessment


class InterviewError(Exception):
    """Base class for all errors raised by the interview core."""

    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class NotFound(InterviewError):
    """Session id does not resolve."""

    status_code = 404

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InvalidState(InterviewError):
    """Operation not permitted for the session's status or history shape."""

    status_code = 400


class Conflict(InterviewError):
    """Another caller holds the session (submission in progress or stale write)."""

    status_code = 409


class InvalidInput(InterviewError):
    """Input rejected by a pure computation."""

    status_code = 400


class UpstreamError(InterviewError):
    """The text generator failed."""

    status_code = 502


class UpstreamRateLimited(UpstreamError):
    """The text generator signalled rate limiting (HTTP 429)."""

    status_code = 429


class UpstreamTimeout(UpstreamError):
    """The text generator did not answer within the configured timeout."""

    status_code = 504


class ExtractionFailure(InterviewError):
    """One extraction attempt produced no valid assessment. Internal only."""


class StoreFailure(InterviewError):
    """Persistence layer error."""

    status_code = 500


class StaleSessionError(StoreFailure):
    """Compare-and-set rejected: the stored version moved since it was read."""

    status_code = 409

    def __init__(self, session_id: str, expected_version: int) -> None:
        super().__init__(
            f"Session {session_id} was modified concurrently (expected version {expected_version})"
        )
        self.session_id = session_id
        self.expected_version = expected_version


class AssessmentPersistError(StoreFailure):
    """An assessment was computed but could not be saved; the caller should retry."""

    def __init__(self, session_id: str, assessment: Assessment) -> None:
        super().__init__(f"Assessment for session {session_id} was computed but could not be saved")
        self.session_id = session_id
        self.assessment = assessment


def is_rate_limit_error(error: BaseException) -> bool:
    """Check whether an arbitrary upstream failure denotes rate limiting."""
    if isinstance(error, UpstreamRateLimited):
        return True
    return "429" in str(error)
