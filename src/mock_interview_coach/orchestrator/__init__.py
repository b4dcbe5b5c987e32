"""
Orchestrator module for the interview session lifecycle.

Only the schemas are re-exported here; import the state machine from
``mock_interview_coach.orchestrator.session_state_machine``.
"""

from mock_interview_coach.orchestrator.schemas import (
    Assessment,
    AssessmentSource,
    CoachingScores,
    InterviewContext,
    InterviewSession,
    InterviewStep,
    Message,
    MessageRole,
    QuestionAnalysis,
    SessionStatus,
    SubmissionResult,
)

__all__ = [
    "Assessment",
    "AssessmentSource",
    "CoachingScores",
    "InterviewContext",
    "InterviewSession",
    "InterviewStep",
    "Message",
    "MessageRole",
    "QuestionAnalysis",
    "SessionStatus",
    "SubmissionResult",
]
