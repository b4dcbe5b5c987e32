"""
Pydantic schemas for the orchestrator module.

Defines data models for interview sessions, conversation messages and
assessments.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _now_utc() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


ResponseDepth = Literal["Novice", "Intermediate", "Advanced"]
Level = Literal["Basic", "Competent", "High-Caliber"]
InterviewType = Literal["domain-specific", "HR"]
InputType = Literal["skills-based", "job-description"]
HRRoundType = Literal["screening", "situational", "stress", "behavioral", "cultural-fit"]


class MessageRole(str, Enum):
    """Role of the speaker in a conversation message."""

    HUMAN = "human"
    AI = "ai"


class SessionStatus(str, Enum):
    """Lifecycle status of an interview session."""

    ACTIVE = "active"
    SUBMITTING = "submitting"
    COMPLETED = "completed"


class InterviewStep(str, Enum):
    """What the candidate is currently doing within the session."""

    QUESTIONING = "questioning"
    FEEDBACK = "feedback"
    REVISE = "revise"


class AssessmentSource(str, Enum):
    """Which path produced an assessment."""

    GENERATED = "generated"
    FALLBACK = "fallback"


class Message(BaseModel):
    """A single message in the interview conversation."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole = Field(..., description="Role of the speaker")
    content: str = Field(..., description="Message content")


class InterviewContext(BaseModel):
    """Mode-specific interview context passed through to the text generator."""

    interview_type: InterviewType = Field(default="domain-specific", description="Interview mode")
    company_name: str = Field(default="Interview Prep Corp.", description="Company the mock interview is for")
    job_role: str = Field(default="", description="Target job role")
    domain: str = Field(default="", description="Domain the interview focuses on")
    skills: list[str] = Field(default_factory=list, description="Candidate skills to ask about")
    input_type: InputType | None = Field(
        default="skills-based",
        description="Whether questions are driven by skills or a job description",
    )
    job_description: str = Field(default="", description="Job description text")
    hr_round_type: HRRoundType | None = Field(default=None, description="HR round type for HR interviews")


class CoachingScores(BaseModel):
    """Three subjective 1-5 ratings blended into the final score."""

    clarity_of_motivation: float = Field(..., ge=1, le=5)
    specificity_of_learning: float = Field(..., ge=1, le=5)
    career_goal_alignment: float = Field(..., ge=1, le=5)

    def total(self) -> float:
        """Sum of all coaching sub-scores."""
        return self.clarity_of_motivation + self.specificity_of_learning + self.career_goal_alignment


class QuestionAnalysis(BaseModel):
    """Assessment of one question/answer pair."""

    question: str = Field(..., description="The question asked")
    response: str = Field(..., description="The candidate's response")
    feedback: str = Field(..., description="Assessment of the response")
    strengths: list[str] = Field(..., description="Positive aspects")
    improvements: list[str] = Field(..., description="Areas to improve")
    score: float = Field(..., ge=0, le=10, description="Score between 0 and 10")
    response_depth: ResponseDepth = Field(..., description="Depth of the response")


class GeneratedAssessment(BaseModel):
    """Assessment shape the text generator is asked to produce."""

    summary: str = Field(..., description="Overall performance summary")
    response_depth: ResponseDepth = Field(..., description="Overall response depth")
    questions_analysis: list[QuestionAnalysis] = Field(..., description="Per-question analysis")
    coaching_scores: CoachingScores = Field(..., description="Coaching sub-scores")
    recommendations: list[str] = Field(..., description="Improvement suggestions")
    closure_message: str = Field(..., description="Final message to the candidate")


class Assessment(GeneratedAssessment):
    """Final, scored assessment of a completed interview."""

    overall_score: int = Field(..., ge=0, le=100, description="Composite score (0-100)")
    level: Level = Field(..., description="Qualitative level")
    source: AssessmentSource = Field(
        default=AssessmentSource.GENERATED,
        description="Whether the text generator or the fallback scorer produced it",
    )


class ScoreResult(BaseModel):
    """Composite score and level."""

    overall_score: int = Field(..., ge=0, le=100)
    level: Level


class QAPair(BaseModel):
    """One interviewer question followed by one candidate answer."""

    question: str
    answer: str


class InterviewSession(BaseModel):
    """Session document persisted by the session store."""

    id: str = Field(default_factory=lambda: uuid4().hex, description="Session identifier")
    status: SessionStatus = Field(default=SessionStatus.ACTIVE)
    chat_history: list[Message] = Field(default_factory=list)
    current_step: InterviewStep = Field(default=InterviewStep.QUESTIONING)
    last_feedback: str | None = Field(default=None)
    overall_feedback: Assessment | None = Field(default=None)
    context: InterviewContext = Field(default_factory=InterviewContext)
    version: int = Field(default=0, ge=0, description="Incremented on every successful save")
    created_at: datetime = Field(default_factory=_now_utc)
    updated_at: datetime = Field(default_factory=_now_utc)

    @property
    def last_message(self) -> Message | None:
        """Most recent message, if any."""
        return self.chat_history[-1] if self.chat_history else None


class SubmissionResult(BaseModel):
    """Result of a successful submission."""

    assessment: Assessment
    status: Literal["completed"] = "completed"
