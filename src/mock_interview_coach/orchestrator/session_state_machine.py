"""
Interview session state machine.

Owns session status transitions, conversation history mutation and
submission idempotency. Composes the interviewer, the assessment extractor
and the session store.
"""

from __future__ import annotations

import logging

from mock_interview_coach.agents.assessment_extractor import AssessmentExtractor
from mock_interview_coach.agents.interviewer import Interviewer
from mock_interview_coach.agents.scoring import ScoreCalculator
from mock_interview_coach.db.repository import SessionStore
from mock_interview_coach.errors import (
    AssessmentPersistError,
    Conflict,
    InvalidState,
    StaleSessionError,
    StoreFailure,
)
from mock_interview_coach.models.llm_client import TextGenerator
from mock_interview_coach.orchestrator.schemas import (
    Assessment,
    InterviewContext,
    InterviewSession,
    InterviewStep,
    Message,
    MessageRole,
    SessionStatus,
    SubmissionResult,
)


class SessionStateMachine:
    """
    Drives one interview session from start to assessment.

    Status moves ``active -> submitting -> completed``; the only backwards
    step is ``submitting -> active`` when a submission fails. Every write is
    a compare-and-set on the session version.
    """

    def __init__(
        self,
        store: SessionStore,
        generator: TextGenerator,
        extractor: AssessmentExtractor | None = None,
        score_calculator: ScoreCalculator | None = None,
        interviewer: Interviewer | None = None,
    ) -> None:
        """
        Initialize the state machine.

        Args:
            store: Session store.
            generator: Text generator shared by all agents.
            extractor: Assessment extractor. Creates default if None.
            score_calculator: Scores generated assessments. Creates default if None.
            interviewer: Question and feedback generator. Creates default if None.
        """
        self._logger = logging.getLogger(__name__)
        self._store = store
        self._score_calculator = score_calculator or ScoreCalculator()
        self._extractor = extractor or AssessmentExtractor(
            generator=generator,
            score_calculator=self._score_calculator,
        )
        self._interviewer = interviewer or Interviewer(generator=generator)

    async def start(self, context: InterviewContext) -> str:
        """
        Create a new session.

        Args:
            context: Mode-specific interview context.

        Returns:
            The new session ID.
        """
        session = await self._store.create(context)
        self._logger.info(f"Started session {session.id} ({context.interview_type})")
        return session.id

    async def get_session(self, session_id: str) -> InterviewSession:
        """Load a session."""
        return await self._store.get(session_id)

    async def status(self, session_id: str) -> SessionStatus:
        """Get the session status."""
        session = await self._store.get(session_id)
        return session.status

    async def append_ai_question(self, session_id: str, text: str) -> InterviewSession:
        """
        Append an interviewer message.

        Raises:
            InvalidState: If the session is completed or the last message is
                an unanswered interviewer message.
            Conflict: If a submission is in progress.
        """
        session = await self._store.get(session_id)
        self._append(session, MessageRole.AI, text)
        return await self._save(session)

    async def append_human_answer(self, session_id: str, text: str) -> InterviewSession:
        """
        Append a candidate answer.

        Raises:
            InvalidState: If the session is completed or there is no open
                question to answer.
            Conflict: If a submission is in progress.
        """
        session = await self._store.get(session_id)
        self._append(session, MessageRole.HUMAN, text)
        return await self._save(session)

    async def get_intro_question(self, session_id: str) -> str:
        """
        Ask the generator for the greeting and first question.

        Raises:
            InvalidState: If the conversation has already started.
        """
        session = await self._store.get(session_id)
        self._ensure_mutable(session, "ask the intro question")
        if session.chat_history:
            raise InvalidState("Intro question can only be asked at the beginning.")

        question = await self._interviewer.intro_question(session.context)
        self._append(session, MessageRole.AI, question)
        await self._save(session)
        return question

    async def get_next_question(self, session_id: str) -> str:
        """
        Ask the generator for the next question given the history.

        Raises:
            InvalidState: If the session is completed or the previous
                question is still unanswered.
        """
        session = await self._store.get(session_id)
        self._ensure_mutable(session, "get next question")
        self._ensure_role_allowed(session, MessageRole.AI)

        question = await self._interviewer.next_question(session.context, session.chat_history)
        self._append(session, MessageRole.AI, question)
        session.current_step = InterviewStep.QUESTIONING
        await self._save(session)
        return question

    async def post_answer(self, session_id: str, answer: str) -> str:
        """
        Record an answer and return coaching feedback on it.

        The answer is persisted before feedback is requested, so a generator
        failure does not lose it.

        Returns:
            Feedback on the answer.
        """
        session = await self._store.get(session_id)
        self._append(session, MessageRole.HUMAN, answer)
        session = await self._save(session)

        feedback = await self._interviewer.feedback(session.context, session.chat_history[:-1], answer)

        session.current_step = InterviewStep.FEEDBACK
        session.last_feedback = feedback
        await self._save(session)
        return feedback

    async def revise_answer(self, session_id: str) -> str:
        """
        Remove the latest answer so the question can be answered again.

        Returns:
            The question being re-answered.

        Raises:
            InvalidState: If the session is completed or the latest message
                is not a candidate answer.
        """
        session = await self._store.get(session_id)
        self._ensure_mutable(session, "revise answer")

        last = session.last_message
        if last is None or last.role is not MessageRole.HUMAN:
            raise InvalidState("No recent human answer to revise.")

        session.chat_history.pop()
        session.current_step = InterviewStep.REVISE
        await self._save(session)

        question = next(
            (msg.content for msg in reversed(session.chat_history) if msg.role is MessageRole.AI),
            None,
        )
        if question is None:
            raise InvalidState("No question found for the revised answer.")
        return question

    async def submit(self, session_id: str) -> SubmissionResult:
        """
        Assess the interview and complete the session.

        A completed session returns its cached assessment without
        recomputation. Any pipeline error rolls the session back to
        ``active`` and is re-raised.

        Returns:
            The assessment and the completed status.

        Raises:
            Conflict: If another submission holds the session.
            InvalidState: If the session is completed without an assessment.
            AssessmentPersistError: If the assessment could not be saved.
        """
        session = await self._store.get(session_id)

        if session.status is SessionStatus.COMPLETED and session.overall_feedback is not None:
            self._logger.info(f"Session {session_id} already completed, returning cached assessment")
            return SubmissionResult(assessment=session.overall_feedback)

        if session.status is SessionStatus.SUBMITTING:
            raise Conflict("Interview submission is already in progress")

        if session.status is SessionStatus.COMPLETED:
            raise InvalidState("Interview is completed but has no assessment")

        session.status = SessionStatus.SUBMITTING
        try:
            session = await self._store.save(session)
        except StaleSessionError as e:
            raise Conflict("Interview submission is already in progress") from e

        try:
            assessment = await self._extractor.extract(session.chat_history)
        except BaseException as e:
            # Includes cancellation; the session must not stay locked in submitting.
            self._logger.error(f"Assessment failed for session {session_id}: {e!r}")
            await self._rollback(session)
            raise

        return await self._complete(session, assessment)

    async def _complete(self, session: InterviewSession, assessment: Assessment) -> SubmissionResult:
        session.overall_feedback = assessment
        session.status = SessionStatus.COMPLETED
        try:
            await self._store.save(session)
        except StoreFailure as e:
            self._logger.error(
                f"Computed {assessment.source.value} assessment for session {session.id} "
                f"could not be saved: {e}"
            )
            session.overall_feedback = None
            await self._rollback(session)
            raise AssessmentPersistError(session.id, assessment) from e
        except BaseException as e:
            self._logger.error(f"Completion of session {session.id} interrupted: {e!r}")
            await self._rollback(session)
            raise

        self._logger.info(
            f"Session {session.id} completed with score {assessment.overall_score} "
            f"({assessment.level}, {assessment.source.value})"
        )
        return SubmissionResult(assessment=assessment)

    async def _rollback(self, session: InterviewSession) -> None:
        session.status = SessionStatus.ACTIVE
        session.overall_feedback = None
        try:
            await self._store.save(session)
            self._logger.info(f"Session {session.id} rolled back to active")
        except StoreFailure as e:
            self._logger.error(f"Rollback of session {session.id} failed: {e}")

    async def _save(self, session: InterviewSession) -> InterviewSession:
        try:
            return await self._store.save(session)
        except StaleSessionError as e:
            raise Conflict("Session was modified concurrently, please retry") from e

    def _ensure_mutable(self, session: InterviewSession, action: str) -> None:
        if session.status is SessionStatus.COMPLETED:
            raise InvalidState(f"Interview is already completed, can not {action}")
        if session.status is SessionStatus.SUBMITTING:
            raise Conflict(f"Interview submission is in progress, can not {action}")

    def _ensure_role_allowed(self, session: InterviewSession, role: MessageRole) -> None:
        last = session.last_message
        if role is MessageRole.AI:
            if last is not None and last.role is MessageRole.AI:
                raise InvalidState("The previous question has not been answered yet.")
        elif last is None or last.role is MessageRole.HUMAN:
            raise InvalidState("There is no open question to answer.")

    def _append(self, session: InterviewSession, role: MessageRole, text: str) -> None:
        action = "post answer" if role is MessageRole.HUMAN else "add question"
        self._ensure_mutable(session, action)
        self._ensure_role_allowed(session, role)
        session.chat_history.append(Message(role=role, content=text))
