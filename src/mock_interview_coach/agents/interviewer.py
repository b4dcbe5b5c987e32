"""
Interviewer agent.

Delegates question and per-answer feedback generation to the text generator,
choosing instructions from the session's interview context.
"""

import logging
from collections.abc import Sequence

from mock_interview_coach.agents import prompts
from mock_interview_coach.config import get_settings
from mock_interview_coach.models.llm_client import TextGenerator, invoke_generator
from mock_interview_coach.orchestrator.schemas import InterviewContext, Message

logger = logging.getLogger(__name__)


class Interviewer:
    """Generates interviewer turns and coaching feedback."""

    def __init__(self, generator: TextGenerator, timeout: float | None = None) -> None:
        """
        Initialize the interviewer.

        Args:
            generator: Text generator for all turns.
            timeout: Seconds allowed per generator call (uses config if not provided).
        """
        self._generator = generator
        self._timeout = timeout or get_settings().llm_timeout

    async def intro_question(self, context: InterviewContext) -> str:
        """Greeting plus a request for the candidate's introduction."""
        return await invoke_generator(
            self._generator,
            prompts.intro_instruction(context),
            [],
            prompts.INTRO_INPUT,
            timeout=self._timeout,
        )

    async def next_question(self, context: InterviewContext, history: Sequence[Message]) -> str:
        """Next question, given everything asked and answered so far."""
        return await invoke_generator(
            self._generator,
            prompts.question_instruction(context),
            history,
            prompts.NEXT_QUESTION_INPUT,
            timeout=self._timeout,
        )

    async def feedback(self, context: InterviewContext, history: Sequence[Message], answer: str) -> str:
        """
        Coaching feedback on the latest answer.

        Args:
            context: Interview context.
            history: Conversation before the answer.
            answer: The candidate's latest answer.

        Returns:
            Feedback text.
        """
        logger.debug(f"Generating feedback for a {len(answer)} char answer")
        return await invoke_generator(
            self._generator,
            prompts.feedback_instruction(context),
            history,
            answer,
            timeout=self._timeout,
        )
