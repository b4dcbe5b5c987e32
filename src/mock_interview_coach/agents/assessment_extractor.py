"""
Assessment extraction agent.

Asks the text generator for a JSON assessment of the interview, then cleans,
bounds, repairs and validates its output. Retries a fixed number of times and
falls back to rule-based scoring when every attempt fails.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from mock_interview_coach.agents.fallback_assessment import (
    FallbackAssessmentGenerator,
    pair_questions,
)
from mock_interview_coach.agents.json_extraction import (
    find_json_object,
    parse_json_loose,
    strip_code_fences,
)
from mock_interview_coach.agents.prompts import assessment_instruction
from mock_interview_coach.agents.scoring import ScoreCalculator
from mock_interview_coach.config import get_settings
from mock_interview_coach.errors import ExtractionFailure, UpstreamError, UpstreamRateLimited
from mock_interview_coach.models.llm_client import TextGenerator, invoke_generator
from mock_interview_coach.orchestrator.schemas import (
    Assessment,
    AssessmentSource,
    GeneratedAssessment,
    Message,
    QAPair,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of parsing and validating generator output."""

    assessment: GeneratedAssessment | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.assessment is not None

    @classmethod
    def success(cls, assessment: GeneratedAssessment) -> "ValidationOutcome":
        return cls(assessment=assessment)

    @classmethod
    def failure(cls, error: str) -> "ValidationOutcome":
        return cls(error=error)


def validate_assessment(data: Any) -> ValidationOutcome:
    """
    Validate parsed data against the assessment schema.

    Args:
        data: Parsed JSON data.

    Returns:
        Success with the typed assessment, or failure with a reason.
    """
    if not isinstance(data, dict):
        return ValidationOutcome.failure(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return ValidationOutcome.success(GeneratedAssessment.model_validate(data))
    except ValidationError as e:
        return ValidationOutcome.failure(f"Schema validation failed: {e.error_count()} error(s): {e}")


def format_qa_context(pairs: Sequence[QAPair]) -> str:
    """Format pairs as numbered ``Q``/``A`` blocks separated by blank lines."""
    return "\n\n".join(
        f"Q{number}: {pair.question}\nA{number}: {pair.answer}"
        for number, pair in enumerate(pairs, start=1)
    )


class AssessmentExtractor:
    """
    Turns free-form generator output into a validated assessment.

    Attempts are strictly sequential with a fixed delay between them. When
    every attempt fails the deterministic fallback generator is used, so
    extraction problems never reach the caller.
    """

    def __init__(
        self,
        generator: TextGenerator,
        score_calculator: ScoreCalculator | None = None,
        fallback: FallbackAssessmentGenerator | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            generator: Text generator to ask for the assessment.
            score_calculator: Scores generated assessments. Creates default if None.
            fallback: Rule-based generator used when extraction is exhausted.
            max_attempts: Generator attempts (uses config if not provided).
            retry_delay: Seconds between attempts (uses config if not provided).
            timeout: Seconds allowed per generator call (uses config if not provided).
        """
        settings = get_settings()
        self._generator = generator
        self._score_calculator = score_calculator or ScoreCalculator()
        self._fallback = fallback or FallbackAssessmentGenerator()
        self._max_attempts = max_attempts or settings.assessment_max_attempts
        self._retry_delay = settings.assessment_retry_delay if retry_delay is None else retry_delay
        self._timeout = timeout or settings.llm_timeout

    def parse(self, raw_text: str) -> ValidationOutcome:
        """
        Clean, bound, repair and validate one generator response.

        Args:
            raw_text: Raw generator output.

        Returns:
            Validation outcome for this response.
        """
        cleaned = strip_code_fences(raw_text)
        candidate = find_json_object(cleaned)
        if candidate is None:
            return ValidationOutcome.failure("No complete JSON object found in response")

        try:
            data = parse_json_loose(candidate)
            if data is None:
                return ValidationOutcome.failure("Extracted object is not parseable JSON")
            return validate_assessment(data)
        except (ValueError, RecursionError) as e:
            return ValidationOutcome.failure(f"Unparseable response: {type(e).__name__}")

    async def extract(self, history: Sequence[Message]) -> Assessment:
        """
        Produce an assessment for the conversation.

        Args:
            history: Interview conversation, oldest first.

        Returns:
            A scored assessment, generated or fallback.

        Raises:
            UpstreamRateLimited: If every attempt was rate limited.
        """
        pairs = pair_questions(history, require_question=False)
        if not pairs:
            logger.info("No question/answer pairs to assess, using fallback assessment")
            return self._fallback.generate(history)

        instruction = assessment_instruction(len(pairs))
        qa_context = format_qa_context(pairs)
        rate_limit_error: UpstreamRateLimited | None = None
        rate_limited_attempts = 0

        for attempt in range(1, self._max_attempts + 1):
            logger.info(f"Assessment attempt {attempt}/{self._max_attempts}")
            try:
                assessment = await self._attempt(instruction, qa_context, len(pairs))
                logger.info(f"Assessment attempt {attempt} succeeded")
                return assessment
            except UpstreamRateLimited as e:
                rate_limited_attempts += 1
                rate_limit_error = e
                logger.warning(f"Attempt {attempt} rate limited: {e}")
            except (UpstreamError, ExtractionFailure) as e:
                logger.warning(f"Attempt {attempt} failed: {e}")

            if attempt < self._max_attempts:
                await asyncio.sleep(self._retry_delay)

        if rate_limit_error is not None and rate_limited_attempts == self._max_attempts:
            logger.error("Every assessment attempt was rate limited")
            raise rate_limit_error

        logger.warning(f"All {self._max_attempts} assessment attempts failed, using fallback assessment")
        return self._fallback.generate(history)

    async def _attempt(self, instruction: str, qa_context: str, pair_count: int) -> Assessment:
        raw_text = await invoke_generator(
            self._generator,
            instruction,
            [],
            qa_context,
            timeout=self._timeout,
        )

        outcome = self.parse(raw_text)
        if not outcome.ok:
            logger.debug(f"Failed response preview: {raw_text[:200]}")
            raise ExtractionFailure(outcome.error or "Invalid assessment")

        generated = outcome.assessment
        if not generated.questions_analysis:
            raise ExtractionFailure("Assessment analysed no questions")
        if len(generated.questions_analysis) != pair_count:
            logger.warning(
                f"Assessment analysed {len(generated.questions_analysis)} of {pair_count} question/answer pairs"
            )

        score = self._score_calculator.compute(generated.questions_analysis, generated.coaching_scores)
        return Assessment(
            **generated.model_dump(),
            overall_score=score.overall_score,
            level=score.level,
            source=AssessmentSource.GENERATED,
        )
