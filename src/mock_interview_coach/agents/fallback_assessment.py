"""
Rule-based fallback assessment.

Scores an interview from its stored conversation using length and keyword
heuristics. Used when the text generator cannot produce a valid assessment.
"""

import logging
import re
from collections.abc import Sequence

from mock_interview_coach.agents.scoring import round_half_up
from mock_interview_coach.orchestrator.schemas import (
    Assessment,
    AssessmentSource,
    CoachingScores,
    Level,
    Message,
    MessageRole,
    QAPair,
    QuestionAnalysis,
    ResponseDepth,
)

logger = logging.getLogger(__name__)

QUESTION_MARKERS = ("?", "tell me", "can you", "what", "how", "why", "describe", "explain", "share")
EXAMPLE_KEYWORDS = ("project", "experience", "example", "developed", "worked")
TECHNICAL_KEYWORDS = ("api", "database", "framework", "technology")

_DIGIT_RE = re.compile(r"\d")
_DEPTH_POINTS: dict[str, int] = {"Novice": 1, "Intermediate": 2, "Advanced": 3}


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def _clamp(value: float, low: int, high: int) -> int:
    return max(low, min(high, round_half_up(value)))


def looks_like_question(text: str) -> bool:
    """Check whether an interviewer message asks something."""
    return _contains_any(text.lower(), QUESTION_MARKERS)


def pair_questions(history: Sequence[Message], require_question: bool = True) -> list[QAPair]:
    """
    Pair each interviewer message with the answer that immediately follows it.

    Args:
        history: Conversation, oldest first.
        require_question: Keep only interviewer messages that look like questions.

    Returns:
        Question/answer pairs in conversation order.
    """
    pairs: list[QAPair] = []
    for current, following in zip(history, history[1:]):
        if current.role is not MessageRole.AI or following.role is not MessageRole.HUMAN:
            continue
        if require_question and not looks_like_question(current.content):
            continue
        pairs.append(QAPair(question=current.content, answer=following.content))
    return pairs


class _ResponseSignals:
    """Heuristic signals extracted from one answer."""

    def __init__(self, response: str) -> None:
        lowered = response.lower()
        self.length = len(response)
        self.has_examples = _contains_any(lowered, EXAMPLE_KEYWORDS)
        self.is_structured = "." in response and self.length > 50
        self.has_numbers = bool(_DIGIT_RE.search(response))
        self.has_technical_terms = _contains_any(lowered, TECHNICAL_KEYWORDS)

    def score(self) -> int:
        score = 3.0
        if self.length > 50:
            score += 1
        if self.length > 100:
            score += 1
        if self.length > 200:
            score += 1
        if self.has_examples:
            score += 2
        if self.is_structured:
            score += 1
        if self.has_numbers:
            score += 0.5
        if self.has_technical_terms:
            score += 0.5
        return _clamp(score, 1, 10)

    def depth(self) -> ResponseDepth:
        if (
            self.length > 150
            and self.has_examples
            and self.is_structured
            and (self.has_numbers or self.has_technical_terms)
        ):
            return "Advanced"
        if self.length > 80 and (self.has_examples or self.is_structured):
            return "Intermediate"
        return "Novice"


class FallbackAssessmentGenerator:
    """
    Deterministic assessment built from the conversation alone.

    Never calls external services; the same history always yields the same
    assessment.
    """

    def generate(self, history: Sequence[Message]) -> Assessment:
        """
        Build an assessment from the conversation history.

        Args:
            history: Conversation, oldest first.

        Returns:
            A schema-valid assessment with ``source=fallback``.
        """
        pairs = pair_questions(history)
        analyses = [self._analyse(index, pair) for index, pair in enumerate(pairs)]

        if not analyses:
            logger.info("No question/answer pairs found, producing minimal fallback assessment")
            return self._minimal_assessment()

        average = sum(a.score for a in analyses) / len(analyses)
        overall_score = round_half_up(average * 10)
        level = self.level_for_average(average)

        summary = (
            f"Interview completed with {len(analyses)} questions answered. "
            f"Overall performance demonstrates {level.lower()} level responses with an "
            f"average score of {average:.1f}/10. {self._performance_summary(analyses)}"
        )
        closure_message = (
            f"Thank you for participating in this mock interview. You answered "
            f"{len(analyses)} questions with an overall score of {overall_score}/100. "
            f"{self._closure_message(level)}"
        )

        logger.info(f"Fallback assessment scored {len(analyses)} answers, average {average:.1f}")
        return Assessment(
            summary=summary,
            response_depth=self._overall_depth(analyses),
            questions_analysis=analyses,
            coaching_scores=CoachingScores(
                clarity_of_motivation=_clamp(average * 0.7, 1, 5),
                specificity_of_learning=_clamp(average * 0.6, 1, 5),
                career_goal_alignment=_clamp(average * 0.8, 1, 5),
            ),
            recommendations=self._recommendations(analyses, average),
            closure_message=closure_message,
            overall_score=overall_score,
            level=level,
            source=AssessmentSource.FALLBACK,
        )

    @staticmethod
    def level_for_average(average: float) -> Level:
        """Map an average on the 0-10 scale to a level."""
        if average < 5:
            return "Basic"
        if average < 7:
            return "Competent"
        return "High-Caliber"

    def _minimal_assessment(self) -> Assessment:
        # Average defaults to 3 when nothing was answered.
        return Assessment(
            summary="Interview session completed. Limited interaction detected for comprehensive assessment.",
            response_depth="Novice",
            questions_analysis=[],
            coaching_scores=CoachingScores(
                clarity_of_motivation=3,
                specificity_of_learning=3,
                career_goal_alignment=3,
            ),
            recommendations=["Complete a full interview session to receive detailed feedback"],
            closure_message=(
                "Thank you for your participation. We recommend completing a full "
                "interview session for comprehensive feedback."
            ),
            overall_score=30,
            level="Basic",
            source=AssessmentSource.FALLBACK,
        )

    def _analyse(self, index: int, pair: QAPair) -> QuestionAnalysis:
        signals = _ResponseSignals(pair.answer)
        score = signals.score()
        return QuestionAnalysis(
            question=pair.question,
            response=pair.answer,
            feedback=f"Response {index + 1}: {self._basic_feedback(score)}",
            strengths=self._strengths(pair.answer),
            improvements=self._improvements(pair.answer, score),
            score=score,
            response_depth=signals.depth(),
        )

    @staticmethod
    def _basic_feedback(score: float) -> str:
        if score >= 8:
            return "Excellent response with good detail and structure."
        if score >= 6:
            return "Good response but could benefit from more specific examples."
        if score >= 4:
            return "Adequate response but needs more detail and structure."
        return "Response needs significant improvement in detail and clarity."

    @staticmethod
    def _strengths(response: str) -> list[str]:
        lowered = response.lower()
        strengths = []
        if len(response) > 100:
            strengths.append("Provided detailed response")
        if "project" in lowered or "experience" in lowered:
            strengths.append("Included relevant examples")
        if len(response.split(".")) > 2:
            strengths.append("Well-structured answer")
        if "learn" in lowered or "improve" in lowered:
            strengths.append("Shows growth mindset")
        if _DIGIT_RE.search(response):
            strengths.append("Included specific details/metrics")
        return strengths or ["Participated actively in the interview"]

    @staticmethod
    def _improvements(response: str, score: float) -> list[str]:
        lowered = response.lower()
        improvements = []
        if len(response) < 100:
            improvements.append("Provide more detailed responses")
        if "project" not in lowered and "experience" not in lowered:
            improvements.append("Include specific examples from experience")
        if score < 6:
            improvements.append("Use structured approach like STAR method")
        if len(response.split(".")) < 2:
            improvements.append("Organize thoughts more clearly")
        if not _DIGIT_RE.search(response) and score < 7:
            improvements.append("Include specific metrics or numbers when relevant")
        return improvements or ["Continue practicing interview skills"]

    @staticmethod
    def _average_depth(analyses: Sequence[QuestionAnalysis]) -> float:
        return sum(_DEPTH_POINTS[a.response_depth] for a in analyses) / len(analyses)

    def _overall_depth(self, analyses: Sequence[QuestionAnalysis]) -> ResponseDepth:
        average_depth = self._average_depth(analyses)
        if average_depth >= 2.5:
            return "Advanced"
        if average_depth >= 1.5:
            return "Intermediate"
        return "Novice"

    def _performance_summary(self, analyses: Sequence[QuestionAnalysis]) -> str:
        average_depth = self._average_depth(analyses)
        if average_depth >= 2.5:
            return "Responses showed strong technical depth and clear communication."
        if average_depth >= 1.5:
            return "Responses demonstrated good understanding with room for more detail."
        return "Responses were basic and would benefit from more specific examples and detail."

    @staticmethod
    def _closure_message(level: Level) -> str:
        if level == "High-Caliber":
            return "Excellent performance! Continue practicing to maintain this high standard."
        if level == "Competent":
            return "Good performance with clear potential. Focus on the recommendations to reach the next level."
        return "Keep practicing! Focus on providing more detailed responses with specific examples."

    @staticmethod
    def _recommendations(analyses: Sequence[QuestionAnalysis], average: float) -> list[str]:
        recommendations = []
        if average < 6:
            recommendations.append("Practice providing more detailed and structured responses")
            recommendations.append("Prepare specific examples from your experience using the STAR method")

        if any(len(a.response) < 100 for a in analyses):
            recommendations.append("Work on expanding your answers with more context and details")

        if any(
            not _contains_any(a.response.lower(), ("project", "experience", "example"))
            for a in analyses
        ):
            recommendations.append("Prepare concrete examples from your projects and experiences")

        if any(a.response_depth == "Novice" for a in analyses):
            recommendations.append("Focus on providing more comprehensive answers with technical details")

        if not recommendations:
            recommendations.append("Continue practicing to maintain your strong interview performance")
            recommendations.append("Consider mock interviews for advanced scenarios")
        return recommendations
