"""
Scoring agent.

Blends per-question scores and coaching sub-scores into a bounded
composite score and a qualitative level.
"""

import math
from collections.abc import Sequence

from mock_interview_coach.errors import InvalidInput
from mock_interview_coach.orchestrator.schemas import (
    CoachingScores,
    Level,
    QuestionAnalysis,
    ScoreResult,
)

QUESTION_WEIGHT = 80
COACHING_WEIGHT = 20
MAX_QUESTION_SCORE = 10
MAX_COACHING_TOTAL = 15


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return math.floor(value + 0.5)


class ScoreCalculator:
    """
    Composite scoring for completed interviews.

    Question scores carry 80% of the weight and coaching scores 20%.
    """

    def compute(
        self,
        questions: Sequence[QuestionAnalysis],
        coaching: CoachingScores,
    ) -> ScoreResult:
        """
        Compute the overall score and level.

        Args:
            questions: Per-question analyses, each scored 0-10.
            coaching: Coaching sub-scores, each 1-5.

        Returns:
            Overall score in [0, 100] and its level.

        Raises:
            InvalidInput: If ``questions`` is empty.
        """
        if not questions:
            raise InvalidInput("Cannot score an assessment without analysed questions")

        total_question_score = sum(q.score for q in questions)
        max_question_score = len(questions) * MAX_QUESTION_SCORE

        weighted_question = (total_question_score / max_question_score) * QUESTION_WEIGHT
        weighted_coaching = (coaching.total() / MAX_COACHING_TOTAL) * COACHING_WEIGHT

        overall_score = max(0, min(100, round_half_up(weighted_question + weighted_coaching)))
        return ScoreResult(overall_score=overall_score, level=self.level_for(overall_score))

    @staticmethod
    def level_for(score: int) -> Level:
        """Map a 0-100 score to its level."""
        if score < 50:
            return "Basic"
        if score < 80:
            return "Competent"
        return "High-Caliber"
