"""
Agents module containing the interview agents.

Each agent handles one aspect of the interview: asking questions, scoring
and turning generator output into an assessment.
"""

from mock_interview_coach.agents.assessment_extractor import AssessmentExtractor
from mock_interview_coach.agents.fallback_assessment import FallbackAssessmentGenerator
from mock_interview_coach.agents.interviewer import Interviewer
from mock_interview_coach.agents.scoring import ScoreCalculator

__all__ = [
    "AssessmentExtractor",
    "FallbackAssessmentGenerator",
    "Interviewer",
    "ScoreCalculator",
]
