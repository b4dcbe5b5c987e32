"""
Tests for the rule-based fallback assessment.
"""

from mock_interview_coach.agents.fallback_assessment import (
    FallbackAssessmentGenerator,
    looks_like_question,
    pair_questions,
)
from mock_interview_coach.orchestrator.schemas import AssessmentSource, Message, MessageRole

STRONG_ANSWER = (
    "I led a project where we developed a REST API for 3 internal teams. "
    "It cut the database load by 40 percent within two months. "
    "I learned a lot about caching, profiling and how to measure performance. "
    "We shipped it on time and it is still in production today."
)
WEAK_ANSWER = "Not sure."


def ai(content: str) -> Message:
    return Message(role=MessageRole.AI, content=content)


def human(content: str) -> Message:
    return Message(role=MessageRole.HUMAN, content=content)


class TestPairing:
    """Tests for question/answer pairing."""

    def test_pairs_adjacent_question_and_answer(self) -> None:
        history = [ai("Tell me about yourself?"), human("I am a developer."), ai("Why this role?"), human("Growth.")]

        pairs = pair_questions(history)

        assert [(p.question, p.answer) for p in pairs] == [
            ("Tell me about yourself?", "I am a developer."),
            ("Why this role?", "Growth."),
        ]

    def test_skips_statements_unless_disabled(self) -> None:
        history = [ai("Great, thanks."), human("You're welcome.")]

        assert pair_questions(history) == []
        assert len(pair_questions(history, require_question=False)) == 1

    def test_unanswered_question_is_ignored(self) -> None:
        history = [ai("What is a closure?"), human("A function with state."), ai("Explain GIL?")]

        assert len(pair_questions(history)) == 1

    def test_looks_like_question(self) -> None:
        assert looks_like_question("Can you walk me through it")
        assert looks_like_question("Describe a conflict you resolved.")
        assert not looks_like_question("Thank you for your time.")


class TestFallbackAssessmentGenerator:
    """Tests for FallbackAssessmentGenerator."""

    def test_strong_and_weak_answers(self) -> None:
        """A 10/10 answer and a 3/10 answer average 6.5."""
        assert len(STRONG_ANSWER) > 200
        history = [
            ai("Tell me about a project you worked on?"),
            human(STRONG_ANSWER),
            ai("How do you handle deadlines?"),
            human(WEAK_ANSWER),
        ]

        assessment = FallbackAssessmentGenerator().generate(history)

        assert assessment.source == AssessmentSource.FALLBACK
        assert [q.score for q in assessment.questions_analysis] == [10, 3]
        assert [q.response_depth for q in assessment.questions_analysis] == ["Advanced", "Novice"]
        assert assessment.overall_score == 65
        assert assessment.level == "Competent"
        assert assessment.coaching_scores.clarity_of_motivation == 5
        assert assessment.coaching_scores.specificity_of_learning == 4
        assert assessment.coaching_scores.career_goal_alignment == 5
        assert "2 questions answered" in assessment.summary
        assert "65/100" in assessment.closure_message

    def test_weak_answer_feedback(self) -> None:
        history = [ai("Why should we hire you?"), human(WEAK_ANSWER)]

        assessment = FallbackAssessmentGenerator().generate(history)
        analysis = assessment.questions_analysis[0]

        assert analysis.feedback.startswith("Response 1: Response needs significant improvement")
        assert "Provide more detailed responses" in analysis.improvements
        assert analysis.strengths == ["Participated actively in the interview"]
        assert assessment.level == "Basic"
        assert assessment.response_depth == "Novice"
        assert "Practice providing more detailed and structured responses" in assessment.recommendations

    def test_no_pairs_gives_minimal_assessment(self) -> None:
        assessment = FallbackAssessmentGenerator().generate([])

        assert assessment.overall_score == 30
        assert assessment.level == "Basic"
        assert assessment.questions_analysis == []
        assert assessment.coaching_scores.total() == 9

    def test_deterministic(self) -> None:
        history = [ai("What is your biggest strength?"), human(STRONG_ANSWER)]
        generator = FallbackAssessmentGenerator()

        assert generator.generate(history) == generator.generate(history)
