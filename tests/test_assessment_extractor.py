"""
Tests for the assessment extraction pipeline.
"""

import asyncio
import json
from collections.abc import Sequence
from typing import Any

import pytest

from mock_interview_coach.agents.assessment_extractor import AssessmentExtractor, format_qa_context
from mock_interview_coach.errors import UpstreamRateLimited
from mock_interview_coach.models.llm_client import TextGenerator
from mock_interview_coach.orchestrator.schemas import (
    AssessmentSource,
    GeneratedAssessment,
    Message,
    MessageRole,
    QAPair,
)

HISTORY = [
    Message(role=MessageRole.AI, content="How do you design {REST} endpoints?"),
    Message(role=MessageRole.HUMAN, content="I version them and keep resources nouns."),
    Message(role=MessageRole.AI, content="Tell me about a failure."),
    Message(role=MessageRole.HUMAN, content="A migration once ran long; we added dry runs."),
]

DEEPLY_NESTED = '{"summary": ' + "[" * 100000 + "]" * 100000 + "}"
OVERSIZED_INTEGER = '{"summary": "x", "n": 1' + "0" * 5000 + "}"


def _payload() -> dict[str, Any]:
    return {
        "summary": "Solid answers with room for detail.",
        "response_depth": "Intermediate",
        "questions_analysis": [
            {
                "question": "How do you design {REST} endpoints?",
                "response": "I version them and keep resources nouns.",
                "feedback": "You covered versioning; mention error handling.",
                "strengths": ["Clear"],
                "improvements": ["More depth"],
                "score": 8,
                "response_depth": "Intermediate",
            },
            {
                "question": "Tell me about a failure.",
                "response": "A migration once ran long; we added dry runs.",
                "feedback": "Good reflection.",
                "strengths": ["Ownership"],
                "improvements": ["Quantify impact"],
                "score": 6,
                "response_depth": "Novice",
            },
        ],
        "coaching_scores": {
            "clarity_of_motivation": 4,
            "specificity_of_learning": 3,
            "career_goal_alignment": 5,
        },
        "recommendations": ["Use STAR"],
        "closure_message": "Thanks for practicing!",
    }


class FakeGenerator(TextGenerator):
    """Text generator returning scripted responses or raising scripted errors."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, list[Message], str]] = []

    async def generate(self, system_instruction: str, history: Sequence[Message], user_input: str) -> str:
        self.calls.append((system_instruction, list(history), user_input))
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class SlowGenerator(TextGenerator):
    def __init__(self) -> None:
        self.calls = 0

    async def generate(self, system_instruction: str, history: Sequence[Message], user_input: str) -> str:
        self.calls += 1
        await asyncio.sleep(1)
        return "{}"


def _extractor(generator: TextGenerator, **kwargs: Any) -> AssessmentExtractor:
    return AssessmentExtractor(generator, max_attempts=3, retry_delay=0, timeout=5, **kwargs)


def test_format_qa_context() -> None:
    pairs = [QAPair(question="Q one?", answer="A one"), QAPair(question="Q two?", answer="A two")]

    assert format_qa_context(pairs) == "Q1: Q one?\nA1: A one\n\nQ2: Q two?\nA2: A two"


def test_parse_fenced_output_with_braces_in_strings() -> None:
    payload = _payload()
    raw = "Sure! Here is the assessment:\n```json\n" + json.dumps(payload, indent=2) + "\n```\nLet me know."

    outcome = _extractor(FakeGenerator([])).parse(raw)

    assert outcome.ok
    assert outcome.assessment == GeneratedAssessment.model_validate(payload)


def test_parse_rejects_out_of_range_scores() -> None:
    payload = _payload()
    payload["questions_analysis"][0]["score"] = 11

    outcome = _extractor(FakeGenerator([])).parse(json.dumps(payload))

    assert not outcome.ok
    assert "Schema validation failed" in outcome.error


def test_parse_without_object() -> None:
    outcome = _extractor(FakeGenerator([])).parse("I cannot assess this interview.")

    assert not outcome.ok


@pytest.mark.asyncio
async def test_first_attempt_success_is_scored() -> None:
    generator = FakeGenerator([json.dumps(_payload())])

    assessment = await _extractor(generator).extract(HISTORY)

    assert assessment.source == AssessmentSource.GENERATED
    # 14/20 * 80 + 12/15 * 20
    assert assessment.overall_score == 72
    assert assessment.level == "Competent"
    assert len(generator.calls) == 1

    instruction, history, user_input = generator.calls[0]
    assert "2 in total" in instruction
    assert history == []
    assert user_input.startswith("Q1: How do you design {REST} endpoints?\nA1: ")


@pytest.mark.asyncio
async def test_retry_then_success() -> None:
    generator = FakeGenerator(["Let me think about it...", json.dumps(_payload())])

    assessment = await _extractor(generator).extract(HISTORY)

    assert assessment.source == AssessmentSource.GENERATED
    assert len(generator.calls) == 2


@pytest.mark.asyncio
async def test_repairable_output_is_accepted() -> None:
    broken = json.dumps(_payload())[:-1] + ",}"
    generator = FakeGenerator([broken])

    assessment = await _extractor(generator).extract(HISTORY)

    assert assessment.source == AssessmentSource.GENERATED


@pytest.mark.asyncio
async def test_exhausted_attempts_fall_back() -> None:
    generator = FakeGenerator(["nope", "still nope", "```json\n{\"summary\": \"x\"}\n```"])

    assessment = await _extractor(generator).extract(HISTORY)

    assert assessment.source == AssessmentSource.FALLBACK
    assert len(generator.calls) == 3


@pytest.mark.asyncio
async def test_empty_questions_analysis_counts_as_failure() -> None:
    empty = _payload()
    empty["questions_analysis"] = []
    generator = FakeGenerator([json.dumps(empty), json.dumps(_payload())])

    assessment = await _extractor(generator).extract(HISTORY)

    assert assessment.source == AssessmentSource.GENERATED
    assert len(generator.calls) == 2


@pytest.mark.asyncio
async def test_every_attempt_rate_limited_raises() -> None:
    generator = FakeGenerator([RuntimeError("HTTP 429 Too Many Requests")] * 3)

    with pytest.raises(UpstreamRateLimited):
        await _extractor(generator).extract(HISTORY)

    assert len(generator.calls) == 3


@pytest.mark.asyncio
async def test_partial_rate_limiting_falls_back() -> None:
    generator = FakeGenerator([UpstreamRateLimited("429"), "garbage", UpstreamRateLimited("429")])

    assessment = await _extractor(generator).extract(HISTORY)

    assert assessment.source == AssessmentSource.FALLBACK


@pytest.mark.asyncio
async def test_timeouts_fall_back() -> None:
    generator = SlowGenerator()
    extractor = AssessmentExtractor(generator, max_attempts=2, retry_delay=0, timeout=0.01)

    assessment = await extractor.extract(HISTORY)

    assert assessment.source == AssessmentSource.FALLBACK
    assert generator.calls == 2


@pytest.mark.asyncio
async def test_empty_history_skips_generator() -> None:
    generator = FakeGenerator([])

    assessment = await _extractor(generator).extract([])

    assert assessment.source == AssessmentSource.FALLBACK
    assert assessment.overall_score == 30
    assert generator.calls == []


def test_parse_pathological_json_is_a_failure() -> None:
    extractor = _extractor(FakeGenerator([]))

    assert not extractor.parse(DEEPLY_NESTED).ok
    assert not extractor.parse(OVERSIZED_INTEGER).ok


@pytest.mark.asyncio
async def test_pathological_json_is_retried() -> None:
    generator = FakeGenerator([DEEPLY_NESTED, OVERSIZED_INTEGER, json.dumps(_payload())])

    assessment = await _extractor(generator).extract(HISTORY)

    assert assessment.source == AssessmentSource.GENERATED
    assert len(generator.calls) == 3


@pytest.mark.asyncio
async def test_pathological_json_falls_back() -> None:
    generator = FakeGenerator([DEEPLY_NESTED, OVERSIZED_INTEGER, DEEPLY_NESTED])

    assessment = await _extractor(generator).extract(HISTORY)

    assert assessment.source == AssessmentSource.FALLBACK
    assert len(generator.calls) == 3
