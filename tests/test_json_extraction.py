import pytest

from mock_interview_coach.agents.json_extraction import (
    find_json_object,
    parse_json_loose,
    repair_json,
    strip_code_fences,
)


def test_strip_code_fences_removes_fence_and_label() -> None:
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('json {"a": 1}') == '{"a": 1}'


def test_find_json_object_skips_prose() -> None:
    text = 'Here is the assessment you asked for: {"a": {"b": 2}} Hope that helps!'

    assert find_json_object(text) == '{"a": {"b": 2}}'


def test_find_json_object_ignores_braces_in_strings() -> None:
    text = '{"question": "What does } mean in {python}?", "escaped": "say \\"}\\""} trailing }'

    assert find_json_object(text) == '{"question": "What does } mean in {python}?", "escaped": "say \\"}\\""}'


def test_find_json_object_apostrophe_in_prose() -> None:
    assert find_json_object("Here's the result: {'a': 'b'}") == "{'a': 'b'}"


def test_find_json_object_unbalanced() -> None:
    assert find_json_object('{"a": {"b": 1}') is None
    assert find_json_object("no object here") is None


def test_repair_json_leaves_string_contents_alone() -> None:
    repaired = repair_json('{"a": "x,} True", b: True,}')

    assert repaired == '{"a": "x,} True", "b": true}'


def test_repair_json_rejects_unterminated_string() -> None:
    with pytest.raises(ValueError):
        repair_json('{"a": "b')


def test_parse_json_loose_single_quotes_and_trailing_commas() -> None:
    assert parse_json_loose("{'a': 1, 'b': 'x',}") == {"a": 1, "b": "x"}


def test_parse_json_loose_unquoted_keys_and_fenced_json() -> None:
    raw = """```json
            {a: 1, b: true, c: null,}
            ```"""

    assert parse_json_loose(find_json_object(strip_code_fences(raw))) == {"a": 1, "b": True, "c": None}


def test_parse_json_loose_python_literal_fallback() -> None:
    assert parse_json_loose("{'a': (1, 2), 'b': None}") == {"a": [1, 2], "b": None}


def test_parse_json_loose_gives_up() -> None:
    assert parse_json_loose('{"a": "b') is None
    assert parse_json_loose("") is None


def test_parse_json_loose_deep_nesting() -> None:
    raw = '{"summary": ' + "[" * 100000 + "]" * 100000 + "}"

    assert parse_json_loose(raw) is None


def test_parse_json_loose_oversized_integer() -> None:
    raw = '{"summary": "x", "n": 1' + "0" * 5000 + "}"

    assert parse_json_loose(raw) is None
