"""
Tests for pulling JSON objects out of model replies.
"""
import json
import pytest

from ats_portal.llm.errors import ExtractionError
from ats_portal.llm.json_extract import extract_json, find_balanced_object


def test_bare_json_round_trip():
    data = {"ats_score": 72, "skills_matched": ["Python"], "nested": {"a": [1, 2]}}
    assert extract_json(json.dumps(data)) == data


def test_json_wrapped_in_prose():
    raw = 'Here is the analysis you asked for:\n{"ats_score": 64, "skills_missing": []}\nLet me know!'
    assert extract_json(raw) == {"ats_score": 64, "skills_missing": []}


def test_fenced_block_with_language_tag():
    raw = 'Sure.\n```json\n{"name": "Ada", "skills": ["Go"]}\n```\nDone.'
    assert extract_json(raw) == {"name": "Ada", "skills": ["Go"]}


def test_fenced_block_without_language_tag():
    raw = '```\n{"name": "Ada"}\n```'
    assert extract_json(raw) == {"name": "Ada"}


def test_first_object_wins():
    raw = 'First {"ats_score": 10} then {"ats_score": 90}'
    assert extract_json(raw) == {"ats_score": 10}


def test_braces_inside_strings():
    raw = 'Result: {"summary": "Uses {curly} braces and a } stray one", "ok": true} trailing'
    assert extract_json(raw) == {"summary": "Uses {curly} braces and a } stray one", "ok": True}


def test_non_json_braces_in_prose_are_skipped():
    raw = 'Replace {name} with yours. {"ats_score": 55}'
    assert extract_json(raw) == {"ats_score": 55}


def test_find_balanced_object_nested():
    assert find_balanced_object('x {"a": {"b": {}}} y') == '{"a": {"b": {}}}'
    assert find_balanced_object("no braces") is None
    assert find_balanced_object("{unclosed") is None


@pytest.mark.parametrize("raw", [
    "",
    None,
    "I could not analyze this resume.",
    "[1, 2, 3]",
    '{"ats_score": 50,',
    "```json\nnot json\n```",
])
def test_unparseable_replies_raise(raw):
    with pytest.raises(ExtractionError):
        extract_json(raw)


def test_fence_text_inside_string_values_round_trips():
    data = {"note": "``` {} ```", "x": 1, "example": "```json\n{\"a\": 2}\n```"}
    assert extract_json(json.dumps(data)) == data
    assert extract_json("\n  " + json.dumps(data, indent=2) + "\n") == data
