"""Tests for structured response parsing."""

import pytest

from rolling_context.core.response_parsing import (
    parse_json_response,
    parse_string_list,
    parse_topic_excerpts,
    strip_response,
)
from rolling_context.types import ResponseParseError


def test_strip_fences():
    assert strip_response('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_strip_thinking():
    assert strip_response('<think>hmm...</think>["x"]') == '["x"]'


def test_parse_plain_json():
    assert parse_json_response('{"a": ["b"]}') == {"a": ["b"]}


def test_parse_object_in_prose():
    assert parse_json_response('Result: {"a": ["b"]} hope that helps') == {"a": ["b"]}


def test_parse_array_in_prose():
    assert parse_json_response('Topics: ["a", "b"].', "[", "]") == ["a", "b"]


def test_parse_failure_raises():
    with pytest.raises(ResponseParseError):
        parse_json_response("no json here")


def test_topic_excerpts_strips_topic_names():
    assert parse_topic_excerpts('{" billing ": ["x"]}') == {"billing": ["x"]}


@pytest.mark.parametrize("payload", [
    '["not", "an", "object"]',
    '{"billing": "x"}',
    '{"billing": [1, 2]}',
    '{"": ["x"]}',
])
def test_topic_excerpts_rejects_bad_shapes(payload):
    with pytest.raises(ResponseParseError):
        parse_topic_excerpts(payload)


def test_empty_object_is_valid():
    assert parse_topic_excerpts("{}") == {}


@pytest.mark.parametrize("payload", ['{"a": 1}', '[1]', '"shipping"'])
def test_string_list_rejects_bad_shapes(payload):
    with pytest.raises(ResponseParseError):
        parse_string_list(payload)


def test_string_list_empty():
    assert parse_string_list("[]") == []


def test_topic_excerpts_merges_names_equal_after_strip():
    parsed = parse_topic_excerpts('{"billing": ["a"], " billing ": ["b"]}')
    assert parsed == {"billing": ["a", "b"]}
