"""Tests for RelevanceSelector."""

import json

from rolling_context.core.relevance import RelevanceSelector

from conftest import MockCompletionService, word_count


def test_no_topics_returns_empty_without_service_call():
    llm = MockCompletionService(responses=['["billing"]'])
    assert RelevanceSelector(llm, word_count).select_relevant("anything?", []) == []
    assert llm.calls == []


def test_returns_parsed_topics():
    llm = MockCompletionService(responses=['["shipping"]'])
    result = RelevanceSelector(llm, word_count).select_relevant(
        "where is my package?", ["billing", "shipping"],
    )
    assert result == ["shipping"]


def test_prompt_contains_topics_and_question():
    llm = MockCompletionService(responses=["[]"])
    RelevanceSelector(llm, word_count).select_relevant("where is my package?", ["billing", "shipping"])
    prompt = llm.calls[0]["messages"][0]["content"]
    assert "billing, shipping" in prompt
    assert "where is my package?" in prompt
    assert "JSON array of strings" in prompt


def test_output_ceiling_has_floor_and_scales():
    llm = MockCompletionService(responses=["[]"])
    selector = RelevanceSelector(llm, word_count)
    selector.select_relevant("q", ["billing"])
    assert llm.calls[0]["max_tokens"] == 100

    many = [f"topic-{i}" for i in range(80)]
    selector.select_relevant("q", many)
    assert llm.calls[1]["max_tokens"] == word_count(json.dumps(many)) * 2


def test_unparseable_response_returns_empty(caplog):
    llm = MockCompletionService(responses=["Sure! The relevant topic is shipping."])
    with caplog.at_level("ERROR"):
        result = RelevanceSelector(llm, word_count).select_relevant("q", ["shipping"])
    assert result == []
    assert "Failed to parse relevant topics" in caplog.text


def test_wrong_shape_returns_empty():
    llm = MockCompletionService(responses=['{"topics": ["shipping"]}'])
    assert RelevanceSelector(llm, word_count).select_relevant("q", ["shipping"]) == []

    llm = MockCompletionService(responses=["[1, 2]"])
    assert RelevanceSelector(llm, word_count).select_relevant("q", ["shipping"]) == []


def test_service_error_returns_empty():
    llm = MockCompletionService(error=RuntimeError("down"))
    assert RelevanceSelector(llm, word_count).select_relevant("q", ["shipping"]) == []


def test_array_wrapped_in_prose_is_extracted():
    llm = MockCompletionService(responses=['Here you go: ["billing", "shipping"]'])
    result = RelevanceSelector(llm, word_count).select_relevant("q", ["billing", "shipping"])
    assert result == ["billing", "shipping"]
