"""Parsing helpers for JSON-shaped completion-service responses.

Responses are untrusted: callers validate the decoded shape before using it.
"""

from __future__ import annotations

import json
import re
from typing import Any

from ..types import ResponseParseError


def strip_response(response: str) -> str:
    """Remove markdown fences and <think> blocks around a model response."""
    text = response.strip()

    # Strip markdown fences
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)

    # Strip thinking tags
    if "<think>" in text:
        text = re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL).strip()

    return text.strip()


def parse_json_response(response: str, opener: str = "{", closer: str = "}") -> Any:
    """Decode JSON from a response, falling back to the outermost
    ``opener``...``closer`` span when the model wraps it in prose."""
    text = strip_response(response)

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start = text.find(opener)
    end = text.rfind(closer) + 1
    if start >= 0 and end > start:
        try:
            return json.loads(text[start:end])
        except json.JSONDecodeError:
            pass

    raise ResponseParseError(f"Response is not valid JSON: {response[:200]!r}")


def parse_topic_excerpts(response: str) -> dict[str, list[str]]:
    """Parse ``{"topic": ["excerpt", ...], ...}``; raise on any other shape."""
    data = parse_json_response(response, "{", "}")
    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(data).__name__}")

    result: dict[str, list[str]] = {}
    for topic, excerpts in data.items():
        if not isinstance(topic, str) or not topic.strip():
            raise ResponseParseError(f"Invalid topic name: {topic!r}")
        if not isinstance(excerpts, list) or not all(isinstance(e, str) for e in excerpts):
            raise ResponseParseError(f"Excerpts for {topic!r} must be a list of strings")
        result.setdefault(topic.strip(), []).extend(excerpts)
    return result


def parse_string_list(response: str) -> list[str]:
    """Parse ``["a", "b"]``; raise on any other shape."""
    data = parse_json_response(response, "[", "]")
    if not isinstance(data, list) or not all(isinstance(s, str) for s in data):
        raise ResponseParseError("Expected a JSON array of strings")
    return data
