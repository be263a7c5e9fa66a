"""Shared fixtures for rolling-context tests."""

from __future__ import annotations

import threading
from collections.abc import Iterator

import pytest

from rolling_context.core.message_store import MessageStore
from rolling_context.core.topic_index import TopicIndex


def word_count(text: str) -> int:
    """Deterministic test tokenizer: one token per whitespace-separated word."""
    return len(text.split())


def words(n: int, word: str = "tok") -> str:
    return " ".join([word] * n)


class MockCompletionService:
    """Completion service returning canned text (no API calls).

    ``responses`` are consumed in order for ``complete`` (the last one
    repeats); ``reply`` is what ``stream`` yields, word by word.
    """

    def __init__(
        self,
        responses: list[str] | None = None,
        reply: str = "Hello! I'm a test assistant.",
        error: Exception | None = None,
    ):
        self._responses = responses or ["{}"]
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []
        self.stream_calls: list[dict] = []
        self._lock = threading.Lock()

    def complete(self, messages: list[dict], max_tokens: int) -> str:
        with self._lock:
            self.calls.append({"messages": messages, "max_tokens": max_tokens})
            idx = min(len(self.calls) - 1, len(self._responses) - 1)
        if self.error is not None:
            raise self.error
        return self._responses[idx]

    def stream(self, messages: list[dict], max_tokens: int) -> Iterator[str]:
        with self._lock:
            self.stream_calls.append({"messages": messages, "max_tokens": max_tokens})
        chunks = self.reply.split(" ")
        for i, chunk in enumerate(chunks):
            yield chunk + (" " if i < len(chunks) - 1 else "")


@pytest.fixture
def store() -> MessageStore:
    return MessageStore(word_count)


@pytest.fixture
def index() -> TopicIndex:
    return TopicIndex()
