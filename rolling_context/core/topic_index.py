"""TopicIndex: append-only topic -> excerpts knowledge base."""

from __future__ import annotations

import threading


class TopicIndex:
    """Excerpts accumulated per topic over the whole session.

    Purely in-memory and never evicted; it outlives the turns the excerpts
    were taken from. Each ``merge`` call holds the lock for its whole
    mapping, so one call's excerpts stay contiguous under each topic.
    """

    def __init__(self) -> None:
        self._topics: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def merge(self, topics: dict[str, list[str]]) -> int:
        """Append excerpts per topic, creating topics as needed.

        Returns the number of excerpts added.
        """
        added = 0
        with self._lock:
            for topic, excerpts in topics.items():
                self._topics.setdefault(topic, []).extend(excerpts)
                added += len(excerpts)
        return added

    def topic_names(self) -> list[str]:
        with self._lock:
            return list(self._topics)

    def excerpts_for(self, topic: str) -> list[str]:
        with self._lock:
            return list(self._topics.get(topic, []))

    def gather(self, topics: list[str]) -> list[str]:
        """Excerpts for *topics* in the given order; unknown topics are skipped."""
        with self._lock:
            excerpts: list[str] = []
            for topic in topics:
                excerpts.extend(self._topics.get(topic, []))
            return excerpts

    def as_dict(self) -> dict[str, list[str]]:
        with self._lock:
            return {topic: list(excerpts) for topic, excerpts in self._topics.items()}

    @property
    def excerpt_count(self) -> int:
        with self._lock:
            return sum(len(e) for e in self._topics.values())

    def __contains__(self, topic: str) -> bool:
        with self._lock:
            return topic in self._topics

    def __len__(self) -> int:
        with self._lock:
            return len(self._topics)
