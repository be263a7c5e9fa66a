"""TokenLedger: per-turn token counts with an incrementally maintained total."""

from __future__ import annotations

from typing import Callable

from ..types import TokenizerError


class TokenLedger:
    """Track token counts by turn id.

    ``total`` is adjusted on every record/update/remove instead of being
    recomputed, so each mutation is O(1). Not thread-safe on its own; the
    MessageStore serializes access.
    """

    def __init__(self, token_counter: Callable[[str], int]) -> None:
        self.token_counter = token_counter
        self._counts: dict[str, int] = {}
        self._total = 0

    def count(self, text: str) -> int:
        try:
            tokens = self.token_counter(text)
        except Exception as e:
            raise TokenizerError(f"Tokenizer failed: {e}") from e
        if tokens < 0:
            raise TokenizerError(f"Tokenizer returned a negative count: {tokens}")
        return tokens

    def record(self, turn_id: str, tokens: int) -> None:
        if turn_id in self._counts:
            raise KeyError(f"Turn {turn_id} already recorded")
        self._counts[turn_id] = tokens
        self._total += tokens

    def update(self, turn_id: str, tokens: int) -> None:
        previous = self._counts[turn_id]
        self._counts[turn_id] = tokens
        self._total += tokens - previous

    def remove(self, turn_id: str) -> int:
        tokens = self._counts.pop(turn_id)
        self._total -= tokens
        return tokens

    def get(self, turn_id: str) -> int | None:
        return self._counts.get(turn_id)

    @property
    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._counts)
