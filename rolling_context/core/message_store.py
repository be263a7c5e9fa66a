"""MessageStore: ordered turn history, append at the tail, evict at the head."""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import replace
from typing import Callable

from ..types import EmptyStoreError, Message, Role, Turn
from .ledger import TokenLedger

logger = logging.getLogger(__name__)


class MessageStore:
    """Live conversation window shared by the turn loop and background tasks.

    The turn loop appends and evicts; background compaction only ever goes
    through ``update_content_by_id``, which is a no-op once the turn has been
    evicted. Every method takes the store lock, so a snapshot sees an update
    either fully applied or not at all.
    """

    def __init__(self, token_counter: Callable[[str], int]) -> None:
        self.ledger = TokenLedger(token_counter)
        self._turns: deque[Turn] = deque()
        self._by_id: dict[str, Turn] = {}
        self._lock = threading.RLock()

    def append(self, role: Role | str, content: str) -> str:
        """Tokenize *content*, store it as a new tail turn, return its id."""
        role = Role(role)
        # Tokenize before touching state so a tokenizer failure leaves no trace
        tokens = self.ledger.count(content)
        turn = Turn(role=role, content=content, token_count=tokens)
        with self._lock:
            self._turns.append(turn)
            self._by_id[turn.id] = turn
            self.ledger.record(turn.id, tokens)
        return turn.id

    def evict_front(self) -> Turn:
        with self._lock:
            if not self._turns:
                raise EmptyStoreError("Cannot evict from an empty message store")
            turn = self._turns.popleft()
            del self._by_id[turn.id]
            self.ledger.remove(turn.id)
        logger.debug(f"Evicted {turn.role.value} turn {turn.id} ({turn.token_count}t)")
        return turn

    def update_content_by_id(self, turn_id: str, new_content: str) -> bool:
        """Replace a live turn's content. Returns False if the id is gone."""
        tokens = self.ledger.count(new_content)
        with self._lock:
            turn = self._by_id.get(turn_id)
            if turn is None:
                return False
            turn.content = new_content
            turn.token_count = tokens
            self.ledger.update(turn_id, tokens)
        return True

    def locked(self) -> threading.RLock:
        """The store lock, for callers that need several calls to act as one."""
        return self._lock

    def get(self, turn_id: str) -> Turn | None:
        """Copy of the live turn with *turn_id*, or None."""
        with self._lock:
            turn = self._by_id.get(turn_id)
            return replace(turn) if turn is not None else None

    def snapshot(self) -> list[Message]:
        with self._lock:
            return [t.to_message() for t in self._turns]

    def recent(self, n: int) -> list[Message]:
        """The last *n* live turns, oldest first."""
        if n <= 0:
            return []
        with self._lock:
            return [t.to_message() for t in list(self._turns)[-n:]]

    def turns(self) -> list[Turn]:
        with self._lock:
            return [replace(t) for t in self._turns]

    @property
    def total_tokens(self) -> int:
        with self._lock:
            return self.ledger.total

    def __len__(self) -> int:
        with self._lock:
            return len(self._turns)
