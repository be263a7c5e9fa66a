"""ConversationEngine: the per-turn loop wiring all components together."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from .config import load_config
from .core.anatomizer import TopicAnatomizer
from .core.assembler import ContextAssembler
from .core.background import BackgroundTasks
from .core.budget import BudgetEnforcer
from .core.compactor import TurnCompactor
from .core.message_store import MessageStore
from .core.relevance import RelevanceSelector
from .core.topic_index import TopicIndex
from .token_counter import create_token_counter
from .types import (
    CompletionService,
    ContextStats,
    Message,
    Role,
    RollingContextConfig,
    Strategy,
    Turn,
)

logger = logging.getLogger(__name__)


class ConversationEngine:
    """Run conversation turns against a completion service under a token budget.

    Usage:
        engine = ConversationEngine(service, config_path="./rolling-context.yaml")
        reply = engine.respond("Hello", on_chunk=print)

    Each appended turn gets strategy-dependent background work (compaction
    for SUMMARIZED, topic extraction for RETRIEVAL) that is never awaited by
    ``respond``. The budget is enforced after the assistant turn is stored.
    """

    def __init__(
        self,
        llm: CompletionService,
        config: RollingContextConfig | None = None,
        config_path: str | Path | None = None,
        token_counter: Callable[[str], int] | None = None,
    ) -> None:
        self.config = config or load_config(config_path)
        self.llm = llm
        self.strategy = Strategy(self.config.strategy)
        self._token_counter = token_counter or create_token_counter(
            self.config.token_counter, model=self.config.provider.model,
        )

        self.store = MessageStore(self._token_counter)
        self.topic_index = TopicIndex()
        self._budget = BudgetEnforcer(self.config.budget)
        self._assembler = ContextAssembler(self.config.assembler)
        self._compactor = TurnCompactor(llm, self.store, self.config.compaction)
        self._anatomizer = TopicAnatomizer(llm, self.topic_index, self.config.topics)
        self._relevance = RelevanceSelector(llm, self._token_counter, self.config.relevance)
        self._background = BackgroundTasks(max_workers=self.config.background.max_workers)
        self.last_request: list[Message] = []

    # -- turn loop --

    def respond(self, user_text: str, on_chunk: Callable[[str], None] | None = None) -> str:
        """Run one full turn and return the assistant's reply.

        Completion-service errors propagate; the user turn stays stored and
        no partial assistant turn is appended.
        """
        self._store_turn(Role.USER, user_text)

        relevant: list[str] = []
        if self.strategy == Strategy.RETRIEVAL:
            relevant = self._relevance.select_relevant(user_text, self.topic_index.topic_names())
            logger.debug(f"Relevant topics: {relevant}")

        messages = self._assembler.assemble(
            self.strategy, self.store, self.topic_index, relevant,
        )
        self.last_request = messages

        chunks: list[str] = []
        for chunk in self.llm.stream(
            messages=[m.to_dict() for m in messages],
            max_tokens=self.config.reply.max_tokens,
        ):
            chunks.append(chunk)
            if on_chunk is not None:
                on_chunk(chunk)
        reply = "".join(chunks)

        self._store_turn(Role.ASSISTANT, reply)
        self.enforce_budget()

        logger.debug(f"Turn complete: {self.stats()}")
        return reply

    def _store_turn(self, role: Role, content: str) -> str:
        turn_id = self.store.append(role, content)
        turn = self.store.get(turn_id)
        if turn is not None:
            self._schedule_background(turn)
        return turn_id

    def _schedule_background(self, turn: Turn) -> None:
        if self.strategy == Strategy.SUMMARIZED:
            self._background.submit(
                f"compact {turn.id}",
                self._compactor.compact, turn.id, turn.token_count, turn.content,
            )
        elif self.strategy == Strategy.RETRIEVAL:
            self._background.submit(
                f"anatomize {turn.id}",
                self._anatomizer.anatomize, turn.token_count, turn.content,
            )

    def enforce_budget(self) -> list[Turn]:
        return self._budget.enforce(self.store)

    # -- introspection & lifecycle --

    def stats(self) -> ContextStats:
        return ContextStats(
            strategy=self.strategy.value,
            turn_count=len(self.store),
            total_tokens=self.store.total_tokens,
            budget_tokens=self._budget.budget,
            topic_count=len(self.topic_index),
            excerpt_count=self.topic_index.excerpt_count,
            pending_tasks=self._background.pending,
        )

    def wait_for_background(self, timeout: float | None = None) -> bool:
        """Block until queued compaction / topic work has finished."""
        return self._background.wait(timeout)

    def close(self, cancel_pending: bool = True) -> None:
        self._background.shutdown(cancel_pending=cancel_pending)
