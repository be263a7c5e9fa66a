"""ContextAssembler: build the outbound message list for each strategy."""

from __future__ import annotations

from ..types import AssemblerConfig, Message, Strategy
from .message_store import MessageStore
from .topic_index import TopicIndex


class ContextAssembler:
    """Compose the request sent to the completion service.

    RAW and SUMMARIZED send the whole live window (SUMMARIZED turns may
    already be compacted). RETRIEVAL sends one system message built from
    topic excerpts, then only the most recent turns.
    """

    def __init__(self, config: AssemblerConfig | None = None) -> None:
        self.config = config or AssemblerConfig()

    def assemble(
        self,
        strategy: Strategy,
        store: MessageStore,
        index: TopicIndex | None = None,
        relevant_topics: list[str] | None = None,
    ) -> list[Message]:
        if strategy in (Strategy.RAW, Strategy.SUMMARIZED):
            return store.snapshot()

        if strategy == Strategy.RETRIEVAL:
            excerpts = index.gather(relevant_topics or []) if index is not None else []
            return [self.build_system_message(excerpts)] + store.recent(self.config.recent_turns)

        raise ValueError(f"Unknown strategy: {strategy}")

    def build_system_message(self, excerpts: list[str]) -> Message:
        return Message(
            role="system",
            content=self.config.system_prompt + self.config.excerpt_separator.join(excerpts),
        )
