"""TurnCompactor: rewrites stored turns into shorter summaries."""

from __future__ import annotations

import logging

from ..types import CompactionConfig, CompactionOutcome, CompletionService
from .message_store import MessageStore

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """\
Summarize the following message, cutting out any unnecessary details:

{content}"""


class TurnCompactor:
    """Summarize a single turn and swap it into the store if it got smaller.

    Meant to run off the turn loop. It never coordinates with eviction: the
    store's id-addressed update simply does nothing if the turn is gone by
    the time the summary arrives.
    """

    def __init__(
        self,
        llm: CompletionService,
        store: MessageStore,
        config: CompactionConfig | None = None,
    ) -> None:
        self.llm = llm
        self.store = store
        self.config = config or CompactionConfig()

    def compact(self, turn_id: str, token_count: int, content: str) -> CompactionOutcome:
        """Request a summary of *content* and apply it when strictly smaller."""
        summary = self._request_summary(turn_id, token_count, content)
        if summary is None:
            return CompactionOutcome(
                turn_id=turn_id, applied=False, original_tokens=token_count, reason="failed",
            )
        if not summary:
            logger.warning(f"Empty summary for turn {turn_id}, keeping original")
            return CompactionOutcome(
                turn_id=turn_id, applied=False, original_tokens=token_count, reason="empty",
            )

        summary_tokens = self.store.ledger.count(summary)
        outcome = CompactionOutcome(
            turn_id=turn_id,
            applied=False,
            original_tokens=token_count,
            summary_tokens=summary_tokens,
        )

        if summary_tokens >= token_count:
            logger.debug(
                f"Summary for turn {turn_id} not smaller ({summary_tokens}t >= {token_count}t)"
            )
            outcome.reason = "not_smaller"
            return outcome

        if not self.store.update_content_by_id(turn_id, summary):
            logger.debug(f"Turn {turn_id} evicted before its summary landed")
            outcome.reason = "evicted"
            return outcome

        logger.info(f"Compacted turn {turn_id}: {token_count}t -> {summary_tokens}t")
        outcome.applied = True
        outcome.reason = "applied"
        return outcome

    def _request_summary(self, turn_id: str, token_count: int, content: str) -> str | None:
        messages = [{"role": "system", "content": SUMMARY_PROMPT.format(content=content)}]
        max_tokens = max(token_count, self.config.min_summary_tokens)

        attempts = 1 + self.config.max_attempts
        for attempt in range(attempts):
            try:
                return self.llm.complete(messages=messages, max_tokens=max_tokens).strip()
            except Exception as e:
                logger.warning(
                    f"Summarization failed for turn {turn_id} "
                    f"(attempt {attempt + 1}/{attempts}): {e}"
                )
        return None
