"""TopicAnatomizer: splits a turn into topic-labelled excerpts."""

from __future__ import annotations

import logging

from ..types import (
    CompletionService,
    ContentTooLongError,
    ResponseParseError,
    TopicConfig,
)
from .response_parsing import parse_topic_excerpts
from .topic_index import TopicIndex

logger = logging.getLogger(__name__)

ANATOMIZE_PROMPT = """\
Go through the following message and split it into smaller parts based on the different topics it covers. \
Your result should be a JSON object where the keys are the topics and the values are an array of strings \
representing the corresponding excerpts from the message. You can ignore any irrelevant details.

You can use the following topics as a reference: {known_topics}

Message:
"{content}"
"""


class TopicAnatomizer:
    """Decompose content via the completion service and merge into the index.

    Known topic names go into the prompt so related excerpts land under an
    existing topic instead of a near-duplicate one.
    """

    def __init__(
        self,
        llm: CompletionService,
        index: TopicIndex,
        config: TopicConfig | None = None,
    ) -> None:
        self.llm = llm
        self.index = index
        self.config = config or TopicConfig()

    @property
    def content_limit(self) -> int:
        # Prompt, content and the structured reply must all fit the model window
        return self.config.model_limit // 3

    def anatomize(self, token_count: int, content: str) -> dict[str, list[str]]:
        """Decompose *content* and merge it. Returns the merged mapping.

        Raises ContentTooLongError before any service call when the content
        is over ``content_limit``. Unparseable responses are retried up to
        ``max_attempts`` extra times, then dropped with an empty result.
        """
        if token_count > self.content_limit:
            raise ContentTooLongError(token_count, self.content_limit)

        attempts = 1 + self.config.max_attempts
        max_tokens = max(token_count * 2, self.config.min_response_tokens)

        for attempt in range(attempts):
            prompt = ANATOMIZE_PROMPT.format(
                known_topics=", ".join(self.index.topic_names()),
                content=content,
            )
            response = self.llm.complete(
                messages=[{"role": "system", "content": prompt}],
                max_tokens=max_tokens,
            )
            try:
                topics = parse_topic_excerpts(response or "{}")
            except ResponseParseError as e:
                logger.warning(
                    f"Failed to parse topic decomposition (attempt {attempt + 1}/{attempts}): {e}"
                )
                continue

            added = self.index.merge(topics)
            logger.debug(f"Merged {added} excerpts across {len(topics)} topics")
            return topics

        return {}
