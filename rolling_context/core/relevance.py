"""RelevanceSelector: asks the completion service which topics matter for a query."""

from __future__ import annotations

import json
import logging
from typing import Callable

from ..types import CompletionService, RelevanceConfig, ResponseParseError
from .response_parsing import parse_string_list

logger = logging.getLogger(__name__)

RELEVANCE_PROMPT = """\
Which of the following topics are relevant to the user's question? Give your answer as a JSON array of strings, \
where each string is a topic. If none of the topics are relevant, you can respond with an empty array. \
It is better to include more topics than necessary than to exclude relevant topics.

Topics:
"{topics}"

Question:
"{question}"
"""


class RelevanceSelector:
    def __init__(
        self,
        llm: CompletionService,
        token_counter: Callable[[str], int],
        config: RelevanceConfig | None = None,
    ) -> None:
        self.llm = llm
        self.token_counter = token_counter
        self.config = config or RelevanceConfig()

    def select_relevant(self, query: str, topic_names: list[str]) -> list[str]:
        """Topic names the service considers relevant to *query*.

        Never fails: no topics, a service error, or a malformed answer all
        yield an empty list.
        """
        if not topic_names:
            return []

        tokens = self.token_counter(json.dumps(topic_names))
        prompt = RELEVANCE_PROMPT.format(topics=", ".join(topic_names), question=query)

        try:
            response = self.llm.complete(
                messages=[{"role": "system", "content": prompt}],
                max_tokens=max(tokens * 2, self.config.min_response_tokens),
            )
        except Exception as e:
            logger.warning(f"Relevance lookup failed: {e}")
            return []

        try:
            return parse_string_list(response or "[]")
        except ResponseParseError as e:
            logger.error(f"Failed to parse relevant topics: {e}")
            return []
