"""BudgetEnforcer: strict FIFO eviction down to a token budget."""

from __future__ import annotations

import logging

from ..types import BudgetConfig, BudgetTooSmallError, OverflowPolicy, Turn
from .message_store import MessageStore

logger = logging.getLogger(__name__)


class BudgetEnforcer:
    """Evict the oldest turns until the store fits ``config.max_tokens``.

    Eviction is oldest-first with no size or importance weighting. The
    ``overflow_policy`` only matters when one turn alone exceeds the budget:

    - EVICT: keep evicting, the store may end up empty
    - KEEP_LAST: the last remaining turn is never evicted
    - RAISE: like KEEP_LAST, then raise BudgetTooSmallError
    """

    def __init__(self, config: BudgetConfig) -> None:
        self.config = config

    @property
    def budget(self) -> int:
        return self.config.max_tokens

    def enforce(self, store: MessageStore) -> list[Turn]:
        """Evict from the head until within budget. Returns evicted turns."""
        evicted: list[Turn] = []
        policy = self.config.overflow_policy

        with store.locked():
            while store.total_tokens > self.budget and len(store) > 0:
                if len(store) == 1 and policy != OverflowPolicy.EVICT:
                    break
                evicted.append(store.evict_front())
            over_budget = len(store) == 1 and store.total_tokens > self.budget
            remaining = store.total_tokens

        if evicted:
            logger.debug(
                f"Budget {self.budget}t: evicted {len(evicted)} turns "
                f"({sum(t.token_count for t in evicted)}t), {remaining}t remain"
            )

        if over_budget:
            logger.warning(
                f"Single remaining turn ({remaining}t) exceeds the {self.budget}t budget"
            )
            if policy == OverflowPolicy.RAISE:
                raise BudgetTooSmallError(self.budget, remaining)

        return evicted
