"""All dataclasses, Protocols, errors, and type aliases for rolling-context."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Messages & Turns
# ---------------------------------------------------------------------------

class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass
class Message:
    """Outbound role/content pair, the only shape the completion service sees."""
    role: str
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class Turn:
    """One stored message. ``token_count`` always matches ``content``."""
    role: Role
    content: str
    token_count: int
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_message(self) -> Message:
        return Message(role=self.role.value, content=self.content)


class Strategy(str, Enum):
    """How the outbound request is built from stored context."""
    RAW = "raw"                 # full live window, budget eviction only
    SUMMARIZED = "summarized"   # full live window, turns compacted in background
    RETRIEVAL = "retrieval"     # topic excerpts + most recent turns


class OverflowPolicy(str, Enum):
    """What to do when a single turn is larger than the whole budget."""
    EVICT = "evict"           # evict unconditionally, even to an empty store
    KEEP_LAST = "keep_last"   # never evict the last remaining turn
    RAISE = "raise"           # keep the last turn, raise BudgetTooSmallError


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class CompactionOutcome:
    turn_id: str
    applied: bool
    original_tokens: int
    summary_tokens: int = 0
    reason: str = ""  # "applied", "not_smaller", "evicted", "empty", "failed"


@dataclass
class ContextStats:
    strategy: str
    turn_count: int
    total_tokens: int
    budget_tokens: int
    topic_count: int = 0
    excerpt_count: int = 0
    pending_tasks: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TokenizerError(Exception):
    """The tokenizer failed on a piece of text."""


class EmptyStoreError(Exception):
    """Eviction was requested from an empty message store."""


class ContentTooLongError(Exception):
    def __init__(self, token_count: int, content_limit: int):
        super().__init__(
            f"The message is {token_count} tokens, which is too long to process: "
            f"please reduce it to {content_limit} tokens or less."
        )
        self.token_count = token_count
        self.content_limit = content_limit


class ResponseParseError(Exception):
    """A structured completion-service response failed to parse or validate."""


class BudgetTooSmallError(Exception):
    def __init__(self, budget_tokens: int, turn_tokens: int):
        super().__init__(
            f"Token budget {budget_tokens} cannot hold a single turn of {turn_tokens} tokens"
        )
        self.budget_tokens = budget_tokens
        self.turn_tokens = turn_tokens


class LLMProviderError(Exception):
    def __init__(self, message: str, provider: str, status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Completion service
# ---------------------------------------------------------------------------

@runtime_checkable
class CompletionService(Protocol):
    def complete(self, messages: list[dict], max_tokens: int) -> str: ...

    def stream(self, messages: list[dict], max_tokens: int) -> Iterator[str]: ...


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class BudgetConfig:
    max_tokens: int = 1000
    overflow_policy: OverflowPolicy = OverflowPolicy.EVICT


@dataclass
class CompactionConfig:
    min_summary_tokens: int = 100  # floor for the summary request's output ceiling
    max_attempts: int = 0          # extra attempts after a failed service call


@dataclass
class TopicConfig:
    model_limit: int = 8192
    min_response_tokens: int = 300
    max_attempts: int = 0  # extra attempts after an unparseable decomposition


@dataclass
class RelevanceConfig:
    min_response_tokens: int = 100


DEFAULT_RETRIEVAL_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. Answer the user's questions "
    "based on the following excerpts: "
)


@dataclass
class AssemblerConfig:
    recent_turns: int = 10
    system_prompt: str = DEFAULT_RETRIEVAL_SYSTEM_PROMPT
    excerpt_separator: str = "; "


@dataclass
class ReplyConfig:
    max_tokens: int = 300


@dataclass
class BackgroundConfig:
    max_workers: int = 4


@dataclass
class ProviderConfig:
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4"
    api_key_env: str = "OPEN_AI_KEY"
    organization_env: str = "OPEN_AI_ORG"
    temperature: float | None = None
    timeout: float = 120.0


@dataclass
class RollingContextConfig:
    version: str = "0.1"
    strategy: Strategy = Strategy.RAW
    token_counter: str = "tiktoken"
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    compaction: CompactionConfig = field(default_factory=CompactionConfig)
    topics: TopicConfig = field(default_factory=TopicConfig)
    relevance: RelevanceConfig = field(default_factory=RelevanceConfig)
    assembler: AssemblerConfig = field(default_factory=AssemblerConfig)
    reply: ReplyConfig = field(default_factory=ReplyConfig)
    background: BackgroundConfig = field(default_factory=BackgroundConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
