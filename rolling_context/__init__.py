"""rolling-context: token-budgeted working memory for multi-turn chat agents."""

from .config import load_config
from .engine import ConversationEngine
from .types import (
    CompactionOutcome,
    CompletionService,
    ContextStats,
    Message,
    OverflowPolicy,
    Role,
    RollingContextConfig,
    Strategy,
    Turn,
)

__version__ = "0.1.0"

__all__ = [
    "ConversationEngine",
    "load_config",
    "CompactionOutcome",
    "CompletionService",
    "ContextStats",
    "Message",
    "OverflowPolicy",
    "Role",
    "RollingContextConfig",
    "Strategy",
    "Turn",
]
