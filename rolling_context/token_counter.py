"""Token counting utilities."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

FALLBACK_ENCODING = "cl100k_base"


def estimate_tokens(text: str) -> int:
    """Rough estimate: ~4 chars per token."""
    return len(text) // 4


def create_token_counter(mode: str = "tiktoken", model: str = "gpt-4") -> Callable[[str], int]:
    """Factory for token counters.

    Modes:
        "tiktoken" - exact count with the model's encoding (cl100k_base for
                     models tiktoken does not know, e.g. local ones)
        "estimate" - len(text) // 4 (zero deps)
        "callable:module.path:func" - custom callable
    """
    if mode == "estimate":
        return estimate_tokens

    if mode == "tiktoken":
        import tiktoken
        try:
            enc = tiktoken.encoding_for_model(model)
        except KeyError:
            logger.info(f"No tiktoken encoding for model {model!r}, using {FALLBACK_ENCODING}")
            enc = tiktoken.get_encoding(FALLBACK_ENCODING)
        return lambda text: len(enc.encode(text))

    if mode.startswith("callable:"):
        # Format: callable:module.path:func_name
        parts = mode[len("callable:"):].rsplit(":", 1)
        if len(parts) != 2:
            raise ValueError(f"Invalid callable spec: {mode}. Expected callable:module:func")
        module_path, func_name = parts
        import importlib
        mod = importlib.import_module(module_path)
        return getattr(mod, func_name)

    raise ValueError(f"Unknown token counter mode: {mode}")
