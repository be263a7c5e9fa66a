"""Configuration loading, validation, and defaults."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .types import (
    AssemblerConfig,
    BackgroundConfig,
    BudgetConfig,
    CompactionConfig,
    DEFAULT_RETRIEVAL_SYSTEM_PROMPT,
    OverflowPolicy,
    ProviderConfig,
    RelevanceConfig,
    ReplyConfig,
    RollingContextConfig,
    Strategy,
    TopicConfig,
)

CONFIG_FILENAMES = [
    "rolling-context.yaml",
    "rolling-context.yml",
    "rolling-context.json",
]


def _discover_config() -> Path | None:
    """Search CWD then parent dirs up to home for a config file."""
    cwd = Path.cwd()
    home = Path.home()
    search = cwd
    while True:
        for name in CONFIG_FILENAMES:
            candidate = search / name
            if candidate.is_file():
                return candidate
        if search == home or search == search.parent:
            break
        search = search.parent
    return None


def _build_config(raw: dict[str, Any]) -> RollingContextConfig:
    """Build a RollingContextConfig from a raw dict."""
    budget_raw = raw.get("budget") or {}
    budget = BudgetConfig(
        max_tokens=budget_raw.get("max_tokens", 1000),
        overflow_policy=OverflowPolicy(budget_raw.get("overflow_policy", "evict")),
    )

    compaction_raw = raw.get("compaction") or {}
    compaction = CompactionConfig(
        min_summary_tokens=compaction_raw.get("min_summary_tokens", 100),
        max_attempts=compaction_raw.get("max_attempts", 0),
    )

    topics_raw = raw.get("topics") or {}
    topics = TopicConfig(
        model_limit=topics_raw.get("model_limit", 8192),
        min_response_tokens=topics_raw.get("min_response_tokens", 300),
        max_attempts=topics_raw.get("max_attempts", 0),
    )

    relevance_raw = raw.get("relevance") or {}
    relevance = RelevanceConfig(
        min_response_tokens=relevance_raw.get("min_response_tokens", 100),
    )

    assembler_raw = raw.get("assembler") or {}
    assembler = AssemblerConfig(
        recent_turns=assembler_raw.get("recent_turns", 10),
        system_prompt=assembler_raw.get("system_prompt", DEFAULT_RETRIEVAL_SYSTEM_PROMPT),
        excerpt_separator=assembler_raw.get("excerpt_separator", "; "),
    )

    provider_raw = raw.get("provider") or {}
    provider = ProviderConfig(
        base_url=provider_raw.get("base_url", "https://api.openai.com/v1"),
        model=provider_raw.get("model", "gpt-4"),
        api_key_env=provider_raw.get("api_key_env", "OPEN_AI_KEY"),
        organization_env=provider_raw.get("organization_env", "OPEN_AI_ORG"),
        temperature=provider_raw.get("temperature"),
        timeout=provider_raw.get("timeout", 120.0),
    )

    return RollingContextConfig(
        version=str(raw.get("version", "0.1")),
        strategy=Strategy(raw.get("strategy", "raw")),
        token_counter=raw.get("token_counter", "tiktoken"),
        budget=budget,
        compaction=compaction,
        topics=topics,
        relevance=relevance,
        assembler=assembler,
        reply=ReplyConfig(max_tokens=(raw.get("reply") or {}).get("max_tokens", 300)),
        background=BackgroundConfig(
            max_workers=(raw.get("background") or {}).get("max_workers", 4),
        ),
        provider=provider,
    )


def validate_config(config: RollingContextConfig) -> list[str]:
    """Validate a config. Returns list of error strings (empty = valid)."""
    errors: list[str] = []

    if config.budget.max_tokens < 1:
        errors.append("budget.max_tokens must be >= 1")

    if config.topics.model_limit < 3:
        errors.append("topics.model_limit must be >= 3")

    if config.compaction.max_attempts < 0:
        errors.append("compaction.max_attempts must be >= 0")

    if config.topics.max_attempts < 0:
        errors.append("topics.max_attempts must be >= 0")

    if config.assembler.recent_turns < 1:
        errors.append("assembler.recent_turns must be >= 1")

    if config.reply.max_tokens < 1:
        errors.append("reply.max_tokens must be >= 1")

    if config.background.max_workers < 1:
        errors.append("background.max_workers must be >= 1")

    return errors


def load_config(
    config_path: str | Path | None = None,
    config_dict: dict | None = None,
) -> RollingContextConfig:
    """Load config from dict, explicit path, or auto-discover."""
    if config_dict is not None:
        return _build_config(config_dict)

    if config_path is not None:
        path = Path(config_path)
    else:
        path = _discover_config()

    if path is None:
        # Return defaults
        return _build_config({})

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text) or {}

    return _build_config(raw)
