"""Presets: ready-to-use configs, one per retention strategy."""

from __future__ import annotations

from dataclasses import dataclass

import yaml


@dataclass
class Preset:
    name: str
    description: str
    config_dict: dict

    @property
    def template(self) -> str:
        header = f"# rolling-context config ({self.name}): {self.description}\n"
        return header + yaml.safe_dump(self.config_dict, sort_keys=False)


_PROVIDER = {
    "base_url": "https://api.openai.com/v1",
    "model": "gpt-4",
    "api_key_env": "OPEN_AI_KEY",
    "organization_env": "OPEN_AI_ORG",
}

_PRESETS: dict[str, Preset] = {
    "raw": Preset(
        name="raw",
        description="Full history, oldest turns evicted past a small budget",
        config_dict={
            "version": "0.1",
            "strategy": "raw",
            "token_counter": "tiktoken",
            "budget": {"max_tokens": 100, "overflow_policy": "evict"},
            "reply": {"max_tokens": 300},
            "provider": dict(_PROVIDER),
        },
    ),
    "summarized": Preset(
        name="summarized",
        description="Full history, every turn compacted into a summary in the background",
        config_dict={
            "version": "0.1",
            "strategy": "summarized",
            "token_counter": "tiktoken",
            "budget": {"max_tokens": 1000, "overflow_policy": "evict"},
            "compaction": {"min_summary_tokens": 100, "max_attempts": 0},
            "reply": {"max_tokens": 300},
            "background": {"max_workers": 4},
            "provider": dict(_PROVIDER),
        },
    ),
    "retrieval": Preset(
        name="retrieval",
        description="Topic excerpts relevant to the question plus the last 10 turns",
        config_dict={
            "version": "0.1",
            "strategy": "retrieval",
            "token_counter": "tiktoken",
            "budget": {"max_tokens": 1000, "overflow_policy": "evict"},
            "topics": {"model_limit": 8192, "min_response_tokens": 300, "max_attempts": 0},
            "relevance": {"min_response_tokens": 100},
            "assembler": {"recent_turns": 10, "excerpt_separator": "; "},
            "reply": {"max_tokens": 300},
            "background": {"max_workers": 4},
            "provider": dict(_PROVIDER),
        },
    ),
}


def get_preset(name: str) -> Preset | None:
    """Return a preset by name, or None if not found."""
    return _PRESETS.get(name)


def list_presets() -> list[Preset]:
    return list(_PRESETS.values())
