"""Tests for configuration loading and validation."""

import json
import tempfile

import pytest
import yaml

from rolling_context.config import load_config, validate_config
from rolling_context.types import OverflowPolicy, Strategy


class TestLoadConfig:
    def test_load_defaults(self):
        config = load_config(config_dict={})
        assert config.version == "0.1"
        assert config.strategy == Strategy.RAW
        assert config.token_counter == "tiktoken"
        assert config.budget.max_tokens == 1000
        assert config.budget.overflow_policy == OverflowPolicy.EVICT
        assert config.compaction.min_summary_tokens == 100
        assert config.topics.model_limit == 8192
        assert config.topics.max_attempts == 0
        assert config.relevance.min_response_tokens == 100
        assert config.assembler.recent_turns == 10
        assert config.reply.max_tokens == 300
        assert config.provider.model == "gpt-4"
        assert config.provider.api_key_env == "OPEN_AI_KEY"

    def test_load_from_dict(self):
        config = load_config(config_dict={
            "strategy": "retrieval",
            "budget": {"max_tokens": 500, "overflow_policy": "keep_last"},
            "topics": {"model_limit": 4096, "max_attempts": 2},
            "assembler": {"recent_turns": 6},
        })
        assert config.strategy == Strategy.RETRIEVAL
        assert config.budget.max_tokens == 500
        assert config.budget.overflow_policy == OverflowPolicy.KEEP_LAST
        assert config.topics.model_limit == 4096
        assert config.topics.max_attempts == 2
        assert config.assembler.recent_turns == 6

    def test_load_from_yaml_file(self):
        raw = {"strategy": "summarized", "budget": {"max_tokens": 800}}
        with tempfile.NamedTemporaryFile(suffix=".yaml", mode="w", delete=False) as f:
            yaml.dump(raw, f)
            f.flush()
            config = load_config(config_path=f.name)
        assert config.strategy == Strategy.SUMMARIZED
        assert config.budget.max_tokens == 800

    def test_load_from_json_file(self, tmp_path):
        path = tmp_path / "rolling-context.json"
        path.write_text(json.dumps({"reply": {"max_tokens": 120}}))
        config = load_config(config_path=path)
        assert config.reply.max_tokens == 120

    def test_missing_explicit_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nope.yaml")

    def test_discovers_config_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "rolling-context.yaml").write_text("strategy: retrieval\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().strategy == Strategy.RETRIEVAL

    def test_invalid_strategy_rejected(self):
        with pytest.raises(ValueError):
            load_config(config_dict={"strategy": "magic"})

    def test_empty_yaml_sections_use_defaults(self, tmp_path):
        path = tmp_path / "rolling-context.yaml"
        path.write_text("strategy: summarized\nbudget:\ntopics:\nreply:\nbackground:\nprovider:\n")
        config = load_config(config_path=path)
        assert config.strategy == Strategy.SUMMARIZED
        assert config.budget.max_tokens == 1000
        assert config.topics.model_limit == 8192
        assert config.reply.max_tokens == 300
        assert config.background.max_workers == 4
        assert config.provider.model == "gpt-4"


class TestValidateConfig:
    def test_defaults_are_valid(self):
        assert validate_config(load_config(config_dict={})) == []

    def test_reports_bad_values(self):
        config = load_config(config_dict={
            "budget": {"max_tokens": 0},
            "topics": {"max_attempts": -1},
            "assembler": {"recent_turns": 0},
        })
        errors = validate_config(config)
        assert any("budget.max_tokens" in e for e in errors)
        assert any("topics.max_attempts" in e for e in errors)
        assert any("assembler.recent_turns" in e for e in errors)
