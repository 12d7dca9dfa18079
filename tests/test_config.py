"""Tests for vibeedit.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from vibeedit.config import ConfigError, VibeEditConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, VibeEditConfig)
    assert config.root == tmp_path.resolve()
    assert config.llm.model is None
    assert config.llm.classifier_temperature == 0.1
    assert config.llm.editor_temperature == 0.3
    assert config.generation.max_retries == 2
    assert config.generation.retry_base_delay == 1.0
    assert config.generation.cost_per_1k_tokens == 0.01
    assert config.store.path is None
    assert config.ledger.history_limit == 20
    assert config.ledger.error_log_limit == 50
    assert config.ledger.record_all_outcomes is False
    assert config.concurrency.project_lock is False


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".vibeedit.yml"
    config_file.write_text(
        """
llm:
  model: "gpt-4o"
  base_url: "http://localhost:12434/engines/v1"
  api_key: "test-key"
  request_timeout: 30
  max_tokens: 2048
  classifier_model: "gpt-4o-mini"
  classifier_temperature: 0.0
  editor_temperature: 0.4
generation:
  max_retries: 4
  retry_base_delay: 0.5
  cost_per_1k_tokens: 0.02
store:
  path: ".vibeedit/data"
ledger:
  history_limit: 10
  error_log_limit: 5
  record_all_outcomes: true
concurrency:
  project_lock: yes
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.llm.model == "gpt-4o"
    assert config.llm.base_url == "http://localhost:12434/engines/v1"
    assert config.llm.api_key == "test-key"
    assert config.llm.request_timeout == 30.0
    assert config.llm.max_tokens == 2048
    assert config.llm.classifier_model == "gpt-4o-mini"
    assert config.llm.classifier_temperature == 0.0
    assert config.llm.editor_temperature == 0.4
    assert config.generation.max_retries == 4
    assert config.generation.retry_base_delay == 0.5
    assert config.generation.cost_per_1k_tokens == 0.02
    assert config.store.path == tmp_path.resolve() / ".vibeedit/data"
    assert config.ledger.history_limit == 10
    assert config.ledger.error_log_limit == 5
    assert config.ledger.record_all_outcomes is True
    assert config.concurrency.project_lock is True


def test_load_config_clamps_negative_retry_budget(tmp_path: Path) -> None:
    (tmp_path / ".vibeedit.yml").write_text("generation:\n  max_retries: -3\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.generation.max_retries == 0


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / ".vibeedit.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).generation.max_retries == 2


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".vibeedit.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_wraps_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".vibeedit.yml").write_text("llm: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)
