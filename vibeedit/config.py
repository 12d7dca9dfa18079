"""Configuration loading for vibeedit (.vibeedit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".vibeedit.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Generation service settings."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: Optional[float] = None
    max_tokens: Optional[int] = None
    classifier_model: Optional[str] = None
    classifier_temperature: float = 0.1
    editor_model: Optional[str] = None
    editor_temperature: float = 0.3


@dataclass
class GenerationConfig:
    """Retry and pricing policy for diff generation."""

    max_retries: int = 2
    retry_base_delay: float = 1.0
    cost_per_1k_tokens: float = 0.01


@dataclass
class StoreConfig:
    """Where indexes and ledger records live; ``path=None`` keeps them in memory."""

    path: Optional[Path] = None


@dataclass
class LedgerConfig:
    """History defaults and audit behaviour."""

    history_limit: int = 20
    error_log_limit: int = 50
    record_all_outcomes: bool = False


@dataclass
class ConcurrencyConfig:
    """Same-project submission guard."""

    project_lock: bool = False


@dataclass
class VibeEditConfig:
    """Represents the settings defined in .vibeedit.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    concurrency: ConcurrencyConfig = field(default_factory=ConcurrencyConfig)


def load_config(config_path: Path) -> VibeEditConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return VibeEditConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        classifier_model=_as_str(llm_data.get("classifier_model")),
        classifier_temperature=_as_float(llm_data.get("classifier_temperature"), 0.1),
        editor_model=_as_str(llm_data.get("editor_model")),
        editor_temperature=_as_float(llm_data.get("editor_temperature"), 0.3),
    )

    generation_data = _as_dict(data.get("generation"))
    generation = GenerationConfig(
        max_retries=max(0, _as_int(generation_data.get("max_retries"), 2)),
        retry_base_delay=max(0.0, _as_float(generation_data.get("retry_base_delay"), 1.0)),
        cost_per_1k_tokens=_as_float(generation_data.get("cost_per_1k_tokens"), 0.01),
    )

    store_data = _as_dict(data.get("store"))
    store_path = _as_str(store_data.get("path"))
    store = StoreConfig(path=(root / store_path) if store_path else None)

    ledger_data = _as_dict(data.get("ledger"))
    ledger = LedgerConfig(
        history_limit=max(1, _as_int(ledger_data.get("history_limit"), 20)),
        error_log_limit=max(1, _as_int(ledger_data.get("error_log_limit"), 50)),
        record_all_outcomes=_as_bool(ledger_data.get("record_all_outcomes")),
    )

    concurrency_data = _as_dict(data.get("concurrency"))
    concurrency = ConcurrencyConfig(project_lock=_as_bool(concurrency_data.get("project_lock")))

    return VibeEditConfig(
        root=root,
        llm=llm,
        generation=generation,
        store=store,
        ledger=ledger,
        concurrency=concurrency,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any, default: Optional[float] = None) -> Any:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _as_int(value: Any, default: Optional[int] = None) -> Any:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1", "on"}
    return False


__all__ = [
    "CONFIG_FILENAME",
    "ConcurrencyConfig",
    "ConfigError",
    "GenerationConfig",
    "LLMConfig",
    "LedgerConfig",
    "StoreConfig",
    "VibeEditConfig",
    "load_config",
]
