"""Logging helpers for the vibeedit pipeline, service and CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping

_LOGGER_NAME = "vibeedit"
_CONSOLE_FORMAT = "[vibeedit] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger under the vibeedit hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class ProjectLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the project (and user) a request belongs to."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = self.extra or {}
        project = extra.get("project_id") or "-"
        user = extra.get("user_id")
        prefix = f"[{project}/{user}]" if user else f"[{project}]"
        return f"{prefix} {msg}", kwargs


def project_logger(
    logger: logging.Logger, project_id: str | None, user_id: str | None = None
) -> ProjectLogAdapter:
    """Bind request identifiers to ``logger`` for the lifetime of one submission."""
    return ProjectLogAdapter(logger, {"project_id": project_id, "user_id": user_id})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console (and optional file) handlers on the vibeedit logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI or app start-up does not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    handlers: list[logging.Handler] = [console]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


__all__ = ["ProjectLogAdapter", "configure_logging", "get_logger", "project_logger"]
