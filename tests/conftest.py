from __future__ import annotations

import logging
from typing import Iterator

import pytest

from tests._fixtures.pipeline import SAMPLE_HTML, ScriptedRunner


@pytest.fixture
def sample_html() -> str:
    """A small page with Navbar, Hero and Footer sections."""
    return SAMPLE_HTML


@pytest.fixture
def runner() -> ScriptedRunner:
    """Empty scripted runner; tests queue responses on ``runner.responses``."""
    return ScriptedRunner()


@pytest.fixture(autouse=True)
def _isolate_llm_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "VIBEEDIT_LLM_MODEL",
        "OPENAI_MODEL",
        "VIBEEDIT_LLM_BASE_URL",
        "OPENAI_BASE_URL",
        "VIBEEDIT_LLM_API_KEY",
        "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_vibeedit_logger() -> Iterator[None]:
    # configure_logging() in CLI tests installs handlers and turns propagation off.
    yield
    logger = logging.getLogger("vibeedit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
