"""Shared documents, scripted generation doubles and pipeline wiring for tests."""

from __future__ import annotations

import json
from typing import Any, Iterable

from vibeedit.generation import EditGenerator
from vibeedit.intent import IntentClassifier
from vibeedit.orchestrator import EditOrchestrator
from vibeedit.stores import MemoryRecordStore, RecordStore

SAMPLE_HTML = (
    "<!doctype html>\n"
    "<html>\n"
    "<body>\n"
    '<nav class="flex">\n'
    '  <a href="/">Home</a>\n'
    "</nav>\n"
    '<section class="hero bg-white">\n'
    "  <h1>Welcome</h1>\n"
    "  <p>Build faster.</p>\n"
    "</section>\n"
    "<footer>\n"
    "  <p>&copy; 2024 Acme</p>\n"
    "</footer>\n"
    "</body>\n"
    "</html>\n"
)

NAV_ONLY_HTML = (
    "<html>\n"
    "<body>\n"
    "<nav>\n"
    '  <a href="/">Home</a>\n'
    "</nav>\n"
    "<main>\n"
    "  <h1>Welcome</h1>\n"
    "</main>\n"
    "</body>\n"
    "</html>\n"
)

HERO_DIFF = (
    "--- a/index.html\n"
    "+++ b/index.html\n"
    "@@ -7,4 +7,4 @@\n"
    ' <section class="hero bg-white">\n'
    "-  <h1>Welcome</h1>\n"
    "+  <h1>Welcome to Acme</h1>\n"
    "   <p>Build faster.</p>\n"
    " </section>\n"
)

NAV_ONLY_DIFF = (
    "@@ -6,3 +6,3 @@\n"
    " <main>\n"
    "-  <h1>Welcome</h1>\n"
    "+  <h1>Hello there</h1>\n"
    " </main>\n"
)

SCRIPT_DIFF = (
    "@@ -9,1 +9,2 @@\n"
    "   <p>Build faster.</p>\n"
    "+  <script>alert(1)</script>\n"
)

STALE_DIFF = (
    "@@ -7,2 +7,2 @@\n"
    ' <section class="hero bg-white">\n'
    "-  <h1>Goodbye</h1>\n"
    "+  <h1>Hello</h1>\n"
)


def intent_json(**overrides: Any) -> str:
    """Classifier response for a confident hero content edit, with overrides."""
    payload = {
        "intent_type": "content_edit",
        "target": "hero",
        "requires_asset": False,
        "asset_type": None,
        "style_system": "tailwind",
        "scope": "component",
        "risk": "low",
        "needs_clarification": False,
    }
    payload.update(overrides)
    return json.dumps(payload)


class ScriptedRunner:
    """Returns queued responses in order; queued exceptions are raised instead."""

    def __init__(self, responses: Iterable[Any] = ()) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        temperature: float | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> str:
        self.calls.append(
            {"prompt": prompt, "system": system, "temperature": temperature, "model": model}
        )
        if not self.responses:
            raise RuntimeError("no scripted response left")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class RecordingSleep:
    """Captures backoff delays instead of sleeping."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def build_orchestrator(
    runner: ScriptedRunner,
    *,
    store: RecordStore | None = None,
    max_retries: int = 2,
    **kwargs: Any,
) -> EditOrchestrator:
    """Wire a pipeline around ``runner`` with no real backoff delay."""
    return EditOrchestrator(
        store if store is not None else MemoryRecordStore(),
        classifier=IntentClassifier(runner),
        generator=EditGenerator(runner, max_retries=max_retries, sleep=RecordingSleep()),
        **kwargs,
    )


__all__ = [
    "HERO_DIFF",
    "NAV_ONLY_DIFF",
    "NAV_ONLY_HTML",
    "RecordingSleep",
    "SAMPLE_HTML",
    "SCRIPT_DIFF",
    "STALE_DIFF",
    "ScriptedRunner",
    "build_orchestrator",
    "intent_json",
]
