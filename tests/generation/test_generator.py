"""Tests for the edit generator's retry and accounting behaviour."""

from __future__ import annotations

import math

from vibeedit.errors import FailedPreconditionError
from vibeedit.generation import EditGenerator, count_changed_lines, summarize
from vibeedit.models import EditContext, Intent, Section
from tests._fixtures.pipeline import HERO_DIFF, RecordingSleep, ScriptedRunner

INTENT = Intent(intent_type="content_edit", needs_clarification=False, target="hero")
CONTEXT = EditContext(
    components=[Section(name="Hero", content='<section class="hero"><h1>Welcome</h1></section>')],
    constraints=["preserve_exports"],
)


def _generator(runner: ScriptedRunner, sleep: RecordingSleep, **kwargs) -> EditGenerator:
    return EditGenerator(runner, sleep=sleep, **kwargs)


def test_generate_returns_diff_with_accounting(runner: ScriptedRunner) -> None:
    response = f"```diff\n{HERO_DIFF}```"
    runner.responses.append(response)
    sleep = RecordingSleep()

    result = _generator(runner, sleep, cost_per_1k_tokens=0.02).generate(
        INTENT, CONTEXT, "Change the headline"
    )

    assert result.success is True
    assert result.diff == HERO_DIFF.strip()
    assert result.retry_count == 0
    assert result.summary == "content edit to hero (2 lines changed)"
    expected_tokens = math.ceil((len(runner.calls[0]["prompt"]) + len(response)) / 4)
    assert result.token_count == expected_tokens
    assert math.isclose(result.cost, expected_tokens / 1000 * 0.02)
    assert result.latency_ms >= 0
    assert runner.calls[0]["temperature"] == 0.3
    assert sleep.delays == []


def test_generate_retries_with_linear_backoff_until_success(runner: ScriptedRunner) -> None:
    runner.responses.extend([RuntimeError("timeout"), "```\n```", HERO_DIFF])
    sleep = RecordingSleep()

    result = _generator(runner, sleep, max_retries=2, base_delay=1.0).generate(
        INTENT, CONTEXT, "Change the headline"
    )

    assert result.success is True
    assert result.retry_count == 2
    assert len(runner.calls) == 3
    assert sleep.delays == [1.0, 2.0]


def test_generate_gives_up_after_retry_budget(runner: ScriptedRunner) -> None:
    runner.responses.extend([RuntimeError("boom 1"), RuntimeError("boom 2"), RuntimeError("boom 3")])
    sleep = RecordingSleep()

    result = _generator(runner, sleep, max_retries=2, base_delay=0.5).generate(
        INTENT, CONTEXT, "Change the headline"
    )

    assert result.success is False
    assert result.error == "boom 3"
    assert result.error_code == "generation_failure"
    assert result.retry_count == 2
    assert len(runner.calls) == 3
    assert sleep.delays == [0.5, 1.0]


def test_generate_per_call_budget_overrides_default(runner: ScriptedRunner) -> None:
    runner.responses.extend([RuntimeError("boom"), HERO_DIFF])
    sleep = RecordingSleep()

    result = _generator(runner, sleep, max_retries=3).generate(
        INTENT, CONTEXT, "Change the headline", max_retries=0
    )

    assert result.success is False
    assert len(runner.calls) == 1


def test_generate_does_not_retry_missing_configuration(runner: ScriptedRunner) -> None:
    runner.responses.extend([FailedPreconditionError("API key is not configured"), HERO_DIFF])
    sleep = RecordingSleep()

    result = _generator(runner, sleep).generate(INTENT, CONTEXT, "Change the headline")

    assert result.success is False
    assert result.error_code == "failed_precondition"
    assert len(runner.calls) == 1
    assert sleep.delays == []


def test_generate_passes_asset_urls_into_prompt(runner: ScriptedRunner) -> None:
    runner.responses.append(HERO_DIFF)
    intent = Intent(
        intent_type="add_logo", needs_clarification=False, requires_asset=True, asset_type="logo"
    )

    _generator(runner, RecordingSleep()).generate(
        intent, CONTEXT, "Add the logo", {"logo": "https://cdn.example.com/logo.svg"}
    )

    assert "- logo: https://cdn.example.com/logo.svg" in runner.calls[0]["prompt"]


def test_count_changed_lines_ignores_file_headers() -> None:
    assert count_changed_lines(HERO_DIFF) == 2
    assert count_changed_lines("@@ -1 +1,2 @@\n a\n+b\n+c") == 2


def test_summarize_omits_missing_target() -> None:
    intent = Intent(intent_type="fix_bug", needs_clarification=False)

    assert summarize(intent, "@@ -1 +1 @@\n-a\n+b") == "fix bug (2 lines changed)"
