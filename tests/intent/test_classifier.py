"""Tests for the intent classifier."""

from __future__ import annotations

import pytest

from vibeedit.errors import ClassificationError, FailedPreconditionError
from vibeedit.intent import IntentClassifier
from vibeedit.prompting.constants import INTENT_SYSTEM_PROMPT
from tests._fixtures.pipeline import ScriptedRunner, intent_json


def test_classify_parses_fenced_json_with_low_temperature(runner: ScriptedRunner) -> None:
    runner.responses.append("```json\n" + intent_json(target="navbar", risk="high") + "\n```")

    intent = IntentClassifier(runner).classify("Make the navbar blue")

    assert intent.intent_type == "content_edit"
    assert intent.target == "navbar"
    assert intent.risk == "high"
    assert intent.needs_clarification is False
    call = runner.calls[0]
    assert call["prompt"] == 'User prompt: "Make the navbar blue"'
    assert call["system"] == INTENT_SYSTEM_PROMPT
    assert call["temperature"] == 0.1


def test_classify_returns_clarification_intents(runner: ScriptedRunner) -> None:
    runner.responses.append(intent_json(intent_type="update_styles", target=None, needs_clarification=True))

    intent = IntentClassifier(runner).classify("make it pop")

    assert intent.needs_clarification is True


@pytest.mark.parametrize(
    "response",
    [
        "I am not sure what you mean.",
        '{"intent_type": "content_edit"}',
        intent_json(intent_type="delete_everything"),
        intent_json(needs_clarification="no"),
    ],
)
def test_classify_rejects_malformed_responses(runner: ScriptedRunner, response: str) -> None:
    runner.responses.append(response)

    with pytest.raises(ClassificationError):
        IntentClassifier(runner).classify("change something")


def test_classify_wraps_service_failures_without_retrying(runner: ScriptedRunner) -> None:
    runner.responses.extend([RuntimeError("503 Service Unavailable"), intent_json()])

    with pytest.raises(ClassificationError, match="503"):
        IntentClassifier(runner).classify("change the hero")

    assert len(runner.calls) == 1


def test_classify_propagates_missing_configuration(runner: ScriptedRunner) -> None:
    runner.responses.append(FailedPreconditionError("API key is not configured"))

    with pytest.raises(FailedPreconditionError):
        IntentClassifier(runner).classify("change the hero")
