"""Classifies free-text instructions into structured intents."""

from __future__ import annotations

from typing import Optional, Protocol

from ..errors import ClassificationError, FailedPreconditionError
from ..logging import get_logger
from ..models import INTENT_TYPES, Intent
from ..parsing import parse_json_object
from ..prompting import PromptBuilder

REQUIRED_KEYS = ("intent_type", "needs_clarification")


class TextGenerator(Protocol):
    """Anything that turns a prompt into text, such as ``LLMRunner``."""

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        temperature: Optional[float] = None,
        model: str | None = None,
    ) -> str:
        ...


class IntentClassifier:
    """Single-shot, low-temperature classification; failures are never retried here."""

    def __init__(
        self,
        runner: TextGenerator,
        *,
        prompt_builder: PromptBuilder | None = None,
        temperature: float = 0.1,
        model: str | None = None,
    ) -> None:
        self._runner = runner
        self._prompt_builder = prompt_builder or PromptBuilder()
        self.temperature = temperature
        self.model = model
        self.logger = get_logger("intent")

    def classify(self, prompt_text: str) -> Intent:
        request = self._prompt_builder.build_intent_prompt(prompt_text)
        try:
            response = self._runner.run(
                request.prompt,
                system=request.system,
                temperature=self.temperature,
                model=self.model,
            )
        except FailedPreconditionError:
            raise
        except Exception as exc:
            raise ClassificationError(f"Intent service unavailable: {exc}") from exc

        parsed = parse_json_object(response)
        if not parsed.ok or parsed.value is None:
            raise ClassificationError(f"Invalid response from intent classifier: {parsed.reason}")
        payload = parsed.value

        missing = [key for key in REQUIRED_KEYS if payload.get(key) is None]
        if missing:
            raise ClassificationError(
                f"Incomplete intent classification: missing {', '.join(missing)}"
            )
        if payload["intent_type"] not in INTENT_TYPES:
            raise ClassificationError(f"Unknown intent_type {payload['intent_type']!r}")
        if not isinstance(payload["needs_clarification"], bool):
            raise ClassificationError("needs_clarification must be a boolean")

        intent = Intent.from_dict(payload)
        self.logger.debug(
            "Classified prompt as %s (target=%s, risk=%s, clarify=%s)",
            intent.intent_type,
            intent.target,
            intent.risk,
            intent.needs_clarification,
        )
        return intent


__all__ = ["IntentClassifier", "TextGenerator"]
