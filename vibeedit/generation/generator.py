"""Diff-only edit generation with bounded retries."""

from __future__ import annotations

import math
import time
from typing import Callable, Mapping, Optional

from ..errors import FailedPreconditionError, GenerationError
from ..intent import TextGenerator
from ..logging import get_logger
from ..models import EditContext, EditResult, Intent
from ..parsing import extract_diff
from ..prompting import PromptBuilder

DEFAULT_MAX_RETRIES = 2
DEFAULT_BASE_DELAY = 1.0
DEFAULT_COST_PER_1K_TOKENS = 0.01
CHARS_PER_TOKEN = 4


class EditGenerator:
    """Asks the generation service for one unified diff scoped to the selected sections.

    ``generate`` never raises: terminal failures come back as an ``EditResult``
    with ``success=False`` and the last error message.
    """

    def __init__(
        self,
        runner: TextGenerator,
        *,
        prompt_builder: PromptBuilder | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        cost_per_1k_tokens: float = DEFAULT_COST_PER_1K_TOKENS,
        temperature: float = 0.3,
        model: str | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._runner = runner
        self._prompt_builder = prompt_builder or PromptBuilder()
        self.max_retries = max(0, max_retries)
        self.base_delay = max(0.0, base_delay)
        self.cost_per_1k_tokens = cost_per_1k_tokens
        self.temperature = temperature
        self.model = model
        self._sleep = sleep
        self._clock = clock
        self.logger = get_logger("generation")

    def generate(
        self,
        intent: Intent,
        context: EditContext,
        original_prompt: str,
        asset_urls: Mapping[str, str] | None = None,
        *,
        max_retries: Optional[int] = None,
    ) -> EditResult:
        retries_allowed = self.max_retries if max_retries is None else max(0, max_retries)
        request = self._prompt_builder.build_edit_prompt(
            intent, context, original_prompt, asset_urls
        )
        prompt_text = request.full_text
        started = self._clock()
        last_error = "Max retries exceeded"
        retry_count = 0

        for attempt in range(1, retries_allowed + 2):
            try:
                response = self._runner.run(
                    prompt_text, temperature=self.temperature, model=self.model
                )
                parsed = extract_diff(response)
                if not parsed.ok or not parsed.value:
                    raise GenerationError(parsed.reason or "response contains no diff")
            except FailedPreconditionError as exc:
                self.logger.error("Generation service is not configured: %s", exc)
                return self._failure(str(exc), retry_count, started, code=exc.code)
            except Exception as exc:
                last_error = str(exc) or exc.__class__.__name__
                if attempt > retries_allowed:
                    self.logger.warning(
                        "Generation failed after %d attempt(s): %s", attempt, last_error
                    )
                    break
                retry_count += 1
                delay = attempt * self.base_delay
                self.logger.info(
                    "Generation attempt %d/%d failed (%s); retrying in %.1fs",
                    attempt,
                    retries_allowed + 1,
                    last_error,
                    delay,
                )
                if delay:
                    self._sleep(delay)
                continue

            diff = parsed.value
            token_count = math.ceil((len(prompt_text) + len(response)) / CHARS_PER_TOKEN)
            return EditResult(
                success=True,
                diff=diff,
                summary=summarize(intent, diff),
                retry_count=retry_count,
                token_count=token_count,
                cost=token_count / 1000 * self.cost_per_1k_tokens,
                latency_ms=self._elapsed_ms(started),
            )

        return self._failure(last_error, retry_count, started, code=GenerationError.code)

    def _failure(
        self, message: str, retry_count: int, started: float, *, code: str
    ) -> EditResult:
        return EditResult(
            success=False,
            summary="Failed to generate edit",
            retry_count=retry_count,
            latency_ms=self._elapsed_ms(started),
            error=message,
            error_code=code,
        )

    def _elapsed_ms(self, started: float) -> int:
        return int(round((self._clock() - started) * 1000))


def count_changed_lines(diff: str) -> int:
    """Count added and removed lines, ignoring ``---``/``+++`` file headers."""
    changed = 0
    for line in diff.splitlines():
        if line.startswith(("---", "+++")):
            continue
        if line.startswith(("+", "-")):
            changed += 1
    return changed


def summarize(intent: Intent, diff: str) -> str:
    description = intent.intent_type.replace("_", " ")
    target = f" to {intent.target}" if intent.target else ""
    return f"{description}{target} ({count_changed_lines(diff)} lines changed)"


__all__ = ["EditGenerator", "count_changed_lines", "summarize"]
