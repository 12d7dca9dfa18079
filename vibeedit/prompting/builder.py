"""Builds the classification and edit prompts sent to the generation service."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import EditContext, Intent
from .constants import EDIT_SYSTEM_PROMPT, EDIT_TEMPLATE_NAME, INTENT_SYSTEM_PROMPT


@dataclass(frozen=True)
class PromptRequest:
    """A rendered prompt plus the system instruction it was built around."""

    system: str
    prompt: str

    @property
    def full_text(self) -> str:
        """System instruction and body as one prompt string."""
        return f"{self.system}\n\n{self.prompt}"


class PromptBuilder:
    """Renders prompts from the bundled Jinja templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )

    def build_intent_prompt(self, prompt_text: str) -> PromptRequest:
        return PromptRequest(system=INTENT_SYSTEM_PROMPT, prompt=f'User prompt: "{prompt_text}"')

    def build_edit_prompt(
        self,
        intent: Intent,
        context: EditContext,
        original_prompt: str,
        asset_urls: Mapping[str, str] | None = None,
    ) -> PromptRequest:
        template = self._env.get_template(EDIT_TEMPLATE_NAME)
        body = template.render(
            intent_type=_humanize(intent.intent_type),
            target=intent.target or "Not specified",
            original_prompt=original_prompt,
            constraints=[_humanize(constraint) for constraint in context.constraints],
            assets=sorted((asset_urls or {}).items()),
            components=context.components,
        )
        return PromptRequest(system=EDIT_SYSTEM_PROMPT, prompt=body.strip() + "\n")


def _humanize(token: str) -> str:
    return token.replace("_", " ")


__all__ = ["PromptBuilder", "PromptRequest"]
