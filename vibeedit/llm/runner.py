"""Client for an OpenAI-compatible chat-completions generation service."""

from __future__ import annotations

import ipaddress
import json
import os
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from ..errors import FailedPreconditionError

_AUTO = object()


@dataclass
class LLMRequest:
    """A single sampling request sent to the generation service."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    candidate_count: int
    base_url: Optional[str]
    api_key: Optional[str]
    request_timeout: Optional[float]


class LLMRunner:
    """Executes prompts against the configured generation service."""

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    ENV_MODEL_KEYS = ("VIBEEDIT_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("VIBEEDIT_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("VIBEEDIT_LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None | object = _AUTO,
        api_key: str | None | object = _AUTO,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 60.0,
        transport: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.model = model or _first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.base_url = self._resolve_base_url(base_url)
        self.api_key = (
            _first_env_value(self.ENV_API_KEY_KEYS) if api_key is _AUTO else api_key
        )
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._transport = transport or self._http_transport

    def run(
        self,
        prompt: str,
        *,
        system: str | None = None,
        temperature: Optional[float] = None,
        model: str | None = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Send ``prompt`` with a single-candidate sampling config and return the text."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=model or self.model,
            temperature=temperature if temperature is not None else self.temperature,
            max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
            candidate_count=1,
            base_url=self.base_url,
            api_key=self.api_key,  # type: ignore[arg-type]
            request_timeout=self.request_timeout,
        )
        return self._transport(request)

    @staticmethod
    def _http_transport(request: LLMRequest) -> str:
        if not request.base_url:
            raise FailedPreconditionError("Generation service base_url is not configured.")
        if not request.api_key and not _is_local_url(request.base_url):
            raise FailedPreconditionError(
                "Generation service API key is not configured. Set VIBEEDIT_LLM_API_KEY."
            )
        endpoint = f"{request.base_url}/chat/completions"
        payload: dict[str, object] = {
            "model": request.model,
            "messages": _build_messages(request.system, request.prompt),
            "n": request.candidate_count,
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"
        http_request = Request(
            endpoint,
            data=json.dumps(payload).encode("utf-8"),
            headers=headers,
            method="POST",
        )

        try:
            with urlopen(http_request, timeout=request.request_timeout or 60.0) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on remote service
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise RuntimeError(
                f"Generation service failed with status {exc.code}: {message}"
            ) from exc
        except URLError as exc:  # pragma: no cover - depends on remote service
            raise RuntimeError(f"Generation service unreachable: {exc.reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise RuntimeError("Generation service returned invalid JSON") from exc

        content = _extract_content(response_payload)
        if not content:
            raise RuntimeError("Generation service returned an empty response")
        return content.strip()

    def _resolve_base_url(self, base_url: str | None | object) -> str | None:
        if base_url is None:
            return None
        if base_url is _AUTO:
            base_url = _first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        return str(base_url).rstrip("/")


def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
    messages: list[dict[str, str]] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages


def _extract_content(payload: object) -> str:
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    text = first.get("text")
    return text if isinstance(text, str) else ""


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


def _is_local_url(url: str) -> bool:
    host = urlparse(url).hostname
    if host is None:
        return False
    lowered = host.lower()
    if lowered in {"localhost", "0.0.0.0", "model-runner.docker.internal"}:
        return True
    if lowered.endswith(".local") or lowered.endswith(".localdomain"):
        return True
    try:
        return ipaddress.ip_address(lowered).is_loopback
    except ValueError:
        return False


__all__ = ["LLMRequest", "LLMRunner"]
