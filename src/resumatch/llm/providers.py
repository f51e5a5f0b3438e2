from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import requests
from openai import OpenAI

from resumatch.config import Settings
from resumatch.errors import ParseError, UpstreamError
from resumatch.types import ModelResponse

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderConfig:
    name: str
    base_url: str
    api_key: str
    timeout_sec: int


class BaseProvider:
    config: ProviderConfig

    def complete_text(self, *, model: str, prompt: str) -> ModelResponse:
        raise NotImplementedError

    def complete_json(self, *, model: str, prompt: str) -> Any:
        text_response = self.complete_text(model=model, prompt=prompt)
        return parse_json(text_response.content)


class GeminiProvider(BaseProvider):
    """Google Generative Language ``generateContent`` over plain HTTP."""

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.session = requests.Session()

    def complete_text(self, *, model: str, prompt: str) -> ModelResponse:
        url = f"{self.config.base_url.rstrip('/')}/models/{model}:generateContent"
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            response = self.session.post(
                url,
                json=body,
                headers={"x-goog-api-key": self.config.api_key},
                timeout=float(self.config.timeout_sec),
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"Gemini API request failed: {exc.__class__.__name__}") from exc

        if not response.ok:
            logger.warning("Gemini API error status=%s model=%s", response.status_code, model)
            raise UpstreamError(
                f"Gemini API error: {response.status_code} {response.reason}",
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Gemini API returned a non-JSON body") from exc

        text = extract_candidate_text(data)
        raw = dict(data) if isinstance(data, dict) else {"raw": data}
        raw["api_path"] = "generate_content"
        return ModelResponse(content=text, raw=raw)


def extract_candidate_text(data: Any) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise UpstreamError("Gemini API response has no candidate text") from exc
    if not isinstance(text, str):
        raise UpstreamError("Gemini API candidate text is not a string")
    return text


class LLMProvider(BaseProvider):
    """OpenAI-compatible endpoint, selected with ``AI_PROVIDER=openai``.

    Tries the Responses API first. Endpoints that answer 404 there (most
    self-hosted OpenAI-compatible servers) get the prompt through Chat
    Completions instead.
    """

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=float(config.timeout_sec),
        )

    def complete_text(self, *, model: str, prompt: str) -> ModelResponse:
        try:
            response = self.client.responses.create(model=model, input=prompt)
        except Exception as exc:
            if getattr(exc, "status_code", None) != 404:
                raise self._upstream_error(exc) from exc
            logger.warning("Responses API not found at %s; using chat completions", self.config.base_url)
        else:
            return ModelResponse(content=response.output_text or "", raw={"api_path": "responses"})

        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as exc:
            raise self._upstream_error(exc) from exc

        content = response.choices[0].message.content if response.choices else None
        return ModelResponse(content=content or "", raw={"api_path": "chat_completions"})

    def _upstream_error(self, exc: Exception) -> UpstreamError:
        status_code = getattr(exc, "status_code", None)
        detail = f" {status_code}" if status_code else ""
        return UpstreamError(
            f"{self.config.name} API error:{detail} {exc.__class__.__name__}",
            upstream_status=status_code,
        )


def parse_json(content: str) -> Any:
    """Parse a completion as JSON, unwrapping a Markdown code fence if present."""
    candidate = content.strip()
    if not candidate:
        raise ParseError("AI service returned an empty response")

    if "```" in candidate:
        parts = candidate.split("```")
        for part in parts:
            part = part.strip()
            if part.startswith("json"):
                part = part[4:].strip()
            if (part.startswith("{") and part.endswith("}")) or (part.startswith("[") and part.endswith("]")):
                candidate = part
                break

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse JSON model output")
        raise ParseError("AI service response is not valid JSON") from exc


class ProviderPool:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._gemini: GeminiProvider | None = None
        self._openai: LLMProvider | None = None

    def get(self, name: str) -> BaseProvider:
        if name == "gemini":
            return self.gemini()
        if name == "openai":
            return self.openai()
        raise ValueError(f"unsupported AI provider '{name}'")

    def gemini(self) -> GeminiProvider:
        if self._gemini is None:
            self._gemini = GeminiProvider(
                ProviderConfig(
                    name="gemini",
                    base_url=self.settings.gemini_base_url,
                    api_key=self.settings.gemini_api_key,
                    timeout_sec=self.settings.gemini_timeout_sec,
                )
            )
        return self._gemini

    def openai(self) -> LLMProvider:
        if self._openai is None:
            self._openai = LLMProvider(
                ProviderConfig(
                    name="openai",
                    base_url=self.settings.openai_base_url,
                    api_key=self.settings.openai_api_key,
                    timeout_sec=self.settings.openai_timeout_sec,
                )
            )
        return self._openai
