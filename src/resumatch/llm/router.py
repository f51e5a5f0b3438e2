from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from resumatch.config import Settings, get_settings
from resumatch.errors import ParseError, UpstreamError
from resumatch.llm.prompts import IMPROVEMENTS_PROMPT, MATCH_PROMPT, RESUME_ANALYSIS_PROMPT
from resumatch.llm.providers import BaseProvider, ProviderPool
from resumatch.types import JobListing, JobMatch, ResumeAnalysis, ResumeImprovements

logger = logging.getLogger(__name__)


class LLMRouter:
    """Client for the external AI service.

    Each operation renders one prompt, asks the configured provider for a
    single completion and validates the JSON it returns. Nothing is retried:
    ``UpstreamError`` and ``ParseError`` reach the caller as raised.
    """

    def __init__(self, settings: Settings | None = None, provider: BaseProvider | None = None):
        self.settings = settings or get_settings()
        self.pool = ProviderPool(self.settings)
        self._provider = provider

    def analyze_resume(self, resume_text: str) -> ResumeAnalysis:
        prompt = RESUME_ANALYSIS_PROMPT.format(
            resume_text=resume_text[: self.settings.resume_text_max_chars]
        )
        data = self._call_json(prompt)
        if not isinstance(data, dict):
            raise ParseError("Resume analysis must be a JSON object")

        data.pop("resume_id", None)
        try:
            return ResumeAnalysis.model_validate(data)
        except PydanticValidationError as exc:
            logger.warning("Invalid structured resume analysis output: %s", exc.error_count())
            raise ParseError("Resume analysis does not match the expected shape") from exc

    def match_resume_to_jobs(self, analysis: ResumeAnalysis, jobs: list[JobListing]) -> list[JobMatch]:
        prompt = MATCH_PROMPT.format(
            resume_analysis_json=analysis.model_dump_json(exclude={"resume_id"}),
            jobs_json=json.dumps([job.model_dump() for job in jobs], ensure_ascii=True),
        )
        data = self._call_json(prompt)
        if isinstance(data, dict) and isinstance(data.get("matches"), list):
            data = data["matches"]
        if not isinstance(data, list):
            raise ParseError("Match results must be a JSON array")

        matches: list[JobMatch] = []
        for raw in data:
            try:
                matches.append(JobMatch.model_validate(raw))
            except PydanticValidationError as exc:
                logger.warning("Invalid match entry from AI service: %s", raw)
                raise ParseError("Match result does not match the expected shape") from exc
        return matches

    def generate_resume_improvements(self, resume_text: str, job_description: str) -> ResumeImprovements:
        prompt = IMPROVEMENTS_PROMPT.format(
            resume_text=resume_text[: self.settings.resume_text_max_chars],
            job_description=job_description,
        )
        data = self._call_json(prompt)
        if not isinstance(data, dict):
            raise ParseError("Resume improvements must be a JSON object")

        try:
            return ResumeImprovements.model_validate(data)
        except PydanticValidationError as exc:
            raise ParseError("Resume improvements do not match the expected shape") from exc

    def provider(self) -> BaseProvider:
        if self._provider is not None:
            return self._provider
        return self.pool.get(self.settings.ai_provider)

    def model_name(self) -> str:
        if self.settings.ai_provider == "openai":
            return self.settings.openai_model
        return self.settings.gemini_model

    def _call_json(self, prompt: str) -> Any:
        provider = self.provider()
        if self._provider is None and not provider.config.api_key:
            raise UpstreamError(f"AI provider {provider.config.name} has no API key configured")

        logger.debug("AI request provider=%s prompt_chars=%d", provider.config.name, len(prompt))
        return provider.complete_json(model=self.model_name(), prompt=prompt)
