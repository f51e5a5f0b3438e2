from __future__ import annotations

import pytest
import requests

from resumatch.errors import ParseError, UpstreamError
from resumatch.llm.providers import GeminiProvider, ProviderConfig


class FakeResponse:
    def __init__(self, *, status_code: int = 200, payload=None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, result):
        self.result = result
        self.calls: list[dict] = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _provider(result) -> tuple[GeminiProvider, FakeSession]:
    provider = GeminiProvider(
        ProviderConfig(
            name="gemini",
            base_url="https://gemini.test/v1beta/",
            api_key="secret-key",
            timeout_sec=5,
        )
    )
    session = FakeSession(result)
    provider.session = session
    return provider, session


def test_complete_text_posts_single_prompt_and_reads_first_candidate() -> None:
    provider, session = _provider(FakeResponse(payload=_candidate("HELLO")))

    result = provider.complete_text(model="gemini-pro", prompt="ping")

    assert result.content == "HELLO"
    assert result.raw["api_path"] == "generate_content"
    call = session.calls[0]
    assert call["url"] == "https://gemini.test/v1beta/models/gemini-pro:generateContent"
    assert call["json"] == {"contents": [{"parts": [{"text": "ping"}]}]}
    assert call["headers"] == {"x-goog-api-key": "secret-key"}
    assert "secret-key" not in call["url"]


def test_non_success_status_is_upstream_error_with_status() -> None:
    provider, _ = _provider(FakeResponse(status_code=429, reason="Too Many Requests", payload={}))

    with pytest.raises(UpstreamError) as exc_info:
        provider.complete_text(model="gemini-pro", prompt="ping")

    assert exc_info.value.upstream_status == 429
    assert "429" in exc_info.value.message
    assert not isinstance(exc_info.value, ParseError)


def test_transport_failure_is_upstream_error() -> None:
    provider, _ = _provider(requests.ConnectionError("connection refused"))

    with pytest.raises(UpstreamError, match="ConnectionError"):
        provider.complete_text(model="gemini-pro", prompt="ping")


def test_envelope_without_candidates_is_upstream_error() -> None:
    provider, _ = _provider(FakeResponse(payload={"promptFeedback": {"blockReason": "SAFETY"}}))

    with pytest.raises(UpstreamError, match="no candidate text"):
        provider.complete_text(model="gemini-pro", prompt="ping")


def test_non_json_body_is_upstream_error() -> None:
    provider, _ = _provider(FakeResponse(payload=ValueError("not json")))

    with pytest.raises(UpstreamError, match="non-JSON"):
        provider.complete_text(model="gemini-pro", prompt="ping")


def test_complete_json_parses_fenced_candidate() -> None:
    provider, _ = _provider(FakeResponse(payload=_candidate('```json\n{"skills": ["Go"]}\n```')))

    assert provider.complete_json(model="gemini-pro", prompt="ping") == {"skills": ["Go"]}
