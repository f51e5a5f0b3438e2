from __future__ import annotations

import json
import re

from fastapi.testclient import TestClient

from resumatch.api.app import create_app
from resumatch.api.deps import get_llm_router
from resumatch.config import Settings
from resumatch.db.documents import get_document_store
from resumatch.llm.providers import BaseProvider, ProviderConfig
from resumatch.llm.router import LLMRouter
from resumatch.types import ModelResponse, ResumeAnalysis

JOB_ID_PATTERN = re.compile(r'"id": "([^"]+)"')


class EchoMatcherProvider(BaseProvider):
    """Scores every job id found in the prompt, with a new reason on each call."""

    def __init__(self) -> None:
        self.config = ProviderConfig(name="echo", base_url="", api_key="", timeout_sec=1)
        self.calls = 0

    def complete_text(self, *, model: str, prompt: str) -> ModelResponse:
        self.calls += 1
        matches = [
            {"jobId": job_id, "matchScore": 82, "matchReason": f"Go overlap, pass {self.calls}"}
            for job_id in JOB_ID_PATTERN.findall(prompt)
        ]
        return ModelResponse(content="```json\n" + json.dumps(matches) + "\n```")


def test_backend_engineer_match_is_stored_once_per_pair() -> None:
    provider = EchoMatcherProvider()
    app = create_app()
    app.dependency_overrides[get_llm_router] = lambda: LLMRouter(settings=Settings(), provider=provider)
    client = TestClient(app)

    recruiter = {"X-User-Id": "rec-1"}
    client.post(
        "/api/profiles",
        json={"email": "rec@example.com", "user_type": "recruiter"},
        headers=recruiter,
    )
    job = client.post(
        "/api/jobs",
        json={
            "title": "Backend Engineer",
            "company": "Initech",
            "location": "Remote",
            "type": "full_time",
            "description": "Services in Go",
            "requirements": "SQL",
            "skills": ["Go", "SQL"],
        },
        headers=recruiter,
    ).json()
    store = get_document_store()
    store.save_resume_analysis(resume_id="r1", user_id="seek-1", analysis=ResumeAnalysis(skills=["Go", "Python"]))

    first = client.post("/api/ai/match", json={"resumeId": "r1", "jobIds": [job["id"]]}, headers=recruiter)
    assert first.status_code == 200
    [result] = first.json()["matches"]
    assert result["resume_id"] == "r1"
    assert result["job_id"] == job["id"]
    assert 0 <= result["match_score"] <= 100

    second = client.post("/api/ai/match", json={"resumeId": "r1", "jobIds": [job["id"]]}, headers=recruiter)
    assert second.status_code == 200
    assert store.count_match_results("r1", job["id"]) == 1
    assert store.list_match_results("r1")[0].match_reason == "Go overlap, pass 2"
    assert provider.calls == 2
