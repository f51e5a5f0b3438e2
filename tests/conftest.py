from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="resumatch-tests-"))
os.environ["APP_ENV"] = "test"
os.environ["DATA_DIR"] = str(_TEST_DATA_DIR)
os.environ["UPLOAD_DIR"] = str(_TEST_DATA_DIR / "uploads")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DATA_DIR / 'resumatch.db'}"
os.environ["DOCUMENT_STORE_URL"] = f"sqlite:///{_TEST_DATA_DIR / 'documents.db'}"
os.environ["AI_PROVIDER"] = "gemini"
os.environ["GEMINI_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from resumatch.api.app import create_app  # noqa: E402
from resumatch.api.deps import get_llm_router  # noqa: E402
from resumatch.config import get_settings  # noqa: E402
from resumatch.db import models  # noqa: E402,F401
from resumatch.db.base import Base  # noqa: E402
from resumatch.db.documents import get_document_store  # noqa: E402
from resumatch.db.session import engine  # noqa: E402
from resumatch.errors import UpstreamError  # noqa: E402
from resumatch.types import (  # noqa: E402
    EducationEntry,
    ExperienceEntry,
    JobListing,
    JobMatch,
    ResumeAnalysis,
    ResumeImprovements,
)


class FakeLLMRouter:
    """Stands in for the AI service; scores every job it is shown."""

    def __init__(self) -> None:
        self.analysis = ResumeAnalysis(
            skills=["Go", "Python"],
            experience=[ExperienceEntry(company="Acme", title="Engineer", duration="3 years", description="APIs")],
            education=[EducationEntry(institution="State U", degree="BSc", field="CS", year="2018")],
        )
        self.improvements = ResumeImprovements(
            skill_suggestions=["Mention SQL"],
            keyword_suggestions=["PostgreSQL"],
        )
        self.scores: dict[str, int] = {}
        self.reason = "Strong overlap in backend skills"
        self.error: Exception | None = None
        self.fail_on_match_call: int | None = None
        self.extra_matches: list[JobMatch] = []
        self.analyzed_texts: list[str] = []
        self.match_calls: list[list[str]] = []

    def analyze_resume(self, resume_text: str) -> ResumeAnalysis:
        self.analyzed_texts.append(resume_text)
        if self.error is not None:
            raise self.error
        return self.analysis.model_copy(deep=True)

    def match_resume_to_jobs(self, analysis: ResumeAnalysis, jobs: list[JobListing]) -> list[JobMatch]:
        self.match_calls.append([job.id for job in jobs])
        if self.error is not None:
            raise self.error
        if self.fail_on_match_call == len(self.match_calls):
            raise UpstreamError("Gemini API error: 503 Service Unavailable", upstream_status=503)
        matches = [
            JobMatch(job_id=job.id, match_score=self.scores.get(job.id, 70), match_reason=self.reason)
            for job in jobs
        ]
        return matches + self.extra_matches

    def generate_resume_improvements(self, resume_text: str, job_description: str) -> ResumeImprovements:
        if self.error is not None:
            raise self.error
        return self.improvements


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    get_document_store().reset()
    shutil.rmtree(get_settings().upload_dir, ignore_errors=True)
    yield


@pytest.fixture()
def fake_llm() -> FakeLLMRouter:
    return FakeLLMRouter()


@pytest.fixture()
def client(fake_llm: FakeLLMRouter) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_llm_router] = lambda: fake_llm
    return TestClient(app)


@pytest.fixture()
def make_profile(client: TestClient) -> Callable[..., dict[str, str]]:
    """Register a profile and return the headers that authenticate as it."""

    def _make(user_id: str, user_type: str = "job_seeker") -> dict[str, str]:
        headers = {"X-User-Id": user_id}
        resp = client.post(
            "/api/profiles",
            json={"email": f"{user_id}@example.com", "full_name": user_id.title(), "user_type": user_type},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        return headers

    return _make


@pytest.fixture()
def make_job(client: TestClient) -> Callable[..., dict]:
    def _make(headers: dict[str, str], **overrides) -> dict:
        payload = {
            "title": "Backend Engineer",
            "company": "Initech",
            "location": "Remote",
            "type": "full_time",
            "description": "Build and run backend services.",
            "requirements": "3+ years with Go and SQL.",
            "skills": ["Go", "SQL"],
        }
        payload.update(overrides)
        resp = client.post("/api/jobs", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture()
def upload_resume(client: TestClient) -> Callable[..., dict]:
    def _upload(headers: dict[str, str], text: str = "Jane Doe\nSkills: Go, Python\n") -> dict:
        resp = client.post(
            "/api/resumes/upload",
            files={"file": ("resume.txt", text.encode("utf-8"), "text/plain")},
            headers=headers,
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _upload
