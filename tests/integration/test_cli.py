import json

from typer.testing import CliRunner

from resumatch.cli.app import app
from resumatch.db.documents import get_document_store
from resumatch.db.repositories import Repository
from resumatch.db.session import SessionLocal
from resumatch.types import JobMatch

runner = CliRunner()


def test_jobs_list_prints_stored_jobs() -> None:
    with SessionLocal() as session:
        repo = Repository(session)
        repo.create_profile(profile_id="rec", email="rec@example.com", user_type="recruiter")
        repo.create_job(
            recruiter_id="rec",
            values={"title": "Backend Engineer", "company": "Initech", "type": "full_time", "skills_json": ["Go"]},
        )

    result = runner.invoke(app, ["jobs", "list", "--search", "backend"])

    assert result.exit_code == 0, result.output
    [job] = json.loads(result.stdout)
    assert job["title"] == "Backend Engineer"
    assert job["skills"] == ["Go"]


def test_match_run_without_analysis_exits_with_error() -> None:
    result = runner.invoke(app, ["match", "run", "--resume-id", "missing"])

    assert result.exit_code == 1
    assert "Resume analysis not found" in result.output


def test_match_list_prints_stored_results() -> None:
    get_document_store().upsert_match_results("r1", [JobMatch(job_id="j1", match_score=64, match_reason="ok")])

    result = runner.invoke(app, ["match", "list", "--resume-id", "r1"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)[0]["match_score"] == 64
