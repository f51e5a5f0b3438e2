from __future__ import annotations

import json
import mimetypes
from pathlib import Path

import typer
import uvicorn

from resumatch.api.app import create_app
from resumatch.config import get_settings
from resumatch.core.matcher import MatchOrchestrator
from resumatch.core.resume_text import extract_text
from resumatch.db.documents import get_document_store
from resumatch.db.init import init_database
from resumatch.db.repositories import Repository
from resumatch.db.session import SessionLocal
from resumatch.errors import ResumatchError
from resumatch.llm.router import LLMRouter
from resumatch.logging_config import configure_logging

app = typer.Typer(help="Resumatch CLI")
jobs_app = typer.Typer(help="Job listing commands")
resume_app = typer.Typer(help="Resume analysis commands")
match_app = typer.Typer(help="Resume to job matching")

app.add_typer(jobs_app, name="jobs")
app.add_typer(resume_app, name="resume")
app.add_typer(match_app, name="match")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _fail(exc: ResumatchError) -> None:
    typer.echo(json.dumps({"ok": False, "error": exc.message}, indent=2), err=True)
    raise typer.Exit(code=1)


@app.command("init")
def init_cmd() -> None:
    """Create data directories and both stores."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@jobs_app.command("list")
def jobs_list(
    search: str = typer.Option("", "--search"),
    limit: int = typer.Option(20, "--limit"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        jobs = repo.list_jobs(search=search, limit=limit)
        typer.echo(
            json.dumps(
                [
                    {
                        "id": job.id,
                        "title": job.title,
                        "company": job.company,
                        "status": job.status,
                        "skills": job.skills_json,
                        "created_at": job.created_at.isoformat() if job.created_at else None,
                    }
                    for job in jobs
                ],
                indent=2,
            )
        )


@resume_app.command("analyze")
def resume_analyze(
    file: Path = typer.Option(..., "--file", exists=True, readable=True),
    resume_id: str = typer.Option("", "--resume-id", help="Store the analysis under this id"),
    user_id: str = typer.Option("", "--user-id"),
) -> None:
    """Extract a resume's text and print its AI analysis; optionally store it."""
    configure_logging()
    ensure_initialized()
    content_type = mimetypes.guess_type(file.name)[0] or "text/plain"
    try:
        text = extract_text(file.read_bytes(), content_type)
        analysis = LLMRouter().analyze_resume(text)
        if resume_id:
            analysis = get_document_store().save_resume_analysis(
                resume_id=resume_id,
                user_id=user_id,
                analysis=analysis,
            )
    except ResumatchError as exc:
        _fail(exc)
    typer.echo(analysis.model_dump_json(indent=2))


@match_app.command("run")
def match_run(
    resume_id: str = typer.Option(..., "--resume-id"),
    job_ids: list[str] = typer.Option(None, "--job-id", help="Repeat to match several jobs; default is all"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        orchestrator = MatchOrchestrator(db, get_document_store())
        try:
            results = orchestrator.request_matches(resume_id, job_ids or None)
        except ResumatchError as exc:
            _fail(exc)
        typer.echo(json.dumps([result.model_dump(mode="json") for result in results], indent=2))


@match_app.command("list")
def match_list(resume_id: str = typer.Option(..., "--resume-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        results = MatchOrchestrator(db, get_document_store()).list_matches(resume_id)
        typer.echo(json.dumps([result.model_dump(mode="json") for result in results], indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
