from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from resumatch.api.deps import get_current_user, get_db, get_documents
from resumatch.db.documents import DocumentStore
from resumatch.db.models import Profile
from resumatch.db.repositories import Repository

router = APIRouter(tags=["web"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


@router.get("/", response_class=HTMLResponse)
def dashboard(
    request: Request,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    repo = Repository(db)
    resumes = repo.list_resumes(user.id) if user.user_type == "job_seeker" else []
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "user": user,
            "jobs": repo.list_jobs(status="active", limit=20),
            "resumes": resumes,
        },
    )


@router.get("/resumes/{resume_id}/matches", response_class=HTMLResponse)
def resume_matches(
    resume_id: str,
    request: Request,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
) -> HTMLResponse:
    repo = Repository(db)
    resume = repo.get_resume(resume_id)
    if resume is None or (resume.user_id != user.id and user.user_type != "recruiter"):
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"message": "Resume not found"},
            status_code=404,
        )

    matches = documents.list_match_results(resume_id)
    jobs = {job.id: job for job in repo.get_jobs_by_ids([match.job_id for match in matches])}
    rows = [{"match": match, "job": jobs.get(match.job_id)} for match in matches]
    return templates.TemplateResponse(
        request,
        "matches.html",
        {"user": user, "resume": resume, "rows": rows},
    )
