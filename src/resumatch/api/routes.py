from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from resumatch.api.deps import (
    get_current_user,
    get_db,
    get_documents,
    get_identity,
    get_llm_router,
    require_user_type,
)
from resumatch.api.schemas import (
    ApplicantSummary,
    ApplicationCreateRequest,
    ApplicationJobSummary,
    ApplicationResponse,
    ApplicationUpdateRequest,
    ImprovementsRequest,
    JobCreateRequest,
    JobResponse,
    JobUpdateRequest,
    MatchComputeRequest,
    MatchRequest,
    MatchResponse,
    ProfileCreateRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    ResumeResponse,
    ResumeUploadResponse,
)
from resumatch.config import get_settings
from resumatch.core.applications import StatusPolicy
from resumatch.core.matcher import MatchOrchestrator
from resumatch.core.resumes import ResumeService
from resumatch.core.storage import FileStorage
from resumatch.db.documents import DocumentStore
from resumatch.db.models import Application, Job, Profile, Resume
from resumatch.db.repositories import Repository
from resumatch.errors import (
    DuplicateApplicationError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from resumatch.llm.router import LLMRouter
from resumatch.types import ResumeAnalysis, ResumeImprovements

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def _profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        user_type=profile.user_type,
        headline=profile.headline,
        location=profile.location,
        bio=profile.bio,
        phone=profile.phone,
        created_at=_iso(profile.created_at),
    )


def _job_response(job: Job) -> JobResponse:
    return JobResponse(
        id=job.id,
        title=job.title,
        company=job.company,
        location=job.location,
        type=job.type,
        description=job.description,
        requirements=job.requirements,
        skills=list(job.skills_json or []),
        status=job.status,
        recruiter_id=job.recruiter_id,
        created_at=_iso(job.created_at),
        updated_at=_iso(job.updated_at),
    )


def _resume_response(resume: Resume) -> ResumeResponse:
    return ResumeResponse(
        id=resume.id,
        user_id=resume.user_id,
        file_name=resume.file_name,
        file_url=resume.file_url,
        file_type=resume.file_type,
        file_size=resume.file_size,
        status=resume.status,
        created_at=_iso(resume.created_at),
    )


def _application_response(repo: Repository, application: Application) -> ApplicationResponse:
    job = repo.get_job(application.job_id)
    applicant = repo.get_profile(application.user_id)
    return ApplicationResponse(
        id=application.id,
        job_id=application.job_id,
        user_id=application.user_id,
        resume_id=application.resume_id,
        cover_letter=application.cover_letter,
        status=application.status,
        created_at=_iso(application.created_at),
        job=(
            ApplicationJobSummary(
                id=job.id,
                title=job.title,
                company=job.company,
                location=job.location,
                type=job.type,
            )
            if job
            else None
        ),
        applicant=(
            ApplicantSummary(id=applicant.id, full_name=applicant.full_name, email=applicant.email)
            if applicant
            else None
        ),
    )


def _owned_resume(repo: Repository, resume_id: str, user: Profile) -> Resume:
    resume = repo.get_resume(resume_id)
    if resume is None:
        raise NotFoundError("Resume not found")
    if resume.user_id != user.id:
        raise ForbiddenError("You can only access your own resumes")
    return resume


def _check_resume_access(repo: Repository, resume_id: str, user: Profile) -> None:
    resume = repo.get_resume(resume_id)
    if resume is not None and resume.user_id != user.id and user.user_type != "recruiter":
        raise ForbiddenError("You can only match your own resumes")


def _owned_job(repo: Repository, job_id: str, user: Profile) -> Job:
    job = repo.get_job(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    if job.recruiter_id != user.id:
        raise ForbiddenError("You can only modify your own job postings")
    return job


# profiles


@router.post("/profiles", response_model=ProfileResponse, status_code=201)
def create_profile(
    payload: ProfileCreateRequest,
    identity: str = Depends(get_identity),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    repo = Repository(db)
    profile = repo.create_profile(
        profile_id=identity,
        email=payload.email,
        user_type=payload.user_type,
        full_name=payload.full_name,
    )
    return _profile_response(profile)


@router.get("/profile", response_model=ProfileResponse)
def get_profile(user: Profile = Depends(get_current_user)) -> ProfileResponse:
    return _profile_response(user)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    repo = Repository(db)
    profile = repo.update_profile(user.id, payload.model_dump(exclude_none=True))
    return _profile_response(profile)


# resumes


@router.post("/resumes/upload", response_model=ResumeUploadResponse)
def upload_resume(
    file: UploadFile = File(...),
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
    llm: LLMRouter = Depends(get_llm_router),
) -> ResumeUploadResponse:
    require_user_type(user, "job_seeker", "Only job seekers can upload resumes")
    settings = get_settings()
    service = ResumeService(db, documents, llm=llm, settings=settings)
    # one byte past the limit is enough to reject an oversized file
    uploaded = service.upload(
        user_id=user.id,
        file_name=file.filename or "resume",
        content_type=file.content_type or "",
        content=file.file.read(settings.resume_max_bytes + 1),
    )
    return ResumeUploadResponse(
        id=uploaded.resume.id,
        file_name=uploaded.resume.file_name,
        file_url=uploaded.resume.file_url,
        analysis=uploaded.analysis,
    )


@router.get("/resumes", response_model=list[ResumeResponse])
def list_resumes(user: Profile = Depends(get_current_user), db: Session = Depends(get_db)) -> list[ResumeResponse]:
    repo = Repository(db)
    return [_resume_response(row) for row in repo.list_resumes(user.id)]


@router.get("/resumes/{resume_id}/analysis", response_model=ResumeAnalysis)
def get_resume_analysis(
    resume_id: str,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
) -> ResumeAnalysis:
    _owned_resume(Repository(db), resume_id, user)
    analysis = documents.get_resume_analysis(resume_id)
    if analysis is None:
        raise NotFoundError("Resume analysis not found")
    return analysis


@router.get("/resumes/{resume_id}/file")
def download_resume(
    resume_id: str,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FileResponse:
    resume = _owned_resume(Repository(db), resume_id, user)
    path = FileStorage(get_settings().upload_dir).resolve(resume.file_path)
    if not path.is_file():
        raise NotFoundError("Resume file not found")
    return FileResponse(path, media_type=resume.file_type, filename=resume.file_name)


@router.delete("/resumes/{resume_id}")
def delete_resume(
    resume_id: str,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
) -> dict:
    resume = _owned_resume(Repository(db), resume_id, user)
    ResumeService(db, documents).delete(resume)
    return {"success": True}


# matching


@router.post("/ai/match", response_model=MatchResponse)
def match_resume(
    payload: MatchRequest,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
    llm: LLMRouter = Depends(get_llm_router),
) -> MatchResponse:
    _check_resume_access(Repository(db), payload.resume_id, user)
    orchestrator = MatchOrchestrator(db, documents, llm=llm)
    matches = orchestrator.request_matches(payload.resume_id, payload.job_ids)
    return MatchResponse(resume_id=payload.resume_id, match_count=len(matches), matches=matches)


@router.post("/ai/improvements", response_model=ResumeImprovements, response_model_by_alias=False)
def suggest_improvements(
    payload: ImprovementsRequest,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
    llm: LLMRouter = Depends(get_llm_router),
) -> ResumeImprovements:
    _owned_resume(Repository(db), payload.resume_id, user)
    orchestrator = MatchOrchestrator(db, documents, llm=llm)
    return orchestrator.suggest_improvements(payload.resume_id, payload.job_id)


@router.get("/matches", response_model=MatchResponse)
def list_matches(
    resume_id: str | None = Query(default=None, alias="resumeId"),
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
) -> MatchResponse:
    if not resume_id:
        raise ValidationError("Resume ID is required")
    _check_resume_access(Repository(db), resume_id, user)
    matches = MatchOrchestrator(db, documents).list_matches(resume_id)
    return MatchResponse(resume_id=resume_id, match_count=len(matches), matches=matches)


@router.post("/matches", response_model=MatchResponse)
def compute_matches(
    payload: MatchComputeRequest,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
    llm: LLMRouter = Depends(get_llm_router),
) -> MatchResponse:
    _check_resume_access(Repository(db), payload.resume_id, user)
    orchestrator = MatchOrchestrator(db, documents, llm=llm)
    matches = orchestrator.request_matches(payload.resume_id, payload.job_ids)
    return MatchResponse(resume_id=payload.resume_id, match_count=len(matches), matches=matches)


# jobs


@router.get("/jobs", response_model=list[JobResponse])
def list_jobs(
    search: str = "",
    type: str = "",
    location: str = "",
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[JobResponse]:
    repo = Repository(db)
    rows = repo.list_jobs(search=search.strip(), job_type=type.strip(), location=location.strip())
    return [_job_response(row) for row in rows]


@router.post("/jobs", response_model=JobResponse, status_code=201)
def create_job(
    payload: JobCreateRequest,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> JobResponse:
    require_user_type(user, "recruiter", "Only recruiters can post jobs")
    values = payload.model_dump(exclude={"skills"})
    values["skills_json"] = payload.skills
    job = Repository(db).create_job(recruiter_id=user.id, values=values)
    logger.info("Job created job_id=%s recruiter_id=%s", job.id, user.id)
    return _job_response(job)


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(
    job_id: str,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> JobResponse:
    job = Repository(db).get_job(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return _job_response(job)


@router.put("/jobs/{job_id}", response_model=JobResponse)
def update_job(
    job_id: str,
    payload: JobUpdateRequest,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> JobResponse:
    repo = Repository(db)
    _owned_job(repo, job_id, user)
    values = payload.model_dump(exclude_unset=True, exclude={"skills"})
    if payload.skills is not None:
        values["skills_json"] = payload.skills
    values = {key: value for key, value in values.items() if value is not None}
    return _job_response(repo.update_job(job_id, values))


@router.delete("/jobs/{job_id}")
def delete_job(
    job_id: str,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
) -> dict:
    repo = Repository(db)
    _owned_job(repo, job_id, user)
    repo.delete_job(job_id)
    documents.delete_match_results(job_id=job_id)
    logger.info("Job deleted job_id=%s recruiter_id=%s", job_id, user.id)
    return {"success": True}


# applications


@router.get("/applications", response_model=list[ApplicationResponse])
def list_applications(
    job_id: str | None = None,
    user_id: str | None = None,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ApplicationResponse]:
    repo = Repository(db)

    if job_id or user_id:
        if job_id and user.user_type == "recruiter":
            job = repo.get_job(job_id)
            if job is not None and job.recruiter_id != user.id:
                raise ForbiddenError("You can only view applications for your own job postings")
        if user.user_type == "job_seeker" and user_id != user.id:
            raise ForbiddenError("You can only view your own applications")
        rows = repo.list_applications(job_id=job_id, user_id=user_id)
    elif user.user_type == "job_seeker":
        rows = repo.list_applications(user_id=user.id)
    else:
        job_ids = repo.list_job_ids_for_recruiter(user.id)
        if not job_ids:
            return []
        rows = repo.list_applications(job_ids=job_ids)

    return [_application_response(repo, row) for row in rows]


@router.post("/applications", response_model=ApplicationResponse, status_code=201)
def create_application(
    payload: ApplicationCreateRequest,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    require_user_type(user, "job_seeker", "Only job seekers can apply for jobs")
    repo = Repository(db)

    job = repo.get_job(payload.job_id)
    if job is None:
        raise NotFoundError("Job not found")
    if job.status != "active":
        raise ValidationError("This job is no longer accepting applications")
    if payload.resume_id:
        resume = repo.get_resume(payload.resume_id)
        if resume is None or resume.user_id != user.id:
            raise ValidationError("Resume not found")
    if repo.find_application(job_id=job.id, user_id=user.id) is not None:
        raise DuplicateApplicationError()

    application = repo.create_application(
        job_id=job.id,
        user_id=user.id,
        resume_id=payload.resume_id,
        cover_letter=payload.cover_letter,
    )
    return _application_response(repo, application)


@router.put("/applications", response_model=ApplicationResponse)
def update_application(
    payload: ApplicationUpdateRequest,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    require_user_type(user, "recruiter", "Only recruiters can update application status")
    repo = Repository(db)
    policy = StatusPolicy(get_settings().application_status_policy)

    application = repo.get_application(payload.id)
    if application is None:
        raise NotFoundError("Application not found")

    job = repo.get_job(application.job_id)
    if job is None or job.recruiter_id != user.id:
        raise ForbiddenError("You can only update applications for your own job postings")

    policy.check(application.status, payload.status)
    updated = repo.update_application_status(application.id, payload.status)
    logger.info("Application status changed id=%s status=%s", updated.id, updated.status)
    return _application_response(repo, updated)


@router.delete("/applications")
def withdraw_application(
    id: str | None = None,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    if not id:
        raise ValidationError("Application ID is required")
    repo = Repository(db)

    application = repo.get_application(id)
    if application is None:
        raise NotFoundError("Application not found")
    if application.user_id != user.id:
        raise ForbiddenError("You can only withdraw your own applications")

    repo.delete_application(id)
    return {"message": "Application withdrawn successfully"}
