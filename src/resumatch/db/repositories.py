from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import String, cast, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resumatch.db.models import Application, Job, Profile, Resume
from resumatch.errors import DuplicateApplicationError, ValidationError

logger = logging.getLogger(__name__)

PROFILE_UPDATABLE_FIELDS = frozenset({"full_name", "headline", "location", "bio", "phone"})
JOB_UPDATABLE_FIELDS = frozenset(
    {"title", "company", "location", "type", "description", "requirements", "skills_json", "status"}
)


def escape_like(value: str) -> str:
    """Make ``%`` and ``_`` in user input match literally under ``escape="\\"``."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def new_id() -> str:
    return str(uuid.uuid4())


class Repository:
    def __init__(self, session: Session):
        self.session = session

    # profiles

    def create_profile(
        self,
        *,
        profile_id: str,
        email: str,
        user_type: str,
        full_name: str = "",
    ) -> Profile:
        profile = Profile(id=profile_id, email=email, user_type=user_type, full_name=full_name)
        self.session.add(profile)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ValidationError("A profile with this id or email already exists") from exc
        self.session.refresh(profile)
        return profile

    def get_profile(self, profile_id: str) -> Profile | None:
        return self.session.get(Profile, profile_id)

    def update_profile(self, profile_id: str, values: dict[str, Any]) -> Profile:
        profile = self.session.get(Profile, profile_id)
        if not profile:
            raise ValueError(f"profile {profile_id} not found")

        for key, value in values.items():
            if key in PROFILE_UPDATABLE_FIELDS:
                setattr(profile, key, value)

        self.session.commit()
        self.session.refresh(profile)
        return profile

    # jobs

    def create_job(self, *, recruiter_id: str, values: dict[str, Any]) -> Job:
        job = Job(id=new_id(), recruiter_id=recruiter_id, status="active", **values)
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        return job

    def get_job(self, job_id: str) -> Job | None:
        return self.session.get(Job, job_id)

    def list_jobs(
        self,
        *,
        search: str = "",
        job_type: str = "",
        location: str = "",
        status: str = "",
        limit: int | None = None,
    ) -> list[Job]:
        statement = select(Job)
        if search:
            term = escape_like(search)
            pattern = f"%{term}%"
            statement = statement.where(
                or_(
                    Job.title.ilike(pattern, escape="\\"),
                    Job.description.ilike(pattern, escape="\\"),
                    cast(Job.skills_json, String).ilike(f'%"{term}"%', escape="\\"),
                )
            )
        if job_type:
            statement = statement.where(Job.type == job_type)
        if location:
            statement = statement.where(Job.location.ilike(f"%{escape_like(location)}%", escape="\\"))
        if status:
            statement = statement.where(Job.status == status)

        statement = statement.order_by(Job.created_at.desc())
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.session.scalars(statement).all())

    def get_jobs_by_ids(self, job_ids: list[str]) -> list[Job]:
        if not job_ids:
            return []
        rows = self.session.scalars(select(Job).where(Job.id.in_(job_ids))).all()
        by_id = {row.id: row for row in rows}
        ordered: list[Job] = []
        for job_id in dict.fromkeys(job_ids):
            if job_id in by_id:
                ordered.append(by_id[job_id])
        return ordered

    def list_job_ids_for_recruiter(self, recruiter_id: str) -> list[str]:
        statement = select(Job.id).where(Job.recruiter_id == recruiter_id)
        return list(self.session.scalars(statement).all())

    def update_job(self, job_id: str, values: dict[str, Any]) -> Job:
        job = self.session.get(Job, job_id)
        if not job:
            raise ValueError(f"job {job_id} not found")

        for key, value in values.items():
            if key in JOB_UPDATABLE_FIELDS:
                setattr(job, key, value)

        self.session.commit()
        self.session.refresh(job)
        return job

    def delete_job(self, job_id: str) -> None:
        self.session.execute(delete(Application).where(Application.job_id == job_id))
        self.session.execute(delete(Job).where(Job.id == job_id))
        self.session.commit()

    # resumes

    def create_resume(
        self,
        *,
        resume_id: str,
        user_id: str,
        file_name: str,
        file_path: str,
        file_url: str,
        file_type: str,
        file_size: int,
        extracted_text: str,
        status: str = "uploaded",
    ) -> Resume:
        resume = Resume(
            id=resume_id,
            user_id=user_id,
            file_name=file_name,
            file_path=file_path,
            file_url=file_url,
            file_type=file_type,
            file_size=file_size,
            extracted_text=extracted_text,
            status=status,
        )
        self.session.add(resume)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(resume)
        return resume

    def get_resume(self, resume_id: str) -> Resume | None:
        return self.session.get(Resume, resume_id)

    def list_resumes(self, user_id: str) -> list[Resume]:
        statement = select(Resume).where(Resume.user_id == user_id).order_by(Resume.created_at.desc())
        return list(self.session.scalars(statement).all())

    def delete_resume(self, resume_id: str) -> None:
        self.session.execute(delete(Resume).where(Resume.id == resume_id))
        self.session.commit()

    # applications

    def create_application(
        self,
        *,
        job_id: str,
        user_id: str,
        resume_id: str | None = None,
        cover_letter: str | None = None,
    ) -> Application:
        application = Application(
            id=new_id(),
            job_id=job_id,
            user_id=user_id,
            resume_id=resume_id,
            cover_letter=cover_letter,
            status="pending",
        )
        self.session.add(application)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.info("Duplicate application rejected job_id=%s user_id=%s", job_id, user_id)
            raise DuplicateApplicationError() from exc
        self.session.refresh(application)
        return application

    def get_application(self, application_id: str) -> Application | None:
        return self.session.get(Application, application_id)

    def find_application(self, *, job_id: str, user_id: str) -> Application | None:
        statement = select(Application).where(
            Application.job_id == job_id,
            Application.user_id == user_id,
        )
        return self.session.scalar(statement)

    def list_applications(
        self,
        *,
        job_id: str | None = None,
        user_id: str | None = None,
        job_ids: list[str] | None = None,
    ) -> list[Application]:
        statement = select(Application)
        if job_id:
            statement = statement.where(Application.job_id == job_id)
        if user_id:
            statement = statement.where(Application.user_id == user_id)
        if job_ids is not None:
            statement = statement.where(Application.job_id.in_(job_ids))
        statement = statement.order_by(Application.created_at.desc())
        return list(self.session.scalars(statement).all())

    def update_application_status(self, application_id: str, status: str) -> Application:
        application = self.session.get(Application, application_id)
        if not application:
            raise ValueError(f"application {application_id} not found")
        application.status = status
        self.session.commit()
        self.session.refresh(application)
        return application

    def delete_application(self, application_id: str) -> None:
        self.session.execute(delete(Application).where(Application.id == application_id))
        self.session.commit()
