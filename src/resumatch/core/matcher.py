from __future__ import annotations

import logging
from collections.abc import Iterator

from sqlalchemy.orm import Session

from resumatch.config import Settings, get_settings
from resumatch.db.documents import DocumentStore
from resumatch.db.models import Job
from resumatch.db.repositories import Repository
from resumatch.errors import InternalError, NotFoundError
from resumatch.llm.router import LLMRouter
from resumatch.types import JobListing, JobMatch, MatchResult, ResumeImprovements

logger = logging.getLogger(__name__)


def job_listing_from_row(job: Job) -> JobListing:
    return JobListing(
        id=job.id,
        title=job.title,
        company=job.company,
        location=job.location,
        type=job.type,
        description=job.description,
        requirements=job.requirements,
        skills=list(job.skills_json or []),
    )


def chunked(items: list[Job], size: int) -> Iterator[list[Job]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class MatchOrchestrator:
    def __init__(
        self,
        session: Session,
        documents: DocumentStore,
        *,
        llm: LLMRouter | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.documents = documents
        self.llm = llm or LLMRouter(self.settings)

    def request_matches(self, resume_id: str, job_ids: list[str] | None = None) -> list[MatchResult]:
        """Score a resume against jobs and store one result per (resume, job) pair.

        ``job_ids=None`` means every stored job. Jobs go to the AI service in
        batches of ``match_batch_size``; each batch is written before the next
        is sent, so repeating a failed request only redoes the missing work.
        """
        analysis = self.documents.get_resume_analysis(resume_id)
        if analysis is None:
            raise NotFoundError("Resume analysis not found")

        jobs = self.repo.list_jobs() if job_ids is None else self.repo.get_jobs_by_ids(job_ids)
        if not jobs:
            raise NotFoundError("No jobs found with the provided IDs")

        logger.info(
            "Matching resume_id=%s against %d jobs batch_size=%d",
            resume_id,
            len(jobs),
            self.settings.match_batch_size,
        )
        for batch in chunked(jobs, self.settings.match_batch_size):
            matches = self.llm.match_resume_to_jobs(analysis, [job_listing_from_row(job) for job in batch])
            accepted = self._accept_matches(resume_id, batch, matches)
            try:
                self.documents.upsert_match_results(resume_id, accepted)
            except InternalError:
                logger.exception(
                    "Computed matches were not stored resume_id=%s job_ids=%s; request can be repeated",
                    resume_id,
                    [match.job_id for match in accepted],
                )
                raise

        return self.documents.list_match_results(resume_id, job_ids=[job.id for job in jobs])

    def list_matches(self, resume_id: str) -> list[MatchResult]:
        return self.documents.list_match_results(resume_id)

    def suggest_improvements(self, resume_id: str, job_id: str) -> ResumeImprovements:
        resume = self.repo.get_resume(resume_id)
        if resume is None or not resume.extracted_text:
            raise NotFoundError("Resume not found")

        job = self.repo.get_job(job_id)
        if job is None:
            raise NotFoundError("Job not found")

        job_description = "\n\n".join(
            part for part in [job.title, job.description, job.requirements] if part
        )
        return self.llm.generate_resume_improvements(resume.extracted_text, job_description)

    @staticmethod
    def _accept_matches(resume_id: str, batch: list[Job], matches: list[JobMatch]) -> list[JobMatch]:
        expected = {job.id for job in batch}
        accepted: dict[str, JobMatch] = {}
        for match in matches:
            if match.job_id not in expected:
                logger.warning("Dropping match for unknown job_id=%s resume_id=%s", match.job_id, resume_id)
                continue
            if match.job_id in accepted:
                continue
            accepted[match.job_id] = match

        missing = expected - accepted.keys()
        if missing:
            logger.warning("AI service returned no score for resume_id=%s job_ids=%s", resume_id, sorted(missing))
        return list(accepted.values())
