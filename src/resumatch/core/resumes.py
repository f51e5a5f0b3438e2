from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import PurePath

from sqlalchemy.orm import Session

from resumatch.config import Settings, get_settings
from resumatch.core.resume_text import extract_text
from resumatch.core.storage import FileStorage
from resumatch.db.documents import DocumentStore
from resumatch.db.models import Resume
from resumatch.db.repositories import Repository
from resumatch.errors import ValidationError
from resumatch.llm.router import LLMRouter
from resumatch.types import ResumeAnalysis

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UploadedResume:
    resume: Resume
    analysis: ResumeAnalysis


class ResumeService:
    def __init__(
        self,
        session: Session,
        documents: DocumentStore,
        *,
        llm: LLMRouter | None = None,
        settings: Settings | None = None,
        storage: FileStorage | None = None,
    ):
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.documents = documents
        self.llm = llm or LLMRouter(self.settings)
        self.storage = storage or FileStorage(self.settings.upload_dir)

    def upload(self, *, user_id: str, file_name: str, content_type: str, content: bytes) -> UploadedResume:
        if content_type not in self.settings.resume_allowed_type_list:
            raise ValidationError("Invalid file type. Only PDF, DOCX and plain text resumes are allowed.")
        if not content:
            raise ValidationError("No resume file provided")
        if len(content) > self.settings.resume_max_bytes:
            raise ValidationError(f"File size exceeds the {self.settings.resume_max_bytes} byte limit")

        resume_id = str(uuid.uuid4())
        extension = PurePath(file_name).suffix.lower()
        file_path = f"{user_id}/{resume_id}{extension}"
        self.storage.save(file_path, content)

        resume: Resume | None = None
        try:
            resume_text = extract_text(content, content_type)
            analysis = self.llm.analyze_resume(resume_text)
            resume = self.repo.create_resume(
                resume_id=resume_id,
                user_id=user_id,
                file_name=file_name,
                file_path=file_path,
                file_url=f"/api/resumes/{resume_id}/file",
                file_type=content_type,
                file_size=len(content),
                extracted_text=resume_text,
                status="analyzed",
            )
            stored = self.documents.save_resume_analysis(resume_id=resume_id, user_id=user_id, analysis=analysis)
        except Exception:
            logger.warning("Resume upload failed; removing stored file %s", file_path)
            if resume is not None:
                self.repo.delete_resume(resume_id)
            self.storage.delete(file_path)
            raise

        logger.info("Resume uploaded resume_id=%s user_id=%s skills=%d", resume_id, user_id, len(stored.skills))
        return UploadedResume(resume=resume, analysis=stored)

    def delete(self, resume: Resume) -> None:
        if not self.storage.delete(resume.file_path):
            logger.warning("Resume file already missing resume_id=%s path=%s", resume.id, resume.file_path)
        self.repo.delete_resume(resume.id)
        self.documents.delete_resume_analysis(resume.id)
        self.documents.delete_match_results(resume_id=resume.id)
