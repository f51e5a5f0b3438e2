"""Document store for unstructured AI output.

Resume analyses and match results live in their own database, separate from the
relational store, and are joined to it only by resume id and job id. The store
owns one engine per process: it is created lazily on first use and handed to
request handlers through ``resumatch.api.deps.get_documents``.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint, create_engine, delete, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from resumatch.config import get_settings
from resumatch.db.base import utcnow
from resumatch.errors import InternalError
from resumatch.types import JobMatch, MatchResult, ResumeAnalysis

logger = logging.getLogger(__name__)


class DocumentBase(DeclarativeBase):
    pass


class ResumeAnalysisDocument(DocumentBase):
    __tablename__ = "resume_analyses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resume_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    analysis: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class MatchResultDocument(DocumentBase):
    __tablename__ = "match_results"
    __table_args__ = (UniqueConstraint("resume_id", "job_id", name="uq_match_resume_job"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resume_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    job_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    match_score: Mapped[int] = mapped_column(Integer, nullable=False)
    match_reason: Mapped[str] = mapped_column(Text, default="", nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


def _dialect_insert(dialect_name: str):
    if dialect_name == "sqlite":
        return sqlite_insert
    if dialect_name == "postgresql":
        return postgresql_insert
    raise ValueError(f"document store does not support the '{dialect_name}' dialect")


def _to_result(row: MatchResultDocument) -> MatchResult:
    return MatchResult(
        resume_id=row.resume_id,
        job_id=row.job_id,
        match_score=row.match_score,
        match_reason=row.match_reason,
        updated_at=row.updated_at,
    )


class DocumentStore:
    def __init__(self, url: str):
        self.url = url
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker[Session] | None = None
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        self._ensure_initialized()
        assert self._engine is not None
        return self._engine

    def session(self) -> Session:
        self._ensure_initialized()
        assert self._sessionmaker is not None
        return self._sessionmaker()

    def _ensure_initialized(self) -> None:
        if self._sessionmaker is not None:
            return
        with self._lock:
            if self._sessionmaker is not None:
                return
            connect_args = {"check_same_thread": False} if self.url.startswith("sqlite") else {}
            engine = create_engine(self.url, connect_args=connect_args, future=True)
            DocumentBase.metadata.create_all(bind=engine)
            self._engine = engine
            self._sessionmaker = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
            logger.info("Document store initialized url=%s", engine.url.render_as_string(hide_password=True))

    def reset(self) -> None:
        DocumentBase.metadata.drop_all(bind=self.engine)
        DocumentBase.metadata.create_all(bind=self.engine)

    # resume analyses

    def save_resume_analysis(self, *, resume_id: str, user_id: str, analysis: ResumeAnalysis) -> ResumeAnalysis:
        payload = analysis.model_dump(exclude={"resume_id"})
        with self.session() as session:
            session.add(ResumeAnalysisDocument(resume_id=resume_id, user_id=user_id, analysis=payload))
            try:
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Failed to store resume analysis resume_id=%s", resume_id)
                raise InternalError("Failed to store resume analysis") from exc
        return ResumeAnalysis.model_validate({**payload, "resume_id": resume_id})

    def get_resume_analysis(self, resume_id: str) -> ResumeAnalysis | None:
        with self.session() as session:
            row = session.scalar(
                select(ResumeAnalysisDocument).where(ResumeAnalysisDocument.resume_id == resume_id)
            )
            if row is None:
                return None
            return ResumeAnalysis.model_validate({**(row.analysis or {}), "resume_id": row.resume_id})

    def delete_resume_analysis(self, resume_id: str) -> None:
        with self.session() as session:
            session.execute(delete(ResumeAnalysisDocument).where(ResumeAnalysisDocument.resume_id == resume_id))
            session.commit()

    # match results

    def upsert_match_results(self, resume_id: str, matches: list[JobMatch]) -> list[MatchResult]:
        """Write one result per (resume, job) pair, replacing any earlier result.

        The batch is a single ``INSERT ... ON CONFLICT DO UPDATE``, so overlapping
        requests for the same pair both succeed and the last writer wins. Rows
        from earlier batches stay written.
        """
        if not matches:
            return []

        now = utcnow()
        # a later entry for the same job replaces an earlier one
        values = {
            match.job_id: {
                "resume_id": resume_id,
                "job_id": match.job_id,
                "match_score": match.match_score,
                "match_reason": match.match_reason,
                "updated_at": now,
            }
            for match in matches
        }
        insert = _dialect_insert(self.engine.dialect.name)
        statement = insert(MatchResultDocument).values(list(values.values()))
        statement = statement.on_conflict_do_update(
            index_elements=["resume_id", "job_id"],
            set_={
                "match_score": statement.excluded.match_score,
                "match_reason": statement.excluded.match_reason,
                "updated_at": statement.excluded.updated_at,
            },
        )

        with self.session() as session:
            try:
                session.execute(statement)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise InternalError("Failed to store match results") from exc

        stored = {result.job_id: result for result in self.list_match_results(resume_id, job_ids=list(values))}
        return [stored[job_id] for job_id in values if job_id in stored]

    def list_match_results(self, resume_id: str, job_ids: list[str] | None = None) -> list[MatchResult]:
        statement = select(MatchResultDocument).where(MatchResultDocument.resume_id == resume_id)
        if job_ids is not None:
            statement = statement.where(MatchResultDocument.job_id.in_(job_ids))
        statement = statement.order_by(MatchResultDocument.match_score.desc(), MatchResultDocument.id.asc())
        with self.session() as session:
            return [_to_result(row) for row in session.scalars(statement).all()]

    def count_match_results(self, resume_id: str, job_id: str) -> int:
        statement = select(MatchResultDocument.id).where(
            MatchResultDocument.resume_id == resume_id,
            MatchResultDocument.job_id == job_id,
        )
        with self.session() as session:
            return len(session.scalars(statement).all())

    def delete_match_results(self, *, resume_id: str | None = None, job_id: str | None = None) -> None:
        if resume_id is None and job_id is None:
            raise ValueError("resume_id or job_id is required")
        statement = delete(MatchResultDocument)
        if resume_id is not None:
            statement = statement.where(MatchResultDocument.resume_id == resume_id)
        if job_id is not None:
            statement = statement.where(MatchResultDocument.job_id == job_id)
        with self.session() as session:
            session.execute(statement)
            session.commit()


_STORE: DocumentStore | None = None
_STORE_LOCK = threading.Lock()


def get_document_store() -> DocumentStore:
    global _STORE
    if _STORE is None:
        with _STORE_LOCK:
            if _STORE is None:
                _STORE = DocumentStore(get_settings().document_store_url)
    return _STORE
