from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

UserType = Literal["job_seeker", "recruiter"]
JobType = Literal["full_time", "part_time", "contract", "internship", "remote"]
JobStatus = Literal["active", "closed"]
ApplicationStatus = Literal["pending", "reviewing", "interview", "accepted", "rejected"]
ResumeStatus = Literal["uploaded", "analyzed"]
AIProviderName = Literal["gemini", "openai"]

JOB_TYPES: tuple[str, ...] = ("full_time", "part_time", "contract", "internship", "remote")
JOB_STATUSES: tuple[str, ...] = ("active", "closed")
APPLICATION_STATUSES: tuple[str, ...] = ("pending", "reviewing", "interview", "accepted", "rejected")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        raise ValueError("expected a list of strings")
    return [text for text in (_as_text(item) for item in value) if text]


class ModelResponse(BaseModel):
    content: str
    raw: dict[str, Any] = Field(default_factory=dict)


class ExperienceEntry(BaseModel):
    company: str = ""
    title: str = ""
    duration: str = ""
    description: str = ""

    @field_validator("company", "title", "duration", "description", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class EducationEntry(BaseModel):
    institution: str = ""
    degree: str = ""
    field: str = ""
    year: str = ""

    @field_validator("institution", "degree", "field", "year", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class ResumeAnalysis(BaseModel):
    resume_id: str | None = None
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)

    @field_validator("skills", "certifications", mode="before")
    @classmethod
    def coerce_string_list(cls, value: Any) -> list[str]:
        return _as_string_list(value)

    @field_validator("experience", "education", mode="before")
    @classmethod
    def coerce_entry_list(cls, value: Any) -> Any:
        return [] if value is None else value


class JobListing(BaseModel):
    """The view of a job posting that is sent to the matcher."""

    id: str
    title: str
    company: str = ""
    location: str = ""
    type: str = ""
    description: str = ""
    requirements: str = ""
    skills: list[str] = Field(default_factory=list)


class JobMatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    match_score: int = Field(alias="matchScore")
    match_reason: str = Field(default="", alias="matchReason")

    @field_validator("job_id", mode="before")
    @classmethod
    def coerce_job_id(cls, value: Any) -> str:
        text = _as_text(value)
        if not text:
            raise ValueError("jobId is required")
        return text

    @field_validator("match_score", mode="before")
    @classmethod
    def clamp_score(cls, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("matchScore must be a number")
        try:
            score = round(float(value))
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValueError("matchScore must be a number") from exc
        return max(0, min(100, score))

    @field_validator("match_reason", mode="before")
    @classmethod
    def coerce_reason(cls, value: Any) -> str:
        return _as_text(value)


class MatchResult(BaseModel):
    resume_id: str
    job_id: str
    match_score: int = Field(ge=0, le=100)
    match_reason: str = ""
    updated_at: datetime | None = None


class ResumeImprovements(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    skill_suggestions: list[str] = Field(default_factory=list, alias="skillSuggestions")
    experience_suggestions: list[str] = Field(default_factory=list, alias="experienceSuggestions")
    format_suggestions: list[str] = Field(default_factory=list, alias="formatSuggestions")
    keyword_suggestions: list[str] = Field(default_factory=list, alias="keywordSuggestions")

    @field_validator(
        "skill_suggestions",
        "experience_suggestions",
        "format_suggestions",
        "keyword_suggestions",
        mode="before",
    )
    @classmethod
    def coerce_string_list(cls, value: Any) -> list[str]:
        return _as_string_list(value)
