from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from resumatch.types import JobStatus, JobType, MatchResult, ResumeAnalysis, UserType


class ProfileCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=3)
    full_name: str = Field(default="", alias="fullName")
    user_type: UserType = Field(alias="userType")


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    headline: str | None = None
    location: str | None = None
    bio: str | None = None
    phone: str | None = None


class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: str
    user_type: str
    headline: str
    location: str
    bio: str
    phone: str
    created_at: str | None


class JobCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: str = Field(min_length=1)
    type: JobType
    description: str = Field(min_length=1)
    requirements: str = Field(min_length=1)
    skills: list[str] = Field(default_factory=list)


class JobUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    company: str | None = Field(default=None, min_length=1)
    location: str | None = None
    type: JobType | None = None
    description: str | None = None
    requirements: str | None = None
    skills: list[str] | None = None
    status: JobStatus | None = None


class JobResponse(BaseModel):
    id: str
    title: str
    company: str
    location: str
    type: str
    description: str
    requirements: str
    skills: list[str]
    status: str
    recruiter_id: str
    created_at: str | None
    updated_at: str | None


class ResumeResponse(BaseModel):
    id: str
    user_id: str
    file_name: str
    file_url: str
    file_type: str
    file_size: int
    status: str
    created_at: str | None


class ResumeUploadResponse(BaseModel):
    id: str
    file_name: str
    file_url: str
    analysis: ResumeAnalysis


class MatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_id: str = Field(min_length=1, alias="resumeId")
    job_ids: list[str] = Field(alias="jobIds")


class MatchComputeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_id: str = Field(min_length=1, alias="resumeId")
    job_ids: list[str] | None = Field(default=None, alias="jobIds")


class MatchResponse(BaseModel):
    resume_id: str
    match_count: int
    matches: list[MatchResult]


class ImprovementsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_id: str = Field(min_length=1, alias="resumeId")
    job_id: str = Field(min_length=1, alias="jobId")


class ApplicationCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(min_length=1, alias="jobId")
    resume_id: str | None = Field(default=None, alias="resumeId")
    cover_letter: str | None = Field(default=None, alias="coverLetter")


class ApplicationUpdateRequest(BaseModel):
    id: str = Field(min_length=1)
    status: str = Field(min_length=1)


class ApplicationJobSummary(BaseModel):
    id: str
    title: str
    company: str
    location: str
    type: str


class ApplicantSummary(BaseModel):
    id: str
    full_name: str
    email: str


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    user_id: str
    resume_id: str | None
    cover_letter: str | None
    status: str
    created_at: str | None
    job: ApplicationJobSummary | None = None
    applicant: ApplicantSummary | None = None
