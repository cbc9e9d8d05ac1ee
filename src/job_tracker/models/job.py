"""Pydantic models for tracked job applications."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

DEFAULT_TITLE = "Software Engineer"


class JobStatus(str, Enum):
    APPLIED = "APPLIED"
    INTERVIEWING = "INTERVIEWING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ParsedJob(BaseModel):
    """One job recovered from a pasted freeform list."""

    company: str = Field(min_length=1)
    title: str = DEFAULT_TITLE
    application_date: datetime
    status: JobStatus = JobStatus.APPLIED  # only APPLIED or REJECTED from the parser
    location: str | None = None
    notes: str | None = None
    pattern: str = "dash"  # dash, parenthetical, whole_line


class JobListParseResult(BaseModel):
    jobs: list[ParsedJob] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class JobCreate(BaseModel):
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    description: str | None = None
    location: str | None = None
    application_date: datetime | None = None
    status: JobStatus = JobStatus.APPLIED
    linkedin_contact_url: str | None = None
    linkedin_contact_name: str | None = None
    has_messaged_contact: bool = False
    notes: str | None = None

    @field_validator("linkedin_contact_url")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return value
        if not value.startswith(("http://", "https://")):
            raise ValueError("Invalid LinkedIn URL")
        return value


class JobUpdate(JobCreate):
    title: str | None = Field(default=None, min_length=1)
    company: str | None = Field(default=None, min_length=1)
    status: JobStatus | None = None
    has_messaged_contact: bool | None = None


class Job(BaseModel):
    id: str
    title: str
    company: str
    description: str | None = None
    location: str | None = None
    application_date: datetime
    status: JobStatus = JobStatus.APPLIED
    linkedin_contact_url: str | None = None
    linkedin_contact_name: str | None = None
    has_messaged_contact: bool = False
    notes: str | None = None

    # AI analysis fields
    salary_min: int | float | None = None
    salary_max: int | float | None = None
    salary_currency: str | None = None
    responsibilities: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    work_arrangement: str | None = None
    suitability_score: int | float | None = None
    suitability_reason: str | None = None
    suggested_next_steps: list[str] = Field(default_factory=list)
    ai_analyzed_at: datetime | None = None

    created_at: datetime
    updated_at: datetime


class JobStats(BaseModel):
    total: int = 0
    applied: int = 0
    interviewing: int = 0
    accepted: int = 0
    rejected: int = 0
