"""Pydantic models for AI job-description analysis."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class AIAnalysisResult(BaseModel):
    """Structured fields extracted from a job description by the LLM.

    Serialized with camelCase keys (``salaryMin``), which is also the shape
    the model is asked to answer in.
    """

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    salary_min: int | float | None = None
    salary_max: int | float | None = None
    salary_currency: str | None = None
    responsibilities: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    work_arrangement: str | None = None  # remote, hybrid, onsite
    suitability_score: int | float | None = None  # 0-100, not enforced
    suitability_reason: str | None = None
    suggested_next_steps: list[str] = Field(default_factory=list)

    @property
    def has_signal(self) -> bool:
        """True when the completion carried real job content."""
        return bool(self.requirements or self.responsibilities)


class BatchAnalysisReport(BaseModel):
    analyzed: int = 0
    failed: int = 0
    total: int = 0
    error_details: list[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        if self.total == 0:
            return "No jobs found that need analysis."
        return f"Batch analysis completed. Successfully analyzed {self.analyzed} jobs."
