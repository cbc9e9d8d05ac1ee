"""Data models for the job tracker."""

from job_tracker.models.analysis import AIAnalysisResult, BatchAnalysisReport
from job_tracker.models.job import (
    Job,
    JobCreate,
    JobListParseResult,
    JobStats,
    JobStatus,
    JobUpdate,
    ParsedJob,
)

__all__ = [
    "AIAnalysisResult",
    "BatchAnalysisReport",
    "Job",
    "JobCreate",
    "JobListParseResult",
    "JobStats",
    "JobStatus",
    "JobUpdate",
    "ParsedJob",
]
