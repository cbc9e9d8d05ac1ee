"""Tests for pydantic models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from job_tracker.models import (
    AIAnalysisResult,
    BatchAnalysisReport,
    JobListParseResult,
    JobStatus,
    JobUpdate,
    ParsedJob,
)


class TestParsedJob:
    def test_defaults(self):
        job = ParsedJob(company="Anthropic", application_date=datetime(2025, 1, 15))
        assert job.title == "Software Engineer"
        assert job.status == JobStatus.APPLIED
        assert job.location is None
        assert job.pattern == "dash"

    def test_empty_company_rejected(self):
        with pytest.raises(ValidationError):
            ParsedJob(company="", application_date=datetime(2025, 1, 15))

    def test_parse_result_defaults(self):
        result = JobListParseResult()
        assert result.jobs == []
        assert result.errors == []


class TestJobUpdate:
    def test_all_fields_optional(self):
        update = JobUpdate()
        assert update.model_dump(exclude_unset=True) == {}

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            JobUpdate(title="")


class TestAIAnalysisResult:
    def test_accepts_camel_case_keys(self):
        result = AIAnalysisResult.model_validate({"salaryMin": 90000, "workArrangement": "remote"})
        assert result.salary_min == 90000
        assert result.work_arrangement == "remote"

    def test_has_signal(self):
        assert not AIAnalysisResult(benefits=["Dental"]).has_signal
        assert AIAnalysisResult(responsibilities=["Ship"]).has_signal


class TestBatchAnalysisReport:
    def test_message_when_empty(self):
        assert BatchAnalysisReport().message == "No jobs found that need analysis."

    def test_message_with_results(self):
        report = BatchAnalysisReport(analyzed=3, failed=1, total=4)
        assert report.message == "Batch analysis completed. Successfully analyzed 3 jobs."
