"""Shared test fixtures."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from job_tracker.clients.llm_client import LLMClient, LLMResponse
from job_tracker.store.job_store import JobStore


@pytest.fixture
def sample_job_list_text() -> str:
    return """Job Applications
---
15 Jan
- Anthropic
- Headway - Sr. Software Engineer
- Notion ❌
- Google (Seattle)
Reached out to Jane Doe on LinkedIn

16 January
1. Stripe - Backend Engineer (Remote)
2. Figma (referral from Sam) follow up next week
• Shopify contacted recruiter
- (no company here)
"""


@pytest.fixture
def sample_description() -> str:
    return """Senior Backend Engineer
Acme Robotics
Location: Vancouver, BC

We are building the future of warehouse automation.

Responsibilities:
- Design and operate Python services
- Own the order routing pipeline

Requirements:
- 5+ years of Python
- PostgreSQL experience

Salary: $150,000 - $180,000 CAD
"""


@pytest.fixture
def complete_analysis() -> dict:
    return {
        "salaryMin": 150000,
        "salaryMax": 180000,
        "salaryCurrency": "CAD",
        "responsibilities": ["Design and operate Python services", "Own the order routing pipeline"],
        "requirements": ["5+ years of Python", "PostgreSQL experience"],
        "benefits": ["Health insurance"],
        "workArrangement": "hybrid",
        "suitabilityScore": 82,
        "suitabilityReason": "Strong Python background matches the core requirements.",
        "suggestedNextSteps": ["Highlight PostgreSQL work", "Research Acme's warehouse products"],
    }


@pytest.fixture
def complete_analysis_text(complete_analysis) -> str:
    return "Here is the analysis:\n" + json.dumps(complete_analysis, indent=2) + "\nLet me know if you need more."


@pytest.fixture
def store(tmp_path) -> JobStore:
    return JobStore(db_path=tmp_path / "jobs.db")


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50, stop_reason="end_turn")
    )
    return client
