"""Batch analysis of every stored job that has a description but no analysis yet."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from job_tracker.models.analysis import BatchAnalysisReport
from job_tracker.models.job import Job
from job_tracker.pipeline.job_analyzer import JobAnalyzer
from job_tracker.store.job_store import JobStore

logger = logging.getLogger(__name__)


class BatchAnalyzer:
    """Runs analyses a few at a time with a pause between batches to respect rate limits."""

    def __init__(
        self,
        analyzer: JobAnalyzer,
        store: JobStore,
        *,
        batch_size: int = 3,
        delay_seconds: float = 2.0,
    ):
        self.analyzer = analyzer
        self.store = store
        self.batch_size = batch_size
        self.delay_seconds = delay_seconds

    async def run(
        self,
        cv_text: str | None = None,
        *,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> BatchAnalysisReport:
        """Analyze all pending jobs; per-job failures are collected, not raised."""
        jobs = self.store.pending_analysis()
        report = BatchAnalysisReport(total=len(jobs))
        if not jobs:
            return report

        for start in range(0, len(jobs), self.batch_size):
            batch = jobs[start : start + self.batch_size]
            results = await asyncio.gather(
                *(self._analyze_one(job, cv_text) for job in batch),
                return_exceptions=True,
            )
            for job, outcome in zip(batch, results):
                if isinstance(outcome, Exception):
                    report.failed += 1
                    report.error_details.append(f"{job.company} - {job.title}: {outcome}")
                    logger.error("Batch analysis failed for job %s: %s", job.id, outcome)
                else:
                    report.analyzed += 1

            done = min(start + self.batch_size, len(jobs))
            logger.info("Batch progress: %d/%d", done, len(jobs))
            if on_progress is not None:
                on_progress(done, len(jobs))

            if done < len(jobs):
                await asyncio.sleep(self.delay_seconds)

        return report

    async def _analyze_one(self, job: Job, cv_text: str | None) -> Job:
        result = await self.analyzer.analyze(job.description or "", cv_text)
        updated = self.store.apply_analysis(job.id, result)
        if updated is None:
            raise LookupError(f"Job {job.id} was deleted during analysis")
        return updated
