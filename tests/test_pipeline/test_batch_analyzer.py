"""Tests for batch analysis over stored jobs."""

from unittest.mock import AsyncMock, patch

import pytest

from job_tracker.models.analysis import AIAnalysisResult
from job_tracker.models.job import JobCreate
from job_tracker.pipeline.batch_analyzer import BatchAnalyzer
from job_tracker.pipeline.job_analyzer import JobAnalyzer


def _result(score: int = 75) -> AIAnalysisResult:
    return AIAnalysisResult(requirements=["Python"], suitability_score=score)


@pytest.fixture
def analyzer():
    mock = AsyncMock(spec=JobAnalyzer)
    mock.analyze = AsyncMock(return_value=_result())
    return mock


def _add_jobs(store, count: int, description: str | None = "Build services in Python"):
    return [
        store.create(JobCreate(title="Engineer", company=f"Company {i}", description=description))
        for i in range(count)
    ]


class TestBatchAnalyzer:
    async def test_no_pending_jobs(self, store, analyzer):
        _add_jobs(store, 2, description=None)

        report = await BatchAnalyzer(analyzer, store).run()

        assert report.total == 0
        assert report.analyzed == 0
        assert report.message == "No jobs found that need analysis."
        analyzer.analyze.assert_not_called()

    async def test_analyzes_all_pending_in_batches(self, store, analyzer):
        _add_jobs(store, 5)
        progress = []

        with patch("job_tracker.pipeline.batch_analyzer.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            report = await BatchAnalyzer(analyzer, store, batch_size=2, delay_seconds=1.5).run(
                cv_text="My CV", on_progress=lambda done, total: progress.append((done, total))
            )

        assert report.total == 5
        assert report.analyzed == 5
        assert report.failed == 0
        assert report.message == "Batch analysis completed. Successfully analyzed 5 jobs."
        assert progress == [(2, 5), (4, 5), (5, 5)]
        # pauses between batches only, not after the last one
        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(1.5)
        assert analyzer.analyze.await_args.args[1] == "My CV"

    async def test_results_are_stored(self, store, analyzer):
        (job,) = _add_jobs(store, 1)

        await BatchAnalyzer(analyzer, store).run()

        stored = store.get(job.id)
        assert stored.suitability_score == 75
        assert stored.requirements == ["Python"]
        assert stored.ai_analyzed_at is not None
        assert store.pending_analysis() == []

    async def test_failures_are_collected(self, store, analyzer):
        jobs = _add_jobs(store, 3)
        analyzer.analyze.side_effect = [_result(), ValueError("bad output"), _result(60)]

        report = await BatchAnalyzer(analyzer, store, batch_size=3).run()

        assert report.analyzed == 2
        assert report.failed == 1
        assert report.error_details == [f"{jobs[1].company} - Engineer: bad output"]
        # the failed job stays pending for the next run
        assert [j.id for j in store.pending_analysis()] == [jobs[1].id]

    async def test_analyzed_jobs_are_not_picked_again(self, store, analyzer):
        _add_jobs(store, 2)
        batch = BatchAnalyzer(analyzer, store)

        await batch.run()
        second = await batch.run()

        assert second.total == 0
        assert analyzer.analyze.await_count == 2
