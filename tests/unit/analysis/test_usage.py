"""Unit tests for per-run token metering."""

import asyncio

import pytest

from src.analysis.aggregator import PreAnalysisService
from src.analysis.usage import metered, record_tokens


class TestMetered:
    def test_records_into_active_meter(self):
        with metered() as meter:
            record_tokens(120)
            record_tokens(30)

        assert meter.tokens == 150

    def test_record_without_meter_is_ignored(self):
        record_tokens(500)

        with metered() as meter:
            pass

        assert meter.tokens == 0

    def test_nested_meters_roll_up(self):
        with metered() as outer:
            record_tokens(10)
            with metered() as inner:
                record_tokens(5)
            record_tokens(1)

        assert inner.tokens == 5
        assert outer.tokens == 16

    @pytest.mark.asyncio
    async def test_gathered_tasks_report_to_caller(self):
        async def call(tokens):
            await asyncio.sleep(0)
            record_tokens(tokens)

        with metered() as meter:
            await asyncio.gather(call(100), call(200))

        assert meter.tokens == 300

    @pytest.mark.asyncio
    async def test_concurrent_meters_are_isolated(self):
        async def run(tokens):
            with metered() as meter:
                for _ in range(3):
                    record_tokens(tokens)
                    await asyncio.sleep(0)
            return meter.tokens

        assert await asyncio.gather(run(10), run(100)) == [30, 300]


class TestPreAnalysisMetering:
    @pytest.mark.asyncio
    async def test_analyzer_tokens_reach_caller_meter(
        self, mock_analyzer, sample_impact, sample_resume, sample_job
    ):
        async def impact_with_tokens(resume):
            record_tokens(400)
            return sample_impact

        mock_analyzer.analyze_impact.side_effect = impact_with_tokens
        service = PreAnalysisService(mock_analyzer)

        with metered() as meter:
            await service.run(sample_resume, sample_job, resume_id="resume-1")

        assert meter.tokens == 400
