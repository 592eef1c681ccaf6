"""Tests for the job status registry."""

import pytest

from golf_scraper.errors import JobAlreadyRunningError
from golf_scraper.models import JobStatus
from golf_scraper.resilience.status_registry import CancellationToken, JobStatusRegistry


class TestJobStatusRegistry:

    def test_unknown_job_is_idle(self):
        assert JobStatusRegistry().get_status('okgolf') == JobStatus.IDLE

    def test_begin_claims_job_once(self):
        registry = JobStatusRegistry()
        registry.begin('okgolf')
        assert registry.get_status('okgolf') == JobStatus.RUNNING

        with pytest.raises(JobAlreadyRunningError):
            registry.begin('okgolf')

    def test_stop_draining_job_cannot_restart(self):
        registry = JobStatusRegistry()
        registry.begin('okgolf')
        assert registry.request_stop('okgolf') is True

        with pytest.raises(JobAlreadyRunningError):
            registry.begin('okgolf')

        registry.reset('okgolf')
        registry.begin('okgolf')

    def test_stop_idle_job_is_a_no_op(self):
        registry = JobStatusRegistry()
        assert registry.request_stop('okgolf') is False
        assert registry.get_status('okgolf') == JobStatus.IDLE

    def test_jobs_are_independent(self):
        registry = JobStatusRegistry()
        registry.begin('okgolf')
        registry.begin('citeezon')
        registry.request_stop('okgolf')
        assert registry.snapshot() == {'okgolf': JobStatus.STOPPED, 'citeezon': JobStatus.RUNNING}


def test_cancellation_token_follows_registry():
    registry = JobStatusRegistry()
    token = CancellationToken(registry, 'friendgolf')
    registry.begin('friendgolf')
    assert not token.cancelled

    registry.request_stop('friendgolf')
    assert token.cancelled
