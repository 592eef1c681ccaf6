"""Shared fixtures: zero-delay configuration and in-memory stores."""

import pytest

from golf_scraper.config import RateLimitConfig, RetryConfig, ScraperConfig
from golf_scraper.resilience.progress_tracker import InMemoryCheckpointStore
from golf_scraper.resilience.status_registry import JobStatusRegistry
from golf_scraper.result_sink import InMemoryResultSink
from golf_scraper.scraper_controller import ScraperController


@pytest.fixture
def config():
    return ScraperConfig(
        concurrency=1,
        flush_every=1,
        state_backend='memory',
        rate_limit=RateLimitConfig(delay=0),
        retry=RetryConfig(max_attempts=3, delay=0),
    )


@pytest.fixture
def controller(config):
    return ScraperController(
        status=JobStatusRegistry(),
        checkpoints=InMemoryCheckpointStore(),
        sink=InMemoryResultSink(),
        config=config,
    )
