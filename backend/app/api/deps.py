"""API dependencies."""
from typing import Optional

from backend.app.core.config import settings
from golf_scraper.job_runner import JobRunner
from golf_scraper.scraper_controller import ScraperController
from golf_scraper.storage_factory import create_checkpoint_store, create_result_sink

_runner: Optional[JobRunner] = None


def create_runner() -> JobRunner:
    config = settings.to_scraper_config()
    controller = ScraperController(
        checkpoints=create_checkpoint_store(config, db_url=settings.state_db_url),
        sink=create_result_sink(config),
        config=config,
    )
    return JobRunner(controller)


def active_runner() -> Optional[JobRunner]:
    """The runner if one was created, else None."""
    return _runner


def get_runner() -> JobRunner:
    """Process-wide job runner, created on first use."""
    global _runner
    if _runner is None:
        _runner = create_runner()
    return _runner


__all__ = ["active_runner", "create_runner", "get_runner", "settings"]
