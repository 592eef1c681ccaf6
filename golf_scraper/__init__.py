"""
Resumable, cancellable scrape-and-persist loop for golf screen store directories.
"""

from .config import RateLimitConfig, RetryConfig, ScraperConfig
from .errors import (
    JobAlreadyRunningError,
    ScraperError,
    SetupError,
    TransientFetchError,
    UnknownJobError,
)
from .job_runner import JobRunner, format_sse
from .models import FetchResult, JobDefinition, JobOutcome, JobResult, JobStatus
from .scraper_controller import ScraperController

__version__ = "1.0.0"

__all__ = [
    "FetchResult",
    "JobAlreadyRunningError",
    "JobDefinition",
    "JobOutcome",
    "JobResult",
    "JobRunner",
    "JobStatus",
    "RateLimitConfig",
    "RetryConfig",
    "ScraperConfig",
    "ScraperController",
    "ScraperError",
    "SetupError",
    "TransientFetchError",
    "UnknownJobError",
    "format_sse",
]
