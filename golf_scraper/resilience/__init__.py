"""
Resilience components for the scrape engine.
"""

from .progress_tracker import CheckpointStore, InMemoryCheckpointStore, JsonCheckpointStore
from .progress_tracker_db import SqlCheckpointStore
from .rate_limiter import RateLimiter
from .retry_handler import RetryHandler
from .status_registry import CancellationToken, JobStatusRegistry

__all__ = [
    'CheckpointStore',
    'InMemoryCheckpointStore',
    'JsonCheckpointStore',
    'SqlCheckpointStore',
    'RateLimiter',
    'RetryHandler',
    'CancellationToken',
    'JobStatusRegistry'
]
