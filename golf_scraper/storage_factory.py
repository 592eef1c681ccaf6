"""
Factories for the persistence backends selected by configuration.
"""

from pathlib import Path

from .config import ScraperConfig
from .resilience.progress_tracker import CheckpointStore, InMemoryCheckpointStore, JsonCheckpointStore
from .resilience.progress_tracker_db import SqlCheckpointStore
from .result_sink import InMemoryResultSink, JsonResultSink, ResultSink


def create_result_sink(config: ScraperConfig) -> ResultSink:
    """
    Create the result sink for a configuration.

    The in-memory backend keeps results in memory too; every other
    backend writes JSON files under config.data_dir.
    """
    if config.state_backend == 'memory':
        return InMemoryResultSink()
    return JsonResultSink(config.data_dir)


def create_checkpoint_store(config: ScraperConfig, db_url: str = None) -> CheckpointStore:
    """
    Create the checkpoint store for a configuration.

    Args:
        config: ScraperConfig with state_backend and state_dir
        db_url: Optional SQLAlchemy URL for the sqlite backend

    Returns:
        CheckpointStore instance
    """
    if config.state_backend == 'memory':
        return InMemoryCheckpointStore()
    if config.state_backend == 'sqlite':
        return SqlCheckpointStore(db_url=db_url, db_path=str(Path(config.state_dir) / "progress.db"))
    return JsonCheckpointStore(config.state_dir)
