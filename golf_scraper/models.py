"""
Data models for the scrape engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .enumeration import Enumeration, Unit
    from .job_log import JobLog
    from .result_sink import ResultSink
    from .validation import RecordValidator
    from .config import ScraperConfig
    from .resilience.status_registry import CancellationToken


class JobStatus(str, Enum):
    """Lifecycle status of a job id, doubling as the cancellation signal."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class JobOutcome(str, Enum):
    """Terminal state of one run."""
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class FetchResult:
    """Raw records extracted from one unit."""
    records: List[Dict[str, Any]] = field(default_factory=list)
    has_more: bool = True
    # False when a stop cut a multi-request unit short; the unit stays pending
    complete: bool = True


@dataclass
class JobContext:
    """What a job definition may look at while it is being set up."""
    job_id: str
    config: "ScraperConfig"
    sink: "ResultSink"
    log: "JobLog"
    token: Optional["CancellationToken"] = None


@dataclass
class JobDefinition:
    """
    Site-specific configuration of the generic scrape loop.

    enumeration_factory and fetcher_factory are called once per run;
    enumeration_factory may be a coroutine function.
    The fetcher is an async context manager exposing
    ``fetch_unit(unit) -> FetchResult``.
    """
    job_id: str
    title: str
    enumeration_factory: Callable[[JobContext], "Enumeration"]
    fetcher_factory: Callable[[JobContext], Any]
    validator: Optional["RecordValidator"] = None
    record_key: Optional[Callable[[Dict[str, Any]], Any]] = None
    known_unit_key: Optional[Callable[["Unit"], Any]] = None
    concurrency: Optional[int] = None


@dataclass
class JobResult:
    """Result of one run."""
    job_id: str
    outcome: JobOutcome
    started_at: str
    completed_at: str
    units_processed: int = 0
    units_skipped: int = 0
    units_failed: int = 0
    records_added: int = 0
    records_rejected: int = 0
    total_records: int = 0
    failed_units: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    records_per_hour: float = 0.0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome != JobOutcome.FAILED
