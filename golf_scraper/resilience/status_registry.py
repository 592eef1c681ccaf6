"""
Job status registry - the cooperative cancellation signal.

One tri-state status per job id. Runs poll it; the stop endpoint writes it.
"""

import threading
from typing import Dict

from ..errors import JobAlreadyRunningError
from ..models import JobStatus


class JobStatusRegistry:
    """Thread-safe map of job id -> JobStatus."""

    def __init__(self):
        self._statuses: Dict[str, JobStatus] = {}
        self._lock = threading.Lock()

    def set_status(self, job_id: str, status: JobStatus):
        with self._lock:
            self._statuses[job_id] = JobStatus(status)

    def get_status(self, job_id: str) -> JobStatus:
        with self._lock:
            return self._statuses.get(job_id, JobStatus.IDLE)

    def reset(self, job_id: str):
        """Set a job back to idle."""
        self.set_status(job_id, JobStatus.IDLE)

    def begin(self, job_id: str):
        """
        Atomically claim a job for a new run.

        Raises:
            JobAlreadyRunningError: if a run is active or still draining a stop
        """
        with self._lock:
            if self._statuses.get(job_id, JobStatus.IDLE) != JobStatus.IDLE:
                raise JobAlreadyRunningError(job_id)
            self._statuses[job_id] = JobStatus.RUNNING

    def request_stop(self, job_id: str) -> bool:
        """
        Ask a running job to stop at its next checkpoint.

        Returns:
            True if the job was active, False if it was idle (nothing to stop)
        """
        with self._lock:
            if self._statuses.get(job_id, JobStatus.IDLE) == JobStatus.IDLE:
                return False
            self._statuses[job_id] = JobStatus.STOPPED
            return True

    def is_active(self, job_id: str) -> bool:
        return self.get_status(job_id) != JobStatus.IDLE

    def snapshot(self) -> Dict[str, JobStatus]:
        with self._lock:
            return dict(self._statuses)


class CancellationToken:
    """Read-only view of one job's stop signal."""

    def __init__(self, registry: JobStatusRegistry, job_id: str):
        self._registry = registry
        self.job_id = job_id

    @property
    def cancelled(self) -> bool:
        return self._registry.get_status(self.job_id) == JobStatus.STOPPED
