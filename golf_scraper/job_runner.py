"""
Job runner - starts catalogue jobs as asyncio tasks and turns their
narration into a stream of (event, data) pairs.

Events:
    log    {"level": ..., "message": ...}   one per JobLog line
    end    run summary                      job completed
    stop   run summary                      job stopped, progress kept
    error  {"message": ...}                 setup failure or crash
"""

import asyncio
import json
import logging
from dataclasses import asdict
from typing import Any, AsyncIterator, Dict, Optional, Tuple

from .errors import ScraperError, SetupError
from .jobs import build_catalogue, get_job
from .models import JobDefinition, JobOutcome, JobResult, JobStatus
from .scraper_controller import ScraperController

logger = logging.getLogger(__name__)

Event = Tuple[str, Dict[str, Any]]

# Queue marker closing one run's event stream
_END_OF_STREAM = None


def format_sse(event: str, data: Dict[str, Any]) -> str:
    """Render one Server-Sent Event frame."""
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


def summarize(result: JobResult) -> Dict[str, Any]:
    summary = asdict(result)
    summary['outcome'] = result.outcome.value
    return summary


class JobRunner:
    """Owns the running tasks of one controller."""

    def __init__(
        self,
        controller: Optional[ScraperController] = None,
        catalogue: Optional[Dict[str, JobDefinition]] = None,
    ):
        self.controller = controller or ScraperController()
        self.catalogue = catalogue if catalogue is not None else build_catalogue()
        self._queues: Dict[str, asyncio.Queue] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self.results: Dict[str, JobResult] = {}

    def start(self, job_id: str, resume: bool = True) -> asyncio.Queue:
        """
        Claim a job and run it in the background.

        Must be called from a running event loop.

        Returns:
            Queue receiving (event, data) pairs, then None

        Raises:
            UnknownJobError: if job_id is not in the catalogue
            JobAlreadyRunningError: if the job is active
        """
        job = get_job(job_id, self.catalogue)
        self.controller.status.begin(job_id)

        queue: asyncio.Queue = asyncio.Queue()

        def forward(level: str, message: str):
            queue.put_nowait(('log', {'level': level, 'message': message}))

        self._queues[job_id] = queue
        self._tasks[job_id] = asyncio.create_task(self._run(job, queue, forward, resume))
        return queue

    async def _run(self, job: JobDefinition, queue: asyncio.Queue, forward, resume: bool):
        try:
            result = await self.controller.run(job, log_sinks=[forward], resume=resume, claimed=True)
            self.results[job.job_id] = result
            if result.outcome == JobOutcome.COMPLETED:
                queue.put_nowait(('end', summarize(result)))
            elif result.outcome == JobOutcome.STOPPED:
                queue.put_nowait(('stop', summarize(result)))
            else:
                queue.put_nowait(('error', {'message': result.error or 'job failed'}))
        except SetupError as e:
            queue.put_nowait(('error', {'message': str(e)}))
        except asyncio.CancelledError:
            queue.put_nowait(('error', {'message': 'job cancelled'}))
            raise
        except Exception as e:
            logger.exception(f"Job {job.job_id} crashed")
            queue.put_nowait(('error', {'message': f"{type(e).__name__}: {e}"}))
        finally:
            queue.put_nowait(_END_OF_STREAM)

    async def events(self, job_id: str, stop_on_close: bool = False) -> AsyncIterator[Event]:
        """
        Yield the events of the latest run of job_id until it ends.

        Args:
            job_id: Job whose stream to follow
            stop_on_close: Request a stop when the consumer leaves before the run ends
        """
        queue = self._queues.get(job_id)
        if queue is None:
            return
        ended = False
        try:
            while True:
                item = await queue.get()
                if item is _END_OF_STREAM:
                    ended = True
                    break
                yield item
        finally:
            task = self._tasks.get(job_id)
            if stop_on_close and not ended and task is not None and not task.done():
                logger.info(f"Event stream of {job_id} closed, requesting stop")
                self.controller.status.request_stop(job_id)

    async def wait(self, job_id: str) -> Optional[JobResult]:
        """Wait for the latest run of job_id to finish."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        return self.results.get(job_id)

    def request_stop(self, job_id: str) -> bool:
        get_job(job_id, self.catalogue)
        return self.controller.status.request_stop(job_id)

    def status(self, job_id: str) -> JobStatus:
        get_job(job_id, self.catalogue)
        return self.controller.status.get_status(job_id)

    def statuses(self) -> Dict[str, JobStatus]:
        return {job_id: self.controller.status.get_status(job_id) for job_id in self.catalogue}

    def reset_progress(self, job_id: str):
        """
        Forget a job's resume position.

        Raises:
            ScraperError: while the job is running
        """
        get_job(job_id, self.catalogue)
        if self.controller.status.is_active(job_id):
            raise ScraperError(f"Job '{job_id}' is running; stop it before clearing progress")
        self.controller.reset_progress(job_id)

    async def shutdown(self):
        """Ask every active job to stop and wait for them."""
        for job_id, task in list(self._tasks.items()):
            if not task.done():
                self.controller.status.request_stop(job_id)
        if self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)
