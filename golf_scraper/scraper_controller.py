"""
Main orchestrator for scrape jobs.

Drives one job definition through the resumable, cancellable loop:
load the Progress Record and prior results, enumerate units from the
recorded position, process them with bounded concurrency, and persist
results and progress together so a restart never skips work.
"""

import asyncio
import inspect
from collections import OrderedDict
from contextlib import AsyncExitStack
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from .config import ScraperConfig
from .enumeration import Enumeration, Unit
from .errors import SetupError
from .job_log import JobLog, LogSink
from .models import FetchResult, JobContext, JobDefinition, JobOutcome, JobResult
from .resilience.progress_tracker import CheckpointStore, InMemoryCheckpointStore, ProgressRecord
from .resilience.rate_limiter import RateLimiter
from .resilience.retry_handler import RetryHandler
from .resilience.status_registry import CancellationToken, JobStatusRegistry
from .result_sink import InMemoryResultSink, ResultSink


class Accumulator:
    """Ordered record collection, deduplicated by an optional per-job key."""

    def __init__(self, key: Optional[Callable[[Dict[str, Any]], Any]] = None):
        self._key = key
        self._records: List[Dict[str, Any]] = []
        self._keys = set()

    def add(self, record: Dict[str, Any]) -> bool:
        """Append a record unless its key was already seen."""
        if self._key is not None:
            key = self._key(record)
            if key is not None:
                if key in self._keys:
                    return False
                self._keys.add(key)
        self._records.append(record)
        return True

    def merge(self, records: Iterable[Dict[str, Any]]) -> int:
        return sum(1 for record in records if self.add(record))

    def has_key(self, key: Any) -> bool:
        return key in self._keys

    def records(self) -> List[Dict[str, Any]]:
        return list(self._records)

    def __len__(self):
        return len(self._records)


class ProgressWindow:
    """
    Tracks dispatched units so the persisted position never passes an
    unfinished one, whatever order concurrent units complete in.
    """

    def __init__(self, position: ProgressRecord):
        self._position = dict(position)
        self._pending: "OrderedDict[int, Unit]" = OrderedDict()
        self._done = set()

    def dispatched(self, unit: Unit):
        self._pending[unit.seq] = unit

    def finished(self, unit: Unit):
        self._done.add(unit.seq)
        while self._pending:
            seq, first = next(iter(self._pending.items()))
            if seq not in self._done:
                break
            self._pending.popitem(last=False)
            self._done.discard(seq)
            self._position = dict(first.next_position)

    @property
    def position(self) -> ProgressRecord:
        """Record resuming at the lowest unfinished unit."""
        if self._pending:
            return dict(next(iter(self._pending.values())).position)
        return dict(self._position)


class ScraperController:
    """Runs job definitions against shared status, checkpoint and result stores."""

    def __init__(
        self,
        status: Optional[JobStatusRegistry] = None,
        checkpoints: Optional[CheckpointStore] = None,
        sink: Optional[ResultSink] = None,
        config: Optional[ScraperConfig] = None,
    ):
        """
        Initialize controller.

        Args:
            status: Registry polled for stop requests
            checkpoints: Store of Progress Records
            sink: Store of accumulated records
            config: ScraperConfig instance, uses defaults if None
        """
        self.config = config or ScraperConfig()
        self.status = status or JobStatusRegistry()
        self.checkpoints = checkpoints or InMemoryCheckpointStore()
        self.sink = sink or InMemoryResultSink()

    async def run(
        self,
        job: JobDefinition,
        log_sinks: Iterable[LogSink] = (),
        resume: bool = True,
        claimed: bool = False,
    ) -> JobResult:
        """
        Run a job until it completes, is stopped, or fails during setup.

        Args:
            job: Job definition to run
            log_sinks: Extra callables receiving (level, message) lines
            resume: Whether to resume from the stored Progress Record
            claimed: True when the caller already moved the job to running

        Returns:
            JobResult describing the run

        Raises:
            JobAlreadyRunningError: if the job id is already active
            SetupError: if the job cannot start or its fetcher aborts it
        """
        if not claimed:
            self.status.begin(job.job_id)

        run = JobRun(self, job, JobLog(job.job_id, log_sinks))
        try:
            return await run.execute(resume)
        finally:
            self.status.reset(job.job_id)

    def reset_progress(self, job_id: str):
        """Forget a job's resume position."""
        self.checkpoints.delete(job_id)


class JobRun:
    """State of a single run. Progress and Accumulator mutation go through self.lock."""

    def __init__(self, controller: ScraperController, job: JobDefinition, log: JobLog):
        self.controller = controller
        self.job = job
        self.job_id = job.job_id
        self.log = log
        self.config = controller.config
        self.token = CancellationToken(controller.status, job.job_id)
        self.retry_handler = RetryHandler(config=self.config.retry, log=log)
        self.rate_limiter = RateLimiter(config=self.config.rate_limit)
        self.concurrency = job.concurrency or self.config.concurrency

        self.lock = asyncio.Lock()
        self.accumulator = Accumulator(key=job.record_key)
        self.window: Optional[ProgressWindow] = None
        self.enumeration: Optional[Enumeration] = None
        self._start_record: ProgressRecord = {}
        self.fetcher = None

        self.stopping = False
        self.exhausted = False
        self.fatal: Optional[SetupError] = None
        self._since_flush = 0

        self.started_at = datetime.now().isoformat()
        self.units_processed = 0
        self.units_skipped = 0
        self.units_failed = 0
        self.records_added = 0
        self.records_rejected = 0
        self.failed_units: List[str] = []

    async def execute(self, resume: bool) -> JobResult:
        self.log.info(f"=== {self.job.title} ({self.job_id}) started ===")
        try:
            await self._initialize(resume)

            async with AsyncExitStack() as stack:
                try:
                    self.fetcher = await stack.enter_async_context(
                        self.job.fetcher_factory(self._context())
                    )
                except SetupError:
                    raise
                except Exception as e:
                    raise SetupError(f"Page fetcher unavailable: {e}") from e

                await self._dispatch()

            if self.fatal is not None:
                raise self.fatal
        except SetupError as e:
            self.log.error(f"Setup failed: {e}")
            if self.window is not None:
                async with self.lock:
                    await self._flush()
                self.log.info(f"Progress kept at {self._describe(self.window.position)}")
            raise

        if self.stopping or self.token.cancelled:
            return await self._finish_stopped()
        return await self._finish_completed()

    def _context(self) -> JobContext:
        return JobContext(
            job_id=self.job_id,
            config=self.config,
            sink=self.controller.sink,
            log=self.log,
            token=self.token,
        )

    def _describe(self, record: ProgressRecord) -> str:
        return self.enumeration.describe(record) if self.enumeration else str(record)

    async def _initialize(self, resume: bool):
        checkpoints = self.controller.checkpoints

        if not resume:
            await asyncio.to_thread(checkpoints.delete, self.job_id)
            self.log.info("Starting fresh, stored progress discarded")

        # Missing required inputs surface here as SetupError, before any fetch
        enumeration = self.job.enumeration_factory(self._context())
        if inspect.isawaitable(enumeration):
            enumeration = await enumeration
        self.enumeration = enumeration
        default = self.enumeration.default_record()

        record = await asyncio.to_thread(checkpoints.read, self.job_id, default)
        if not self.enumeration.is_valid_record(record):
            self.log.warn(f"Stored progress {record} is malformed, starting from the beginning")
            record = default
        self.log.info(f"Loaded progress - {self._describe(record)}")

        existing = await asyncio.to_thread(self.controller.sink.load_all, self.job_id)
        if existing:
            loaded = self.accumulator.merge(existing)
            self.log.info(f"Loaded {loaded} existing records")

        self.window = ProgressWindow(record)
        self._start_record = record

    def _should_halt(self) -> bool:
        if self.token.cancelled:
            self._note_stop()
        return self.stopping or self.exhausted or self.fatal is not None

    def _note_stop(self):
        if not self.stopping:
            self.stopping = True
            self.log.info("Stop signal received, finishing in-flight units")

    async def _dispatch(self):
        semaphore = asyncio.Semaphore(self.concurrency)
        tasks = set()

        try:
            for unit in self.enumeration.units(self._start_record):
                if self._should_halt():
                    break
                await semaphore.acquire()
                if self._should_halt():
                    semaphore.release()
                    break
                if unit.group is not None and self.enumeration.group_ended(unit.group):
                    # Pulled before an earlier unit of its group came back empty
                    semaphore.release()
                    continue

                self.window.dispatched(unit)
                task = asyncio.create_task(self._process_unit(unit, semaphore))
                tasks.add(task)
                task.add_done_callback(tasks.discard)

            if tasks:
                await asyncio.gather(*list(tasks))
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

    async def _process_unit(self, unit: Unit, semaphore: asyncio.Semaphore):
        fetched = False
        try:
            if self.token.cancelled:
                # Left pending: the saved position points at this unit
                self._note_stop()
                return

            if self.job.known_unit_key is not None:
                key = self.job.known_unit_key(unit)
                if key is not None and self.accumulator.has_key(key):
                    self.log.info(f"{unit.label}: already collected, skipping")
                    self.units_skipped += 1
                    await self._finish_unit(unit)
                    return

            self.log.info(f"{unit.label}: fetching")
            fetched = True
            success, result, attempts = await self.retry_handler.execute_with_retry(
                self.fetcher.fetch_unit, unit, label=unit.label
            )

            if not success:
                self.log.error(f"{unit.label}: failed after {attempts} attempts, skipping ({result})")
                self.units_failed += 1
                self.failed_units.append(unit.label)
                await self._finish_unit(unit)
                return

            fetch_result = result if isinstance(result, FetchResult) else FetchResult(records=list(result or []))

            if not fetch_result.complete:
                # Keep what was read but leave the unit pending so a resume re-reads it
                await self._accept(unit, fetch_result.records, finished=False)
                self.log.info(f"{unit.label}: interrupted by stop, will resume here")
                self._note_stop()
                return

            await self._accept(unit, fetch_result.records)

            if not fetch_result.has_more or (not fetch_result.records and self.enumeration.stop_on_empty):
                self._end_of_data(unit)

        except SetupError as e:
            if self.fatal is None:
                self.fatal = e
            self.log.error(f"{unit.label}: fatal error, aborting job: {e}")
        except Exception as e:
            self.log.error(f"{unit.label}: unexpected error, skipping: {type(e).__name__}: {e}")
            self.units_failed += 1
            self.failed_units.append(unit.label)
            await self._finish_unit(unit)
        finally:
            try:
                if fetched:
                    await self.rate_limiter.wait()
            finally:
                semaphore.release()

    def _end_of_data(self, unit: Unit):
        if unit.group is not None:
            # Only the unit's own group is done; other groups keep going
            self.enumeration.end_group(unit.group)
            self.log.info(f"{unit.label}: no more data, ending this group")
            return
        if not self.exhausted:
            self.log.info(f"{unit.label}: no more data, ending enumeration")
        self.exhausted = True

    async def _accept(self, unit: Unit, raw_records: List[Dict[str, Any]], finished: bool = True):
        """Validate, accumulate and, unless told otherwise, mark a unit done."""
        validator = self.job.validator
        async with self.lock:
            added = 0
            for record in raw_records:
                reason = validator.validate(record) if validator else None
                if reason:
                    self.records_rejected += 1
                    self.log.warn(f"{unit.label}: dropped invalid record ({reason})")
                    continue
                if self.accumulator.add(record):
                    added += 1
            self.records_added += added
            self.log.info(
                f"{unit.label}: {len(raw_records)} extracted, {added} new, "
                f"{len(self.accumulator)} total"
            )
            if finished:
                self.units_processed += 1
                await self._mark_finished(unit)

    async def _finish_unit(self, unit: Unit):
        async with self.lock:
            await self._mark_finished(unit)

    async def _mark_finished(self, unit: Unit):
        # Caller holds self.lock
        self.window.finished(unit)
        self._since_flush += 1
        if self._since_flush >= self.config.flush_every:
            await self._flush()

    async def _flush(self) -> bool:
        """
        Write results, then the position. Caller holds self.lock.

        The position is only written after the results it covers, so a
        crash between the two re-processes units instead of losing them.
        """
        records = self.accumulator.records()
        position = self.window.position
        try:
            await asyncio.to_thread(self.controller.sink.append_or_replace, self.job_id, records)
        except Exception as e:
            self.log.error(f"Failed to write results: {type(e).__name__}: {e}")
            return False
        try:
            await asyncio.to_thread(self.controller.checkpoints.write, self.job_id, position)
        except Exception as e:
            self.log.error(f"Failed to save progress: {type(e).__name__}: {e}")
            return False
        self._since_flush = 0
        self.log.info(f"Saved {len(records)} records, next {self._describe(position)}")
        return True

    async def _finish_stopped(self) -> JobResult:
        async with self.lock:
            await self._flush()
        self.log.info(f"Progress kept at {self._describe(self.window.position)}")
        self.log.info(f"=== {self.job.title} ({self.job_id}) stopped ===")
        return self._create_result(JobOutcome.STOPPED)

    async def _finish_completed(self) -> JobResult:
        async with self.lock:
            saved = await self._flush()
        if not saved:
            self.log.error("Final results could not be written, progress kept for the next run")
            return self._create_result(JobOutcome.FAILED, error="final flush failed")

        await asyncio.to_thread(self.controller.checkpoints.delete, self.job_id)
        self.log.info(f"All units processed, {len(self.accumulator)} records saved")
        self.log.info(f"=== {self.job.title} ({self.job_id}) completed ===")
        return self._create_result(JobOutcome.COMPLETED)

    def _create_result(self, outcome: JobOutcome, error: Optional[str] = None) -> JobResult:
        """Create JobResult with calculated fields."""
        completed_at = datetime.now().isoformat()

        start = datetime.fromisoformat(self.started_at)
        end = datetime.fromisoformat(completed_at)
        duration = (end - start).total_seconds()

        records_per_hour = 0.0
        if duration > 0:
            records_per_hour = self.records_added / (duration / 3600)

        return JobResult(
            job_id=self.job_id,
            outcome=outcome,
            started_at=self.started_at,
            completed_at=completed_at,
            units_processed=self.units_processed,
            units_skipped=self.units_skipped,
            units_failed=self.units_failed,
            records_added=self.records_added,
            records_rejected=self.records_rejected,
            total_records=len(self.accumulator),
            failed_units=list(self.failed_units),
            duration_seconds=duration,
            records_per_hour=records_per_hour,
            error=error,
        )
