"""
Result sinks: where a job's accumulated records are persisted.
Each job id owns one collection; a flush replaces it wholesale.
"""

import copy
import json
import logging
import os
import shutil
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from .resilience.progress_tracker import safe_job_filename

# Cross-platform file locking
try:
    import msvcrt
    WINDOWS = True
except ImportError:
    import fcntl
    WINDOWS = False

logger = logging.getLogger("golf_scraper.storage")

Record = Dict[str, Any]


@contextmanager
def file_lock(file_handle, exclusive=True):
    """Cross-platform file locking context manager."""
    if WINDOWS:
        mode = msvcrt.LK_LOCK if exclusive else msvcrt.LK_RLCK
        msvcrt.locking(file_handle.fileno(), mode, 1)
    else:
        fcntl.flock(file_handle.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
    try:
        yield
    finally:
        if WINDOWS:
            file_handle.seek(0)
            msvcrt.locking(file_handle.fileno(), msvcrt.LK_UNLCK, 1)
        else:
            fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN)


class ResultSink:
    """Interface of an append-or-replace record store."""

    def load_all(self, job_id: str) -> List[Record]:
        raise NotImplementedError

    def append_or_replace(self, job_id: str, records: List[Record]):
        raise NotImplementedError


class InMemoryResultSink(ResultSink):
    """Keeps collections in process memory."""

    def __init__(self):
        self._collections: Dict[str, List[Record]] = {}
        self._lock = threading.Lock()
        self.writes = 0

    def load_all(self, job_id: str) -> List[Record]:
        with self._lock:
            return copy.deepcopy(self._collections.get(job_id, []))

    def append_or_replace(self, job_id: str, records: List[Record]):
        with self._lock:
            self._collections[job_id] = copy.deepcopy(records)
            self.writes += 1


class JsonResultSink(ResultSink):
    """One pretty-printed <job>.json array per job, as the dashboard exports expect."""

    def __init__(self, data_dir: str = "data/stores"):
        """Initialize sink with output directory."""
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def path_for(self, job_id: str) -> Path:
        return self.data_dir / f"{safe_job_filename(job_id)}.json"

    @contextmanager
    def _locked(self, job_id: str, exclusive: bool = True):
        lock_path = self.path_for(job_id).with_suffix('.lock')
        with self._lock:
            with open(lock_path, 'a+', encoding='utf-8') as handle:
                with file_lock(handle, exclusive=exclusive):
                    yield

    def load_all(self, job_id: str) -> List[Record]:
        path = self.path_for(job_id)
        if not path.exists():
            return []

        with self._locked(job_id, exclusive=False):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.error(f"Output file corrupted for {job_id}: {e}")
                self._backup_corrupted(path)
                return []

        if not isinstance(data, list):
            logger.error(f"Output file for {job_id} is not a list, ignoring it")
            return []
        return data

    def _backup_corrupted(self, path: Path):
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = path.with_name(f"{path.stem}.corrupted.{timestamp}.json")
        shutil.copy2(path, backup_path)
        logger.warning(f"Backed up corrupted output to {backup_path}")

    def append_or_replace(self, job_id: str, records: List[Record]):
        path = self.path_for(job_id)
        temp_file = path.with_name(f"{path.stem}.tmp.json")
        with self._locked(job_id):
            try:
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(temp_file, path)
            except Exception:
                if temp_file.exists():
                    temp_file.unlink()
                raise
