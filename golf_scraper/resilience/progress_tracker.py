"""
Checkpoint stores for resumable jobs.
One opaque Progress Record per job id.
"""

import copy
import json
import logging
import os
import re
import shutil
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("golf_scraper.checkpoints")

ProgressRecord = Dict[str, Any]


class CheckpointStore:
    """Interface of a job-id keyed Progress Record store."""

    def read(self, job_id: str, default: Optional[ProgressRecord] = None) -> ProgressRecord:
        raise NotImplementedError

    def write(self, job_id: str, record: ProgressRecord):
        raise NotImplementedError

    def delete(self, job_id: str):
        raise NotImplementedError

    def exists(self, job_id: str) -> bool:
        raise NotImplementedError


class InMemoryCheckpointStore(CheckpointStore):
    """Process-lifetime store, suitable for single-process deployments and tests."""

    def __init__(self):
        self._records: Dict[str, ProgressRecord] = {}
        self._lock = threading.Lock()

    def read(self, job_id: str, default: Optional[ProgressRecord] = None) -> ProgressRecord:
        with self._lock:
            if job_id in self._records:
                return copy.deepcopy(self._records[job_id])
        return copy.deepcopy(default) if default is not None else {}

    def write(self, job_id: str, record: ProgressRecord):
        with self._lock:
            self._records[job_id] = copy.deepcopy(record)

    def delete(self, job_id: str):
        with self._lock:
            self._records.pop(job_id, None)

    def exists(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._records


def safe_job_filename(job_id: str) -> str:
    """Sanitize a job id for use in a filename."""
    name = re.sub(r'[^A-Za-z0-9_.-]', '_', job_id).strip('._')
    return name[:100] or "unknown"


class JsonCheckpointStore(CheckpointStore):
    """One progress_<job>.json file per job, written atomically."""

    def __init__(self, state_dir: str = "data/state"):
        """
        Initialize store with state directory.

        Args:
            state_dir: Directory to store progress files
        """
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, job_id: str) -> Path:
        return self.state_dir / f"progress_{safe_job_filename(job_id)}.json"

    def read(self, job_id: str, default: Optional[ProgressRecord] = None) -> ProgressRecord:
        fallback = copy.deepcopy(default) if default is not None else {}
        path = self._path(job_id)
        with self._lock:
            if not path.exists():
                return fallback
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.error(f"Progress file corrupted for {job_id}: {e}")
                self._backup_corrupted(path)
                return fallback

        if not isinstance(data, dict):
            logger.error(f"Progress file for {job_id} is not an object, ignoring it")
            return fallback
        return data

    def _backup_corrupted(self, path: Path):
        """Move a corrupted progress file aside so the job restarts cleanly."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = path.with_name(f"{path.stem}.corrupted.{timestamp}.json")
        shutil.move(str(path), str(backup_path))
        logger.warning(f"Backed up corrupted progress to {backup_path}")

    def write(self, job_id: str, record: ProgressRecord):
        path = self._path(job_id)
        temp_file = path.with_name(f"{path.stem}.tmp.json")
        with self._lock:
            try:
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(record, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                # Atomic on POSIX and on Windows with Python 3.3+
                os.replace(temp_file, path)
            except Exception:
                if temp_file.exists():
                    temp_file.unlink()
                raise

    def delete(self, job_id: str):
        path = self._path(job_id)
        with self._lock:
            if path.exists():
                path.unlink()

    def exists(self, job_id: str) -> bool:
        return self._path(job_id).exists()
