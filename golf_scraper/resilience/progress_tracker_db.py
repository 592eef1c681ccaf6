"""
Database-backed checkpoint store.
Uses SQLite by default for persistent Progress Records.
"""

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .progress_tracker import CheckpointStore, ProgressRecord

Base = declarative_base()


class JobProgress(Base):
    """One row per job id holding its serialized Progress Record."""
    __tablename__ = 'job_progress'

    job_id = Column(String(100), primary_key=True)
    record = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow)


class SqlCheckpointStore(CheckpointStore):
    """Checkpoint store persisted through SQLAlchemy."""

    def __init__(self, db_url: Optional[str] = None, db_path: str = "data/state/progress.db"):
        """
        Initialize store.

        Args:
            db_url: SQLAlchemy URL; overrides db_path when given
            db_path: Path to SQLite database file
        """
        if db_url is None:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{db_path}"

        engine_kwargs = {"echo": False}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            # Share one in-memory database across sessions and threads
            engine_kwargs.update(
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        elif db_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}

        self._engine = create_engine(db_url, **engine_kwargs)
        Base.metadata.create_all(self._engine)
        self._Session = sessionmaker(bind=self._engine)
        self._lock = threading.Lock()

    def _get_session(self) -> Session:
        return self._Session()

    def read(self, job_id: str, default: Optional[ProgressRecord] = None) -> ProgressRecord:
        with self._lock:
            session = self._get_session()
            try:
                row = session.get(JobProgress, job_id)
                if row is None:
                    return dict(default) if default is not None else {}
                return json.loads(row.record)
            finally:
                session.close()

    def write(self, job_id: str, record: ProgressRecord):
        payload = json.dumps(record, ensure_ascii=False)
        with self._lock:
            session = self._get_session()
            try:
                row = session.get(JobProgress, job_id)
                if row:
                    row.record = payload
                    row.updated_at = datetime.utcnow()
                else:
                    session.add(JobProgress(job_id=job_id, record=payload, updated_at=datetime.utcnow()))
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def delete(self, job_id: str):
        with self._lock:
            session = self._get_session()
            try:
                session.query(JobProgress).filter(JobProgress.job_id == job_id).delete()
                session.commit()
            finally:
                session.close()

    def exists(self, job_id: str) -> bool:
        with self._lock:
            session = self._get_session()
            try:
                return session.get(JobProgress, job_id) is not None
            finally:
                session.close()

    def close(self):
        self._engine.dispose()
