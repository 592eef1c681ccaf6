"""
Per-run log facade.

Every line goes to the stdlib logger of the job and to each injected sink,
so the HTTP layer can forward the same narration as Server-Sent Events.
"""

import logging
from typing import Callable, Iterable, List

from .logging_setup import LOGGER_NAME

LogSink = Callable[[str, str], None]

INFO = "INFO"
WARN = "WARN"
ERROR = "ERROR"

_LEVELS = {
    INFO: logging.INFO,
    WARN: logging.WARNING,
    ERROR: logging.ERROR,
}


class JobLog:
    """Fans log lines out to the job logger and to injectable sinks."""

    def __init__(self, job_id: str, sinks: Iterable[LogSink] = ()):
        self.job_id = job_id
        self.logger = logging.getLogger(f"{LOGGER_NAME}.jobs.{job_id}")
        self._sinks: List[LogSink] = list(sinks)

    def add_sink(self, sink: LogSink):
        self._sinks.append(sink)

    def info(self, message: str):
        self._emit(INFO, message)

    def warn(self, message: str):
        self._emit(WARN, message)

    def error(self, message: str):
        self._emit(ERROR, message)

    def _emit(self, level: str, message: str):
        self.logger.log(_LEVELS[level], message)
        for sink in list(self._sinks):
            try:
                sink(level, message)
            except Exception as e:
                # A broken sink (closed stream, full queue) must not break the run
                self._sinks.remove(sink)
                self.logger.warning(f"Detached failing log sink: {e}")
