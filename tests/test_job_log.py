"""Tests for the per-run log facade and logging setup."""

import logging

from golf_scraper.job_log import JobLog
from golf_scraper.logging_setup import LOGGER_NAME, setup_logging


def test_lines_reach_every_sink():
    first, second = [], []
    log = JobLog('okgolf', [lambda level, message: first.append((level, message))])
    log.add_sink(lambda level, message: second.append((level, message)))

    log.info("page 1: fetching")
    log.warn("page 1: dropped invalid record")
    log.error("page 2: failed after 3 attempts")

    assert [level for level, _ in first] == ['INFO', 'WARN', 'ERROR']
    assert first == second


def test_failing_sink_is_detached():
    received = []

    def broken(level, message):
        raise RuntimeError("stream closed")

    log = JobLog('okgolf', [broken, lambda level, message: received.append(message)])
    log.info("one")
    log.info("two")

    assert received == ["one", "two"]


def test_lines_go_to_job_logger(caplog):
    with caplog.at_level(logging.INFO, logger=f"{LOGGER_NAME}.jobs.citeezon"):
        JobLog('citeezon').warn("dropped")
    assert any(r.name == f"{LOGGER_NAME}.jobs.citeezon" and r.levelno == logging.WARNING
               for r in caplog.records)


def test_setup_logging_does_not_duplicate_handlers():
    setup_logging("DEBUG")
    setup_logging("INFO")
    logger = logging.getLogger(LOGGER_NAME)
    assert len([h for h in logger.handlers if isinstance(h, logging.StreamHandler)]) == 1
    assert logger.level == logging.INFO
