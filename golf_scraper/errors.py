"""
Exception types shared by the engine, the job catalogue and the API.
"""


class ScraperError(Exception):
    """Base class for scraper errors."""


class SetupError(ScraperError):
    """A job cannot start (missing input, fetcher unavailable). Never retried."""


class TransientFetchError(ScraperError):
    """A single unit fetch failed and may succeed on another attempt."""


class JobAlreadyRunningError(ScraperError):
    """A job id was started while a previous run is still active."""

    def __init__(self, job_id: str):
        super().__init__(f"Job '{job_id}' is already running")
        self.job_id = job_id


class UnknownJobError(ScraperError):
    """A job id that is not in the catalogue."""

    def __init__(self, job_id: str):
        super().__init__(f"Unknown job: {job_id}")
        self.job_id = job_id
