"""
Retry handling for unit fetches.
Each attempt is independent; nothing from a failed attempt is carried over.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Tuple

from ..config import RetryConfig
from ..errors import SetupError
from ..job_log import JobLog


class RetryHandler:
    """Runs an async callable up to max_attempts times with a fixed (or growing) pause."""

    def __init__(self, config: Optional[RetryConfig] = None, log: Optional[JobLog] = None):
        """
        Initialize retry handler.

        Args:
            config: RetryConfig instance, uses defaults if None
            log: JobLog narrating each failed attempt
        """
        self.config = config or RetryConfig()
        self.log = log

    async def execute_with_retry(
        self,
        func: Callable[..., Awaitable[Any]],
        *args,
        label: str = "",
        **kwargs
    ) -> Tuple[bool, Any, int]:
        """
        Execute an async function with retry logic.

        Args:
            func: Coroutine function to execute
            *args: Positional arguments for func
            label: Name of the unit for log lines
            **kwargs: Keyword arguments for func

        Returns:
            Tuple of (success, result or last error message, attempts made)

        Raises:
            SetupError: propagated immediately, never retried
        """
        last_error = None
        delay = self.config.delay
        max_attempts = self.config.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                return True, await func(*args, **kwargs), attempt
            except SetupError:
                raise
            except Exception as e:
                last_error = f"{type(e).__name__}: {e}"
                if self.log:
                    self.log.warn(f"{label} attempt {attempt}/{max_attempts} failed: {last_error}")

            # Don't sleep after last attempt
            if attempt < max_attempts:
                sleep_time = min(delay, self.config.max_delay)
                if self.log:
                    self.log.info(f"{label} retrying in {sleep_time:.1f}s...")
                await asyncio.sleep(sleep_time)
                delay *= self.config.backoff_factor

        return False, last_error, max_attempts
