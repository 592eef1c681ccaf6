"""
Fixed-delay request pacing.
"""

import asyncio
from typing import Optional

from ..config import RateLimitConfig


class RateLimiter:
    """Sleeps a fixed delay after each request, before a concurrency slot is released."""

    def __init__(self, config: Optional[RateLimitConfig] = None):
        self.config = config or RateLimitConfig()
        self._requests = 0

    async def wait(self):
        """Wait out the inter-request delay."""
        self._requests += 1
        if self.config.delay > 0:
            await asyncio.sleep(self.config.delay)

    def get_stats(self) -> dict:
        return {
            'delay': self.config.delay,
            'requests': self._requests,
        }
