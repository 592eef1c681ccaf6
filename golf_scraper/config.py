"""
Configuration dataclasses for the scrape engine.
"""

from dataclasses import dataclass, field


STATE_BACKENDS = ('memory', 'json', 'sqlite')


@dataclass
class RateLimitConfig:
    """Fixed inter-request delay applied after every fetched unit."""
    delay: float = 1.0
    # Pause between follow-up requests inside one unit ("more" pages)
    more_delay: float = 2.0


@dataclass
class RetryConfig:
    """Configuration for per-unit retry behavior."""
    max_attempts: int = 3
    delay: float = 1.0
    backoff_factor: float = 1.0
    max_delay: float = 30.0


@dataclass
class ScraperConfig:
    """Main configuration for the scrape engine."""
    # Unit processing
    concurrency: int = 5
    flush_every: int = 5

    # Persistence
    data_dir: str = "data/stores"
    state_dir: str = "data/state"
    state_backend: str = "json"

    # Request pacing
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)

    # Retry settings
    retry: RetryConfig = field(default_factory=RetryConfig)

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.flush_every < 1:
            raise ValueError(f"flush_every must be >= 1, got {self.flush_every}")
        if self.retry.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.retry.max_attempts}")
        if self.rate_limit.delay < 0 or self.rate_limit.more_delay < 0:
            raise ValueError("rate limit delays must be >= 0")
        if self.state_backend not in STATE_BACKENDS:
            raise ValueError(
                f"Invalid state backend: {self.state_backend}. Must be one of {STATE_BACKENDS}"
            )
