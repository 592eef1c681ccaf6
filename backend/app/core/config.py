"""Application configuration."""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from golf_scraper.config import RateLimitConfig, RetryConfig, ScraperConfig


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    app_name: str = "Golf Scraper API"
    api_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Engine
    data_dir: str = "data/stores"
    state_dir: str = "data/state"
    state_backend: str = "json"
    state_db_url: Optional[str] = None  # Optional - overrides state_dir for sqlite
    concurrency: int = 5
    flush_every: int = 5
    request_delay: float = 1.0
    more_delay: float = 2.0
    max_attempts: int = 3
    retry_delay: float = 1.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS - accepts comma-separated string from env
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Return CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def to_scraper_config(self) -> ScraperConfig:
        return ScraperConfig(
            concurrency=self.concurrency,
            flush_every=self.flush_every,
            data_dir=self.data_dir,
            state_dir=self.state_dir,
            state_backend=self.state_backend,
            rate_limit=RateLimitConfig(delay=self.request_delay, more_delay=self.more_delay),
            retry=RetryConfig(max_attempts=self.max_attempts, delay=self.retry_delay),
        )


settings = Settings()
