"""Pydantic schemas."""
from backend.app.schemas.jobs import (
    JobActionRequest,
    JobActionResponse,
    JobInfo,
    JobStatusResponse,
)

__all__ = [
    "JobActionRequest",
    "JobActionResponse",
    "JobInfo",
    "JobStatusResponse",
]
