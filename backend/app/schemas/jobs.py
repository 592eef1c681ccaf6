"""Job control schemas."""
from pydantic import BaseModel


class JobInfo(BaseModel):
    """Catalogue entry with its current status."""
    job_id: str
    title: str
    status: str


class JobStatusResponse(BaseModel):
    job_id: str
    status: str


class JobActionRequest(BaseModel):
    action: str


class JobActionResponse(BaseModel):
    """Result of a control action."""
    job_id: str
    status: str
    message: str = ""
