"""Job control routes: list, stream, stop and progress reset."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from backend.app.api.deps import get_runner
from backend.app.schemas import JobActionRequest, JobActionResponse, JobInfo, JobStatusResponse
from golf_scraper.errors import JobAlreadyRunningError, ScraperError, UnknownJobError
from golf_scraper.job_runner import JobRunner, format_sse

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _ensure_known(runner: JobRunner, job_id: str):
    if job_id not in runner.catalogue:
        raise HTTPException(status_code=404, detail=f"Unknown job: {job_id}")


def _stop(runner: JobRunner, job_id: str) -> JobActionResponse:
    _ensure_known(runner, job_id)
    stopping = runner.request_stop(job_id)
    return JobActionResponse(
        job_id=job_id,
        status=runner.status(job_id).value,
        message="stop requested" if stopping else "job is not running",
    )


@router.get("", response_model=List[JobInfo])
def list_jobs(runner: JobRunner = Depends(get_runner)):
    """List catalogue jobs with their status."""
    statuses = runner.statuses()
    return [
        JobInfo(job_id=job_id, title=job.title, status=statuses[job_id].value)
        for job_id, job in runner.catalogue.items()
    ]


@router.get("/{job_id}/status", response_model=JobStatusResponse)
def get_status(job_id: str, runner: JobRunner = Depends(get_runner)):
    _ensure_known(runner, job_id)
    return JobStatusResponse(job_id=job_id, status=runner.status(job_id).value)


@router.get("/{job_id}/stream")
async def stream_job(job_id: str, fresh: bool = False, runner: JobRunner = Depends(get_runner)):
    """Start a job and stream its log as Server-Sent Events."""
    try:
        runner.start(job_id, resume=not fresh)
    except UnknownJobError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except JobAlreadyRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))

    async def event_stream():
        # A client that disconnects stops the run instead of leaving it unread
        async for event, data in runner.events(job_id, stop_on_close=True):
            yield format_sse(event, data)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("/{job_id}/stop", response_model=JobActionResponse)
def stop_job(job_id: str, runner: JobRunner = Depends(get_runner)):
    """Ask a running job to stop after its in-flight units."""
    return _stop(runner, job_id)


@router.post("/{job_id}", response_model=JobActionResponse)
def job_action(job_id: str, request: JobActionRequest, runner: JobRunner = Depends(get_runner)):
    if request.action != "stop":
        raise HTTPException(status_code=400, detail=f"Invalid action: {request.action}")
    return _stop(runner, job_id)


@router.delete("/{job_id}/progress", response_model=JobActionResponse)
def reset_progress(job_id: str, runner: JobRunner = Depends(get_runner)):
    """Forget a job's saved position so the next run starts over."""
    _ensure_known(runner, job_id)
    try:
        runner.reset_progress(job_id)
    except ScraperError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return JobActionResponse(job_id=job_id, status=runner.status(job_id).value, message="progress cleared")
