"""
Catalogue of site jobs, each a thin configuration of the scrape loop.
"""

from typing import Dict, Optional

from ..errors import UnknownJobError
from ..models import JobDefinition
from . import citeezon, citeezon_details, friendgolf, okgolf, sggolf

JOB_MODULES = (okgolf, citeezon, citeezon_details, friendgolf, sggolf)


def build_catalogue() -> Dict[str, JobDefinition]:
    """Create a fresh id -> JobDefinition mapping."""
    jobs = [module.create_job() for module in JOB_MODULES]
    return {job.job_id: job for job in jobs}


def get_job(job_id: str, catalogue: Optional[Dict[str, JobDefinition]] = None) -> JobDefinition:
    """
    Look up a job definition.

    Raises:
        UnknownJobError: if job_id is not in the catalogue
    """
    catalogue = catalogue if catalogue is not None else build_catalogue()
    try:
        return catalogue[job_id]
    except KeyError:
        raise UnknownJobError(job_id) from None
