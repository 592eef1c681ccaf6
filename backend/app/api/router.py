"""Main API router - aggregates all route modules."""
from fastapi import APIRouter

from backend.app.api.routes import jobs

api_router = APIRouter(prefix="/api")

api_router.include_router(jobs.router)
