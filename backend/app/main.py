"""FastAPI application entry point - job control API."""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api.deps import active_runner
from backend.app.api.router import api_router
from backend.app.core.config import settings
from golf_scraper.logging_setup import LOGGER_NAME, setup_logging

logger = logging.getLogger(f"{LOGGER_NAME}.api")

app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.api_version}


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to log all errors."""
    logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc}")
    logger.debug(traceback.format_exc())
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "type": type(exc).__name__}
    )


app.include_router(api_router)


@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    setup_logging(settings.log_level)
    logger.info(f"{settings.app_name} v{settings.api_version}")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Progress backend: {settings.state_backend}, data dir: {settings.data_dir}")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop running jobs so their progress is saved."""
    logger.info("Shutting down...")
    runner = active_runner()
    if runner is not None:
        await runner.shutdown()
    logger.info("Stopped")
