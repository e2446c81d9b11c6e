"""
Event Export Backend: FastAPI Server

Exposes the DHIS2 event export over HTTP:
1. Exports events (by period or lastUpdated cutoff) with their tracked
   entity instances and enrollments as JSON
2. Returns the same exports as nested ZIP archives

Run with: uvicorn event_export.main:app --reload --port 8000
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .export import create_export_service
from .logging_config import LOGGER_NAME, setup_logging
from .routes import router as export_router, set_export_service

logger = logging.getLogger(LOGGER_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)

    logger.info("=" * 60)
    logger.info("  EVENT EXPORT BACKEND STARTING")
    logger.info("=" * 60)

    connection = None
    if settings.dhis2_url:
        connection = settings.connection()
        set_export_service(create_export_service(connection))
        logger.info(f"DHIS2: {connection!r}")
    else:
        logger.warning("DHIS2_URL not set, export routes will answer 503")

    yield

    set_export_service(None)
    if connection is not None:
        await connection.aclose()
    logger.info("=" * 60)
    logger.info("  EVENT EXPORT BACKEND SHUTTING DOWN")
    logger.info("=" * 60)


app = FastAPI(
    title="Event Export Backend",
    description="Exports DHIS2 events with tracked entity instances and enrollments",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(export_router)


@app.get("/")
async def root():
    """Service status."""
    return {
        "service": "Event Export Backend",
        "status": "running",
        "version": __version__,
    }


@app.get("/health")
async def health():
    """Simple health check endpoint."""
    logger.debug("Health check")
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
