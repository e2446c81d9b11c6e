"""
Export API Routes

Runs event exports against the configured DHIS2 instance. The zip routes
answer with the nested archive itself; nothing is kept on the server.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Response

from .export import EventExportService
from .schemas import (
    ExportBundle,
    ExportKind,
    LastUpdatedExportRequest,
    PeriodExportRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/export", tags=["Event Export"])

ZIP_MEDIA_TYPE = "application/zip"


# ============================================================
# DEPENDENCIES
# ============================================================

# Set by main.py once the DHIS2 connection is open
_export_service: Optional[EventExportService] = None


def set_export_service(service: Optional[EventExportService]) -> None:
    """Allow main.py to share the service built from settings."""
    global _export_service
    _export_service = service


def get_export_service() -> EventExportService:
    if _export_service is None:
        raise HTTPException(status_code=503, detail="DHIS2 connection is not configured")
    return _export_service


def _upstream_error(e: httpx.HTTPError) -> HTTPException:
    logger.error(f"[EXPORT] Upstream call failed: {e}")
    return HTTPException(status_code=502, detail=f"DHIS2 request failed: {e}")


def _archive_name(kind: ExportKind) -> str:
    return f"events_{kind.value}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.zip"


def _zip_response(content: bytes, kind: ExportKind) -> Response:
    filename = _archive_name(kind)
    logger.info(f"[EXPORT] Sending {filename} ({len(content)} bytes)")
    return Response(
        content=content,
        media_type=ZIP_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ============================================================
# ROUTES
# ============================================================

@router.post("/events", response_model=ExportBundle)
async def export_events(
    request: PeriodExportRequest,
    service: EventExportService = Depends(get_export_service)
):
    """Export events between startDate and endDate with their dependencies."""
    logger.info(f"Period export: {request.startDate}..{request.endDate}, {len(request.orgunits)} org units")
    try:
        bundle = await service.export_events_with_dependencies(
            request.startDate, request.endDate, request.orgunits, request.programs
        )
    except httpx.HTTPError as e:
        raise _upstream_error(e)
    return bundle.to_dict()


@router.post("/events/last", response_model=ExportBundle)
async def export_events_from_last(
    request: LastUpdatedExportRequest,
    service: EventExportService = Depends(get_export_service)
):
    """Export events updated since lastUpdated with their dependencies."""
    logger.info(f"Incremental export since {request.lastUpdated}, {len(request.orgunits)} org units")
    try:
        bundle = await service.export_events_from_last_with_dependencies(
            request.lastUpdated, request.orgunits, request.programs
        )
    except httpx.HTTPError as e:
        raise _upstream_error(e)
    return bundle.to_dict()


@router.post("/events/zip", response_class=Response)
async def export_events_zip(
    request: PeriodExportRequest,
    service: EventExportService = Depends(get_export_service)
):
    """Run a period export and return the nested ZIP archive."""
    try:
        content = await service.export_events_with_dependencies_in_zip(
            request.startDate, request.endDate, request.orgunits, request.programs
        )
    except httpx.HTTPError as e:
        raise _upstream_error(e)
    return _zip_response(content, ExportKind.PERIOD)


@router.post("/events/last/zip", response_class=Response)
async def export_events_from_last_zip(
    request: LastUpdatedExportRequest,
    service: EventExportService = Depends(get_export_service)
):
    """Run an incremental export and return the nested ZIP archive."""
    try:
        content = await service.export_events_from_last_with_dependencies_in_zip(
            request.lastUpdated, request.orgunits, request.programs
        )
    except httpx.HTTPError as e:
        raise _upstream_error(e)
    return _zip_response(content, ExportKind.LAST_UPDATED)
