"""
Pydantic schemas for the export API.
Defines the request and response bodies of the /export routes.
"""

from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from enum import Enum


class ExportKind(str, Enum):
    PERIOD = "period"
    LAST_UPDATED = "last_updated"


class IdObject(BaseModel):
    """Org unit or program reference, as DHIS2 serializes it."""
    id: str
    name: Optional[str] = None


class PeriodExportRequest(BaseModel):
    """Export events between two dates."""
    startDate: str
    endDate: str
    orgunits: List[IdObject]
    programs: List[IdObject] = []


class LastUpdatedExportRequest(BaseModel):
    """Export events updated since a cutoff."""
    lastUpdated: str
    orgunits: List[IdObject]
    programs: List[IdObject] = []


class ExportBundle(BaseModel):
    """Events with their tracked entity instances and enrollments."""
    events: List[Dict[str, Any]] = []
    trackedEntityInstances: List[Dict[str, Any]] = []
    enrollments: List[Dict[str, Any]] = []
