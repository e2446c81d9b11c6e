"""
Event Export - DHIS2 events with their tracked entity instances and enrollments.

Fans export queries out over org unit/program combinations, backfills the
entities the events reference, and packs the result into a nested ZIP archive.
"""

__version__ = "1.0.0"

from .clients import Dhis2Connection, Dhis2ResourceClient, create_resource_clients, clean_response
from .config import Settings, load_settings, get_settings
from .export import (
    EventExportService,
    EventDataWrapper,
    DependencyResolver,
    EventHelper,
    compress_file_by_element_type,
    read_archive,
    create_export_service,
)

__all__ = [
    "Dhis2Connection",
    "Dhis2ResourceClient",
    "create_resource_clients",
    "clean_response",
    "Settings",
    "load_settings",
    "get_settings",
    "EventExportService",
    "EventDataWrapper",
    "DependencyResolver",
    "EventHelper",
    "compress_file_by_element_type",
    "read_archive",
    "create_export_service",
]
