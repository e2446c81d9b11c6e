"""
Export Module: events with their tracked entity instances and enrollments

This module provides:
- EventExportService: fan-out queries, dependency backfill, archive variants
- DependencyResolver: identifiers referenced by events, and the missing ones
- EventDataWrapper and the list wrappers: per-export result containers
- compress_file_by_element_type / read_archive: nested ZIP packaging
"""

from .archiver import EventHelper, compress_file_by_element_type, read_archive
from .bundle import (
    EnrollmentList,
    EventDataWrapper,
    EventList,
    TrackedEntityInstanceList,
)
from .combos import OrgunitProgramComboItem, get_orgunit_program_combo
from .dependencies import (
    DependencyResolver,
    extract_events_property,
    find_missing,
    get_unique_in_list,
)
from .service import EventExportService, create_export_service

__all__ = [
    "EventHelper",
    "compress_file_by_element_type",
    "read_archive",
    "EnrollmentList",
    "EventDataWrapper",
    "EventList",
    "TrackedEntityInstanceList",
    "OrgunitProgramComboItem",
    "get_orgunit_program_combo",
    "DependencyResolver",
    "extract_events_property",
    "find_missing",
    "get_unique_in_list",
    "EventExportService",
    "create_export_service",
]
