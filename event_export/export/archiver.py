"""
Archiver: nested ZIP packaging for event exports

The archive is a ZIP of ZIPs. Each entity type is written to its own JSON
file, that file is deflated into a single-entry ZIP, and the three ZIPs are
deflated into the outer archive:

    export.zip
        events.zip                  -> events.json                  {"events": [...]}
        trackedEntityInstances.zip  -> trackedEntityInstances.json  {"trackedEntityInstances": [...]}
        enrollments.zip             -> enrollments.json             {"enrollments": [...]}

Consumers import each inner ZIP on its own, so the nesting must be kept.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union
import io
import json
import logging
import zipfile

from .bundle import EventDataWrapper

logger = logging.getLogger(__name__)


class EventHelper:
    """Naming convention shared with the import side."""

    EVENTS = "events"
    TEIS = "trackedEntityInstances"
    ENROLLMENTS = "enrollments"

    EVENTS_JSON = "events.json"
    TEIS_JSON = "trackedEntityInstances.json"
    ENROLLMENTS_JSON = "enrollments.json"

    EVENTS_ZIP = "events.zip"
    TEIS_ZIP = "trackedEntityInstances.zip"
    ENROLLMENTS_ZIP = "enrollments.zip"

    # (bundle key, inner json name, inner zip name), in archive order
    MEMBERS = (
        (EVENTS, EVENTS_JSON, EVENTS_ZIP),
        (TEIS, TEIS_JSON, TEIS_ZIP),
        (ENROLLMENTS, ENROLLMENTS_JSON, ENROLLMENTS_ZIP),
    )


def _zip_single(name: str, data: bytes) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(name, data)
    return buffer.getvalue()


def compress_file_by_element_type(
    file: Union[EventDataWrapper, Mapping[str, List[Any]]]
) -> bytes:
    """
    Build the nested export archive.

    Args:
        file: Export result, as an EventDataWrapper or a mapping with the keys
              "events", "trackedEntityInstances" and "enrollments"
              (a missing key is written as an empty list)

    Returns:
        Bytes of the outer ZIP archive
    """
    if isinstance(file, EventDataWrapper):
        file = file.to_dict()

    outer = io.BytesIO()
    with zipfile.ZipFile(outer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for key, json_name, zip_name in EventHelper.MEMBERS:
            payload = json.dumps({key: file.get(key) or []}).encode("utf-8")
            zf.writestr(zip_name, _zip_single(json_name, payload))
            logger.debug(f"[ARCHIVE] {zip_name}: {len(payload)} bytes of JSON")

    content = outer.getvalue()
    logger.info(f"[ARCHIVE] Built export archive ({len(content)} bytes)")
    return content


def read_archive(content: bytes) -> Dict[str, List[Any]]:
    """
    Unpack an archive produced by compress_file_by_element_type.

    Returns:
        Dictionary with the "events", "trackedEntityInstances" and
        "enrollments" lists

    Raises:
        zipfile.BadZipFile: If the content is not a ZIP archive
        KeyError: If an expected member is absent
    """
    result: Dict[str, List[Any]] = {}
    with zipfile.ZipFile(io.BytesIO(content)) as outer:
        for key, json_name, zip_name in EventHelper.MEMBERS:
            with zipfile.ZipFile(io.BytesIO(outer.read(zip_name))) as inner:
                result[key] = json.loads(inner.read(json_name))[key]
    return result
