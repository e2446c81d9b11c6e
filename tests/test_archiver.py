"""Nested archive tests."""

import io
import json
import zipfile

import pytest

from event_export.export.archiver import EventHelper, compress_file_by_element_type, read_archive
from event_export.export.bundle import EventDataWrapper


@pytest.fixture
def bundle() -> EventDataWrapper:
    return EventDataWrapper(
        events=[{"event": "ev1", "trackedEntityInstance": "t1", "enrollment": "e1"}],
        enrollments=[{"enrollment": "e1"}],
        tracked_entity_instances=[{"trackedEntityInstance": "t1"}],
    )


def test_outer_archive_holds_three_deflated_zips(bundle) -> None:
    content = compress_file_by_element_type(bundle)

    with zipfile.ZipFile(io.BytesIO(content)) as outer:
        infos = outer.infolist()
        assert [i.filename for i in infos] == [
            "events.zip",
            "trackedEntityInstances.zip",
            "enrollments.zip",
        ]
        assert all(i.compress_type == zipfile.ZIP_DEFLATED for i in infos)

        for key, json_name, zip_name in EventHelper.MEMBERS:
            with zipfile.ZipFile(io.BytesIO(outer.read(zip_name))) as inner:
                inner_infos = inner.infolist()
                assert [i.filename for i in inner_infos] == [json_name]
                assert inner_infos[0].compress_type == zipfile.ZIP_DEFLATED

                payload = json.loads(inner.read(json_name))
                assert list(payload.keys()) == [key]
                assert isinstance(payload[key], list)


def test_archive_contents_match_bundle(bundle) -> None:
    assert read_archive(compress_file_by_element_type(bundle)) == bundle.to_dict()


def test_archive_accepts_plain_mapping_and_fills_missing_keys() -> None:
    content = compress_file_by_element_type({"events": [{"event": "ev1"}]})

    assert read_archive(content) == {
        "events": [{"event": "ev1"}],
        "trackedEntityInstances": [],
        "enrollments": [],
    }


def test_read_archive_rejects_non_zip() -> None:
    with pytest.raises(zipfile.BadZipFile):
        read_archive(b"not a zip")
