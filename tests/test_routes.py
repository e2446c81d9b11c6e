"""HTTP surface tests for the /export routes."""

import io
import zipfile

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeResourceClient
from event_export.export import EventExportService, read_archive
from event_export.main import app
from event_export.routes import get_export_service


@pytest.fixture
def client(service):
    app.dependency_overrides[get_export_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


PERIOD_BODY = {
    "startDate": "2024-01-01",
    "endDate": "2024-01-31",
    "orgunits": [{"id": "A"}, {"id": "B"}],
}


def test_health() -> None:
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_export_events_returns_bundle(client) -> None:
    response = client.post("/export/events", json=PERIOD_BODY)

    assert response.status_code == 200
    body = response.json()
    assert [e["event"] for e in body["events"]] == ["ev1", "ev2", "ev3", "ev4"]
    assert [t["trackedEntityInstance"] for t in body["trackedEntityInstances"]] == ["t1", "t2"]
    assert [e["enrollment"] for e in body["enrollments"]] == ["e1", "e2"]


def test_export_events_from_last_returns_bundle(client, events_client) -> None:
    response = client.post(
        "/export/events/last",
        json={"lastUpdated": "2024-02-01", "orgunits": [{"id": "A"}], "programs": [{"id": "P1"}]},
    )

    assert response.status_code == 200
    assert events_client.calls == [
        {"lastUpdated": "2024-02-01", "ouMode": "DESCENDANTS", "ou": "A", "program": "P1"}
    ]


def test_zip_export_returns_archive_bytes(client) -> None:
    response = client.post("/export/events/zip", json=PERIOD_BODY)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="events_period_')
    assert disposition.endswith('.zip"')

    assert zipfile.ZipFile(io.BytesIO(response.content)).namelist() == [
        "events.zip",
        "trackedEntityInstances.zip",
        "enrollments.zip",
    ]
    contents = read_archive(response.content)
    assert len(contents["events"]) == 4
    assert len(contents["trackedEntityInstances"]) == 2
    assert len(contents["enrollments"]) == 2


def test_last_updated_zip_export(client) -> None:
    response = client.post(
        "/export/events/last/zip", json={"lastUpdated": "2024-02-01", "orgunits": [{"id": "B"}]}
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert 'filename="events_last_updated_' in response.headers["content-disposition"]
    assert [e["event"] for e in read_archive(response.content)["events"]] == ["ev3", "ev4"]


def test_zip_exports_leave_no_files_behind(client, tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    client.post("/export/events/zip", json=PERIOD_BODY)
    client.post("/export/events/last/zip", json={"lastUpdated": "2024-02-01", "orgunits": [{"id": "A"}]})

    assert list(tmp_path.rglob("*")) == []


def test_archive_routes_are_not_served(client) -> None:
    assert client.get("/export/archives").status_code == 404


def test_upstream_failure_is_502(tei_client, enrollment_client) -> None:
    def events_handler(params):
        raise httpx.ConnectError("connection refused")

    failing = EventExportService(
        events=FakeResourceClient(events_handler),
        tracked_entity_instances=tei_client,
        enrollments=enrollment_client,
    )
    app.dependency_overrides[get_export_service] = lambda: failing
    try:
        response = TestClient(app).post("/export/events/zip", json=PERIOD_BODY)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502
    assert "connection refused" in response.json()["detail"]


def test_service_not_configured_is_503() -> None:
    response = TestClient(app).post("/export/events", json=PERIOD_BODY)

    assert response.status_code == 503
