"""Pytest fixtures for the event export tests.

FakeResourceClient stands in for a DHIS2 resource client: it records every
query and answers through a handler, optionally after a per-query delay.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from event_export.export import EventExportService


class FakeResourceClient:
    """In-memory ResourceClient."""

    def __init__(
        self,
        handler: Callable[[Dict[str, Any]], Dict[str, Any]],
        delay: Optional[Callable[[Dict[str, Any]], float]] = None,
    ):
        self.handler = handler
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    async def get(self, **params: Any) -> Dict[str, Any]:
        self.calls.append(params)
        if self.delay is not None:
            await asyncio.sleep(self.delay(params))
        return self.handler(params)


def by_uid(key: str, records: Dict[str, Dict[str, Any]]):
    """Handler answering uid lookups from `records` and list queries with nothing."""

    def handler(params: Dict[str, Any]) -> Dict[str, Any]:
        if "uid" in params:
            return records[params["uid"]]
        return {key: []}

    return handler


@pytest.fixture
def tei_records() -> Dict[str, Dict[str, Any]]:
    return {
        "t1": {"trackedEntityInstance": "t1", "orgUnit": "A", "attributes": []},
        "t2": {"trackedEntityInstance": "t2", "orgUnit": "B", "attributes": []},
    }


@pytest.fixture
def enrollment_records() -> Dict[str, Dict[str, Any]]:
    return {
        "e1": {"enrollment": "e1", "trackedEntityInstance": "t1", "program": "P1"},
        "e2": {"enrollment": "e2", "trackedEntityInstance": "t2", "program": "P1"},
    }


@pytest.fixture
def events_by_ou() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "A": [
            {"event": "ev1", "orgUnit": "A", "trackedEntityInstance": "t1", "enrollment": "e1"},
            {"event": "ev2", "orgUnit": "A", "trackedEntityInstance": "t1", "enrollment": "e1"},
        ],
        "B": [
            {"event": "ev3", "orgUnit": "B", "trackedEntityInstance": "t2", "enrollment": "e2"},
            {"event": "ev4", "orgUnit": "B"},
        ],
    }


@pytest.fixture
def events_client(events_by_ou) -> FakeResourceClient:
    return FakeResourceClient(lambda params: {"events": list(events_by_ou.get(params["ou"], []))})


@pytest.fixture
def tei_client(tei_records) -> FakeResourceClient:
    return FakeResourceClient(by_uid("trackedEntityInstances", tei_records))


@pytest.fixture
def enrollment_client(enrollment_records) -> FakeResourceClient:
    return FakeResourceClient(by_uid("enrollments", enrollment_records))


@pytest.fixture
def service(events_client, tei_client, enrollment_client) -> EventExportService:
    return EventExportService(
        events=events_client,
        tracked_entity_instances=tei_client,
        enrollments=enrollment_client,
    )
