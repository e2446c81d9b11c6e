"""
=============================================================================
DHIS2 RESOURCE CLIENTS
=============================================================================

PURPOSE:
    Read events, tracked entity instances and enrollments from the DHIS2
    Web API for the export service.

HOW IT WORKS:
    Every resource client wraps one API collection and exposes a single
    coroutine, get(**params):

        get(ou="A", ouMode="DESCENDANTS")  ->  GET /api/events.json?ou=A&...
        get(uid="abc123")                  ->  GET /api/trackedEntityInstances/abc123.json

    Params whose value is None are left out of the query string.

ERRORS:
    Nothing is caught here. A non-2xx answer raises httpx.HTTPStatusError,
    network problems raise httpx.TransportError, and both reach the caller
    unchanged.

USAGE:
    connection = Dhis2Connection(base_url="https://play.dhis2.org/40", ...)
    clients = create_resource_clients(connection)
    payload = await clients.events.get(ou="DiszpKrYNg8", ouMode="DESCENDANTS")

=============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol
import json
import logging

import httpx
from pydantic import BaseModel

from .connection import Dhis2Connection

logger = logging.getLogger(__name__)

EVENTS_RESOURCE = "events"
TRACKED_ENTITY_INSTANCES_RESOURCE = "trackedEntityInstances"
ENROLLMENTS_RESOURCE = "enrollments"

# Collection queries return every page in one response
LIST_DEFAULT_PARAMS = {"skipPaging": "true"}


class ResourceClient(Protocol):
    """Anything the export service can query for one entity type."""

    async def get(self, **params: Any) -> Dict[str, Any]:
        """Return the decoded JSON body for the given query params."""
        ...


class Dhis2ResourceClient:
    """
    Async client for one DHIS2 API collection.

    A query with a "uid" param targets the single-object endpoint; all other
    queries target the collection endpoint.
    """

    def __init__(
        self,
        connection: Dhis2Connection,
        resource: str,
        default_params: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            connection: Shared connection (base URL, auth, HTTP client)
            resource: API collection name, e.g. "events"
            default_params: Params added to every collection query
        """
        self.connection = connection
        self.resource = resource
        self.default_params = dict(default_params or {})

    def build_request(self, params: Dict[str, Any]) -> tuple[str, Dict[str, Any]]:
        """
        Work out the request path and query params.

        Returns:
            Tuple of (path relative to /api, query params without None values)
        """
        query = {k: v for k, v in params.items() if v is not None}
        uid = query.pop("uid", None)

        if uid is not None:
            return f"/{self.resource}/{uid}.json", query

        merged = dict(self.default_params)
        merged.update(query)
        return f"/{self.resource}.json", merged

    async def get(self, **params: Any) -> Dict[str, Any]:
        """
        Query the resource.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
            httpx.TransportError: When the server cannot be reached
        """
        path, query = self.build_request(params)
        logger.debug(f"[DHIS2] GET {path} {query}")

        response = await self.connection.client.get(path, params=query)
        response.raise_for_status()
        return response.json()

    def __repr__(self) -> str:
        return f"Dhis2ResourceClient(resource='{self.resource}', connection={self.connection!r})"


@dataclass(frozen=True)
class ResourceClients:
    """The three collaborators the export service needs."""
    events: ResourceClient
    tracked_entity_instances: ResourceClient
    enrollments: ResourceClient


def create_resource_clients(connection: Dhis2Connection) -> ResourceClients:
    """Build the events, trackedEntityInstances and enrollments clients for a connection."""
    return ResourceClients(
        events=Dhis2ResourceClient(connection, EVENTS_RESOURCE, LIST_DEFAULT_PARAMS),
        tracked_entity_instances=Dhis2ResourceClient(
            connection, TRACKED_ENTITY_INSTANCES_RESOURCE, LIST_DEFAULT_PARAMS
        ),
        enrollments=Dhis2ResourceClient(connection, ENROLLMENTS_RESOURCE, LIST_DEFAULT_PARAMS),
    )


# ============================================================
# RESPONSE NORMALIZATION
# ============================================================

def _strip_metadata(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: _strip_metadata(v)
            for k, v in value.items()
            if not (isinstance(k, str) and k.startswith("$"))
        }
    if isinstance(value, list):
        return [_strip_metadata(v) for v in value]
    return value


def clean_response(response: Any) -> Any:
    """
    Turn a fetched resource into plain JSON data.

    Accepts a decoded body, an httpx.Response or a pydantic model. Keys that
    start with "$" are client/runtime bookkeeping, not DHIS2 fields, and are
    dropped at every level. The result is a fresh structure made only of
    dicts, lists, strings, numbers, booleans and None.

    Args:
        response: The raw value returned by a resource client

    Returns:
        A deep, JSON-equivalent copy of the domain payload
    """
    if isinstance(response, httpx.Response):
        response = response.json()
    elif isinstance(response, BaseModel):
        response = response.model_dump(mode="json")

    return json.loads(json.dumps(_strip_metadata(response), default=str))
