"""
Event Export Service: events plus their dependencies

Exports events for a set of org units (and their descendants), optionally
narrowed to a set of programs, together with every tracked entity instance
and enrollment those events reference.

Pipeline:
1. FAN-OUT: one query per org unit/program combination, all in flight at
   once, results concatenated in combination order
2. RESOLVE: collect the TEI and enrollment uids the events point at
3. FETCH: one request per uid, concurrently, appended to the bundle
4. ARCHIVE (zip variants): nested ZIP, see archiver.py

Any failed request fails the whole export; there are no partial results.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence
import asyncio
import logging

from ..clients.connection import Dhis2Connection
from ..clients.dhis2_client import ResourceClient, clean_response, create_resource_clients
from .archiver import compress_file_by_element_type
from .bundle import (
    EnrollmentList,
    EventDataWrapper,
    EventList,
    TrackedEntityInstanceList,
)
from .combos import OrgunitProgramComboItem, get_orgunit_program_combo
from .dependencies import DependencyResolver

logger = logging.getLogger(__name__)

OU_MODE_DESCENDANTS = "DESCENDANTS"


class EventExportService:
    """
    Orchestrates event exports against three resource clients.

    Usage:
        clients = create_resource_clients(connection)
        service = EventExportService(
            events=clients.events,
            tracked_entity_instances=clients.tracked_entity_instances,
            enrollments=clients.enrollments,
        )

        bundle = await service.export_events_with_dependencies(
            "2024-01-01", "2024-01-31", orgunits=[{"id": "DiszpKrYNg8"}]
        )
        archive = await service.export_events_with_dependencies_in_zip(
            "2024-01-01", "2024-01-31", orgunits=["DiszpKrYNg8"], programs=["IpHINAT79UW"]
        )
    """

    def __init__(
        self,
        *,
        events: ResourceClient,
        tracked_entity_instances: ResourceClient,
        enrollments: ResourceClient,
        resolver: Optional[DependencyResolver] = None
    ):
        self.events = events
        self.tracked_entity_instances = tracked_entity_instances
        self.enrollments = enrollments
        self.resolver = resolver or DependencyResolver()

    # ============================================================
    # PUBLIC EXPORTS
    # ============================================================

    async def export_events_with_dependencies_in_zip(
        self,
        start_date: str,
        end_date: str,
        orgunits: Sequence[Any],
        programs: Optional[Sequence[Any]] = None
    ) -> bytes:
        """Same as export_events_with_dependencies, packed as a nested ZIP archive."""
        bundle = await self.export_events_with_dependencies(start_date, end_date, orgunits, programs)
        return compress_file_by_element_type(bundle)

    async def export_events_from_last_with_dependencies_in_zip(
        self,
        last_updated: str,
        orgunits: Sequence[Any],
        programs: Optional[Sequence[Any]] = None
    ) -> bytes:
        """Same as export_events_from_last_with_dependencies, packed as a nested ZIP archive."""
        bundle = await self.export_events_from_last_with_dependencies(last_updated, orgunits, programs)
        return compress_file_by_element_type(bundle)

    async def export_events_with_dependencies(
        self,
        start_date: str,
        end_date: str,
        orgunits: Sequence[Any],
        programs: Optional[Sequence[Any]] = None
    ) -> EventDataWrapper:
        """
        Export events between two dates with their TEIs and enrollments.

        Args:
            start_date: Start of export period
            end_date: End of export period
            orgunits: Org units (descendants included)
            programs: Optional programs to narrow the export

        Returns:
            EventDataWrapper holding events, trackedEntityInstances and enrollments
        """
        logger.info(
            f"[EXPORT] Events {start_date}..{end_date} for "
            f"{len(orgunits)} org units, {len(programs or [])} programs"
        )
        events = await self.get_events(start_date, end_date, orgunits, programs)
        return await self.add_related_tracked_entities_and_enrollments(events)

    async def export_events_from_last_with_dependencies(
        self,
        last_updated: str,
        orgunits: Sequence[Any],
        programs: Optional[Sequence[Any]] = None
    ) -> EventDataWrapper:
        """
        Export everything updated since `last_updated` with missing dependencies.

        Events, TEIs and enrollments updated since the cutoff are fetched
        together; afterwards only the TEIs and enrollments that the events
        reference but that were not part of those answers are backfilled.

        Args:
            last_updated: Cutoff date for the lastUpdated filter
            orgunits: Org units (descendants included)
            programs: Optional programs to narrow the export

        Returns:
            EventDataWrapper holding events, trackedEntityInstances and enrollments
        """
        logger.info(
            f"[EXPORT] Changes since {last_updated} for "
            f"{len(orgunits)} org units, {len(programs or [])} programs"
        )
        combo = get_orgunit_program_combo(orgunits, programs)
        events, teis, enrolls = await asyncio.gather(
            self.get_events_from_last(last_updated, orgunits, programs),
            self.get_tracked_entity_instances_from_last(last_updated, combo),
            self.get_enrollments_from_last(last_updated, combo),
        )

        bundle = EventDataWrapper(
            events=events.events,
            enrollments=enrolls.enrollments,
            tracked_entity_instances=teis.tracked_entity_instances,
        )
        return await self.add_missing_tracked_entities_and_enrollments(bundle)

    # ============================================================
    # FAN-OUT QUERIES
    # ============================================================

    async def get_events(
        self,
        start_date: str,
        end_date: str,
        orgunits: Sequence[Any],
        programs: Optional[Sequence[Any]] = None
    ) -> EventList:
        """All events between start_date and end_date for the org units and programs."""
        common_params = {
            "startDate": start_date,
            "endDate": end_date,
            "ouMode": OU_MODE_DESCENDANTS,
        }
        return await self._get_events_from_orgunit_and_programs(common_params, orgunits, programs)

    async def get_events_from_last(
        self,
        last_updated: str,
        orgunits: Sequence[Any],
        programs: Optional[Sequence[Any]] = None
    ) -> EventList:
        """All events updated since last_updated for the org units and programs."""
        common_params = {
            "lastUpdated": last_updated,
            "ouMode": OU_MODE_DESCENDANTS,
        }
        return await self._get_events_from_orgunit_and_programs(common_params, orgunits, programs)

    async def get_tracked_entity_instances_from_last(
        self,
        last_updated: str,
        combo: List[OrgunitProgramComboItem]
    ) -> TrackedEntityInstanceList:
        """All TEIs updated since last_updated, one query per combination."""
        common_params = {"lastUpdated": last_updated, "ouMode": OU_MODE_DESCENDANTS}
        payloads = await self._fan_out(self.tracked_entity_instances, common_params, combo)

        total = TrackedEntityInstanceList.empty()
        for payload in payloads:
            total = total.concat(TrackedEntityInstanceList.from_payload(payload))

        logger.info(f"[EXPORT] {len(total.tracked_entity_instances)} TEIs from {len(combo)} queries")
        return total

    async def get_enrollments_from_last(
        self,
        last_updated: str,
        combo: List[OrgunitProgramComboItem]
    ) -> EnrollmentList:
        """All enrollments updated since last_updated, one query per combination."""
        common_params = {"lastUpdated": last_updated, "ouMode": OU_MODE_DESCENDANTS}
        payloads = await self._fan_out(self.enrollments, common_params, combo)

        total = EnrollmentList.empty()
        for payload in payloads:
            total = total.concat(EnrollmentList.from_payload(payload))

        logger.info(f"[EXPORT] {len(total.enrollments)} enrollments from {len(combo)} queries")
        return total

    async def _get_events_from_orgunit_and_programs(
        self,
        common_params: Dict[str, Any],
        orgunits: Sequence[Any],
        programs: Optional[Sequence[Any]]
    ) -> EventList:
        combo = get_orgunit_program_combo(orgunits, programs)
        payloads = await self._fan_out(self.events, common_params, combo)

        total = EventList.empty()
        for payload in payloads:
            total = total.concat(EventList.from_payload(payload))

        logger.info(f"[EXPORT] {len(total.events)} events from {len(combo)} queries")
        return total

    async def _fan_out(
        self,
        client: ResourceClient,
        common_params: Dict[str, Any],
        combo: List[OrgunitProgramComboItem]
    ) -> List[Dict[str, Any]]:
        # gather() keeps the order of its arguments, not of completion
        queries = []
        for item in combo:
            params = dict(common_params)
            params.update(item.to_params())
            logger.debug(f"[EXPORT] Query {params}")
            queries.append(client.get(**params))
        return list(await asyncio.gather(*queries))

    # ============================================================
    # DEPENDENCIES
    # ============================================================

    async def add_related_tracked_entities_and_enrollments(self, events: EventList) -> EventDataWrapper:
        """Wrap the events and add every TEI and enrollment they reference."""
        bundle = EventDataWrapper(events=events.events)
        teis, enrolls = self.resolver.related(bundle)
        return await self.add_tracked_entities_and_enrollments(bundle, teis, enrolls)

    async def add_missing_tracked_entities_and_enrollments(self, bundle: EventDataWrapper) -> EventDataWrapper:
        """Add the TEIs and enrollments the events reference but the bundle lacks."""
        teis, enrolls = self.resolver.missing(bundle)
        return await self.add_tracked_entities_and_enrollments(bundle, teis, enrolls)

    async def add_tracked_entities_and_enrollments(
        self,
        bundle: EventDataWrapper,
        tei_uids: List[str],
        enrollment_uids: List[str]
    ) -> EventDataWrapper:
        """Fetch the given TEIs, then the given enrollments, appending both to the bundle."""
        teis = await self.get_tracked_entity_instances_by_uid(tei_uids)
        bundle.add_tracked_entity_instances(teis.tracked_entity_instances)

        enrolls = await self.get_enrollments_by_uid(enrollment_uids)
        bundle.add_enrollments(enrolls.enrollments)

        logger.info(f"[EXPORT] Bundle ready: {bundle.counts()}")
        return bundle

    # ============================================================
    # ENTITY FETCHER
    # ============================================================

    async def get_tracked_entity_instances_by_uid(self, uids: List[str]) -> TrackedEntityInstanceList:
        """Fetch TEIs one request per uid; an empty list makes no requests."""
        responses = await asyncio.gather(
            *(self.tracked_entity_instances.get(uid=uid) for uid in uids)
        )
        return TrackedEntityInstanceList([clean_response(r) for r in responses])

    async def get_enrollments_by_uid(self, uids: List[str]) -> EnrollmentList:
        """Fetch enrollments one request per uid; an empty list makes no requests."""
        responses = await asyncio.gather(
            *(self.enrollments.get(uid=uid) for uid in uids)
        )
        return EnrollmentList([clean_response(r) for r in responses])


def create_export_service(connection: Dhis2Connection) -> EventExportService:
    """Wire an EventExportService to the DHIS2 resource clients of a connection."""
    clients = create_resource_clients(connection)
    return EventExportService(
        events=clients.events,
        tracked_entity_instances=clients.tracked_entity_instances,
        enrollments=clients.enrollments,
    )
