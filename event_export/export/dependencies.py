"""
Dependency Resolver: find the entities exported events point at

Events carry two foreign keys, `trackedEntityInstance` and `enrollment`.
This module pulls those identifiers out of an event collection and works out
which of them still have to be fetched.

Workflow:
1. Extract the distinct identifiers referenced by the events (first-seen order)
2. Optionally drop the identifiers already present in the bundle
3. Hand the remaining identifiers to the entity fetcher
"""

from __future__ import annotations

from typing import Any, Hashable, Iterable, List, Tuple
import logging

from .bundle import EventDataWrapper, EventList

logger = logging.getLogger(__name__)

TEI_PROPERTY = "trackedEntityInstance"
ENROLLMENT_PROPERTY = "enrollment"


def get_unique_in_list(values: Iterable[Hashable]) -> List[Any]:
    """
    Distinct values in order of first occurrence.

    None entries are skipped. Identifiers are not validated otherwise.
    """
    seen = set()
    unique = []
    for value in values:
        if value is None or value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


def extract_events_property(events: EventList, prop: str) -> List[Any]:
    """
    Distinct values of one event field across an event collection.

    Args:
        events: Events to scan
        prop: Field name, e.g. "trackedEntityInstance"

    Returns:
        Identifiers in first-seen order, without None
    """
    return get_unique_in_list(event.get(prop) for event in events.events)


def find_missing(related: Iterable[Any], existing: Iterable[Any]) -> List[Any]:
    """
    Identifiers from `related` that are not in `existing`, keeping `related` order.
    """
    existing_ids = set(existing)
    return [uid for uid in related if uid not in existing_ids]


class DependencyResolver:
    """
    Works out which tracked entity instances and enrollments an export needs.

    Usage:
        resolver = DependencyResolver()

        # Fresh export, nothing fetched yet
        teis, enrolls = resolver.related(bundle)

        # Bundle already holds some TEIs/enrollments
        teis, enrolls = resolver.missing(bundle)
    """

    def related(self, bundle: EventDataWrapper) -> Tuple[List[Any], List[Any]]:
        """All TEI and enrollment identifiers referenced by the bundle's events."""
        events = EventList(bundle.events)
        teis = extract_events_property(events, TEI_PROPERTY)
        enrolls = extract_events_property(events, ENROLLMENT_PROPERTY)

        logger.info(
            f"[RESOLVER] {len(bundle.events)} events reference "
            f"{len(teis)} TEIs and {len(enrolls)} enrollments"
        )
        return teis, enrolls

    def missing(self, bundle: EventDataWrapper) -> Tuple[List[Any], List[Any]]:
        """Referenced identifiers that the bundle does not hold yet."""
        related_teis, related_enrolls = self.related(bundle)

        existing_teis = (tei.get(TEI_PROPERTY) for tei in bundle.tracked_entity_instances)
        existing_enrolls = (enroll.get(ENROLLMENT_PROPERTY) for enroll in bundle.enrollments)

        missing_teis = find_missing(related_teis, existing_teis)
        missing_enrolls = find_missing(related_enrolls, existing_enrolls)

        logger.info(
            f"[RESOLVER] Missing {len(missing_teis)} TEIs and "
            f"{len(missing_enrolls)} enrollments"
        )
        return missing_teis, missing_enrolls
