"""
Result containers for one export call.

The list wrappers mirror the payload shape of the matching API endpoint
(`{"events": [...]}` and so on). EventDataWrapper accumulates the three
collections while an export is being assembled; it only ever grows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

EVENTS_KEY = "events"
TEIS_KEY = "trackedEntityInstances"
ENROLLMENTS_KEY = "enrollments"


@dataclass
class EventList:
    events: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "EventList":
        return cls([])

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EventList":
        return cls(list(payload.get(EVENTS_KEY) or []))

    def concat(self, other: "EventList") -> "EventList":
        return EventList(self.events + other.events)


@dataclass
class TrackedEntityInstanceList:
    tracked_entity_instances: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "TrackedEntityInstanceList":
        return cls([])

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TrackedEntityInstanceList":
        return cls(list(payload.get(TEIS_KEY) or []))

    def concat(self, other: "TrackedEntityInstanceList") -> "TrackedEntityInstanceList":
        return TrackedEntityInstanceList(
            self.tracked_entity_instances + other.tracked_entity_instances
        )


@dataclass
class EnrollmentList:
    enrollments: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "EnrollmentList":
        return cls([])

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EnrollmentList":
        return cls(list(payload.get(ENROLLMENTS_KEY) or []))

    def concat(self, other: "EnrollmentList") -> "EnrollmentList":
        return EnrollmentList(self.enrollments + other.enrollments)


@dataclass
class EventDataWrapper:
    """
    Events plus the tracked entity instances and enrollments they depend on.

    Appends never deduplicate; callers decide what to add.
    """
    events: List[Dict[str, Any]] = field(default_factory=list)
    enrollments: List[Dict[str, Any]] = field(default_factory=list)
    tracked_entity_instances: List[Dict[str, Any]] = field(default_factory=list)

    def add_events(self, events: List[Dict[str, Any]]) -> None:
        self.events = self.events + list(events)

    def add_tracked_entity_instances(self, tracked_entity_instances: List[Dict[str, Any]]) -> None:
        self.tracked_entity_instances = self.tracked_entity_instances + list(tracked_entity_instances)

    def add_enrollments(self, enrollments: List[Dict[str, Any]]) -> None:
        self.enrollments = self.enrollments + list(enrollments)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Convert to the API-shaped dictionary used for JSON and archives."""
        return {
            EVENTS_KEY: self.events,
            TEIS_KEY: self.tracked_entity_instances,
            ENROLLMENTS_KEY: self.enrollments,
        }

    def counts(self) -> Dict[str, int]:
        return {key: len(values) for key, values in self.to_dict().items()}
