"""Allowed state transitions for Event, Performance and Booking.

Each table maps an action to ``(allowed source statuses, target status)``.
Every workflow mutation asks ``next_status`` first and refuses to write when
it returns None.
"""
import enum
from typing import Optional

from app.models.booking import BookingStatus
from app.models.event import EventStatus
from app.models.performance import PerformanceStatus


class EventAction(str, enum.Enum):
    request_venue_approval = "request_venue_approval"
    approve_venue = "approve_venue"
    decline_venue = "decline_venue"
    publish = "publish"
    unpublish = "unpublish"
    cancel = "cancel"
    complete = "complete"


class PerformanceAction(str, enum.Enum):
    approve = "approve"
    decline = "decline"
    cancel = "cancel"
    complete = "complete"


class BookingAction(str, enum.Enum):
    accept = "accept"
    decline = "decline"
    cancel = "cancel"
    complete = "complete"


EVENT_TRANSITIONS: dict[EventAction, tuple[frozenset, EventStatus]] = {
    EventAction.request_venue_approval: (
        frozenset({EventStatus.DRAFT}),
        EventStatus.PENDING_VENUE_APPROVAL,
    ),
    EventAction.approve_venue: (
        frozenset({EventStatus.PENDING_VENUE_APPROVAL}),
        EventStatus.SEEKING_ARTISTS,
    ),
    EventAction.decline_venue: (
        frozenset({EventStatus.PENDING_VENUE_APPROVAL}),
        EventStatus.CANCELLED,
    ),
    EventAction.publish: (
        frozenset({
            EventStatus.DRAFT,
            EventStatus.SEEKING_ARTISTS,
            EventStatus.PENDING,
            EventStatus.CONFIRMED,
        }),
        EventStatus.PUBLISHED,
    ),
    EventAction.unpublish: (
        frozenset({EventStatus.PUBLISHED}),
        EventStatus.DRAFT,
    ),
    EventAction.cancel: (
        frozenset({
            EventStatus.DRAFT,
            EventStatus.PENDING_VENUE_APPROVAL,
            EventStatus.SEEKING_VENUE,
            EventStatus.SEEKING_ARTISTS,
            EventStatus.PENDING,
            EventStatus.PUBLISHED,
            EventStatus.CONFIRMED,
        }),
        EventStatus.CANCELLED,
    ),
    EventAction.complete: (
        frozenset({EventStatus.PUBLISHED, EventStatus.CONFIRMED}),
        EventStatus.COMPLETED,
    ),
}

PERFORMANCE_TRANSITIONS: dict[PerformanceAction, tuple[frozenset, PerformanceStatus]] = {
    PerformanceAction.approve: (
        frozenset({PerformanceStatus.PENDING}),
        PerformanceStatus.CONFIRMED,
    ),
    PerformanceAction.decline: (
        frozenset({PerformanceStatus.PENDING}),
        PerformanceStatus.DECLINED,
    ),
    PerformanceAction.cancel: (
        frozenset({PerformanceStatus.PENDING, PerformanceStatus.CONFIRMED}),
        PerformanceStatus.CANCELLED,
    ),
    PerformanceAction.complete: (
        frozenset({PerformanceStatus.CONFIRMED}),
        PerformanceStatus.COMPLETED,
    ),
}

BOOKING_TRANSITIONS: dict[BookingAction, tuple[frozenset, BookingStatus]] = {
    BookingAction.accept: (frozenset({BookingStatus.PENDING}), BookingStatus.ACCEPTED),
    BookingAction.decline: (frozenset({BookingStatus.PENDING}), BookingStatus.DECLINED),
    BookingAction.cancel: (frozenset({BookingStatus.PENDING}), BookingStatus.CANCELLED),
    BookingAction.complete: (frozenset({BookingStatus.ACCEPTED}), BookingStatus.COMPLETED),
}

# Event statuses in which new performances may be created
ACCEPTING_ARTISTS = frozenset({EventStatus.DRAFT, EventStatus.SEEKING_ARTISTS, EventStatus.PENDING})


def next_status(table: dict, action, current) -> Optional[enum.Enum]:
    """Target status for ``action`` from ``current``, or None if not allowed."""
    sources, target = table[action]
    if current not in sources:
        return None
    return target


# Actions reachable through a plain event update (status field in the payload)
UPDATE_ACTIONS = (EventAction.publish, EventAction.unpublish, EventAction.cancel, EventAction.complete)


def event_action_for_target(current: EventStatus, target: EventStatus) -> Optional[EventAction]:
    """Find the update action that moves ``current`` to ``target``, if any."""
    for action in UPDATE_ACTIONS:
        sources, to_status = EVENT_TRANSITIONS[action]
        if to_status == target and current in sources:
            return action
    return None
