"""Approval workflow engine: event venue-approval and performance sub-machines.

Every transition follows the same steps: load, authorize the explicit
``Principal``, check the gate in ``transitions``, mutate, notify the
counterparty, commit, then queue emails on the ``SideEffects`` collector.
Expected failures (missing entity, wrong caller, wrong state, duplicate)
come back as a ``WorkflowResult`` with ``success=False`` and nothing written.
"""
import logging
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.auth import Principal
from app.mail import templates
from app.models.event import Event, EventStatus
from app.models.notification import NotificationType
from app.models.performance import Performance, PerformanceStatus
from app.models.profile import Artist, Venue
from app.models.user import User, UserRole
from app.services import notification_service
from app.services.results import ResultCode, WorkflowResult, fail, ok
from app.services.side_effects import SideEffects
from app.services.transitions import (
    ACCEPTING_ARTISTS,
    EVENT_TRANSITIONS,
    PERFORMANCE_TRANSITIONS,
    EventAction,
    PerformanceAction,
    next_status,
)
from app.services.validation import validate_event_creation, validate_performance
from app.utils.dates import ensure_utc
from app.utils.slugs import unique_slug

logger = logging.getLogger(__name__)

ALREADY_APPLIED = "Artist already applied for this event"


# ---------------------------------------------------------------------------
# Loading & authorization helpers
# ---------------------------------------------------------------------------

def _get_event(db: Session, event_id: str) -> Optional[Event]:
    return (
        db.query(Event)
        .options(
            joinedload(Event.venue).joinedload(Venue.user),
            joinedload(Event.creator),
        )
        .filter(Event.id == event_id)
        .first()
    )


def _get_performance(db: Session, performance_id: str) -> Optional[Performance]:
    return (
        db.query(Performance)
        .options(
            joinedload(Performance.event).joinedload(Event.venue).joinedload(Venue.user),
            joinedload(Performance.event).joinedload(Event.creator),
            joinedload(Performance.artist).joinedload(Artist.user),
        )
        .filter(Performance.id == performance_id)
        .first()
    )


def is_venue_owner(principal: Principal, event: Event) -> bool:
    return bool(event.venue_id) and principal.venue_id == event.venue_id


def can_manage_event(principal: Principal, event: Event) -> bool:
    """Event creator, owner of the linked venue, or an admin."""
    return (
        principal.role == UserRole.ADMIN
        or event.created_by == principal.id
        or is_venue_owner(principal, event)
    )


def venue_label(event: Event) -> str:
    if event.venue is not None:
        return event.venue.name
    return event.external_venue_name or ""


def _display_name(principal: Principal) -> str:
    return principal.name or principal.email


# ---------------------------------------------------------------------------
# Event venue-approval sub-machine
# ---------------------------------------------------------------------------

def _submit_to_venue(
    db: Session,
    event: Event,
    venue: Venue,
    requester_name: str,
    target: EventStatus,
    effects: SideEffects,
) -> None:
    event.venue_id = venue.id
    event.external_venue_name = None
    event.external_venue_address = None
    event.external_venue_city = None
    event.external_venue_contact = None
    event.status = target

    notification_service.create_notification(
        db,
        NotificationType.EVENT_REQUEST,
        venue.user_id,
        title="New event request",
        message=f'{requester_name} requested to host "{event.title}" at {venue.name}',
        event_id=event.id,
        action_url=f"/dashboard/venue/events/{event.id}",
    )
    effects.email(
        venue.user.email if venue.user else None,
        templates.event_request_for_venue(venue.name, requester_name, event.title, event.event_date, event.id),
    )
    effects.revalidate("/dashboard/venue/events")


def request_venue_approval(
    db: Session,
    principal: Principal,
    event_id: str,
    venue_id: str,
    effects: SideEffects,
) -> WorkflowResult:
    """DRAFT -> PENDING_VENUE_APPROVAL; links the venue and notifies its owner."""
    event = _get_event(db, event_id)
    if not event:
        return fail(ResultCode.not_found, "Event not found")
    if event.created_by != principal.id:
        return fail(ResultCode.forbidden, "Only the event creator can request venue approval")

    venue = db.query(Venue).options(joinedload(Venue.user)).filter(Venue.id == venue_id).first()
    if not venue:
        return fail(ResultCode.not_found, "Venue not found")

    target = next_status(EVENT_TRANSITIONS, EventAction.request_venue_approval, event.status)
    if target is None:
        return fail(ResultCode.invalid_state, f"Cannot request venue approval for an event in {event.status.value}")

    _submit_to_venue(db, event, venue, _display_name(principal), target, effects)
    db.commit()
    logger.info("Event %s submitted to venue %s for approval", event.id, venue.id)
    return ok("Venue approval requested", event_id=event.id, status=event.status.value)


def request_event_at_venue(
    db: Session,
    principal: Principal,
    venue_id: str,
    data: Mapping[str, Any],
    effects: SideEffects,
) -> WorkflowResult:
    """An artist proposes a brand-new event at a venue; it starts pending approval."""
    if not principal.is_artist:
        return fail(ResultCode.forbidden, "Only artists can request events at a venue")

    venue = db.query(Venue).options(joinedload(Venue.user)).filter(Venue.id == venue_id).first()
    if not venue:
        return fail(ResultCode.not_found, "Venue not found")

    payload = dict(data)
    payload.update(created_by=principal.id, venue_id=venue.id, external_venue_name=None)
    validation = validate_event_creation(payload)
    if not validation.valid:
        return fail(ResultCode.validation_error, "Invalid event request", errors=validation.errors)

    title = payload["title"].strip()
    event = Event(
        title=title,
        slug=unique_slug(db, Event, title),
        description=payload.get("description"),
        created_by=principal.id,
        event_date=ensure_utc(payload["event_date"]),
        end_date=ensure_utc(payload["end_date"]) if payload.get("end_date") else None,
        total_hours=payload.get("total_hours"),
        total_budget=payload.get("total_budget"),
        is_public=payload.get("is_public", True),
        status=EventStatus.DRAFT,
    )
    db.add(event)
    db.flush()

    target = next_status(EVENT_TRANSITIONS, EventAction.request_venue_approval, event.status)
    _submit_to_venue(db, event, venue, _display_name(principal), target, effects)
    db.commit()
    logger.info("Artist %s requested event %s at venue %s", principal.artist_id, event.id, venue.id)
    return ok("Event request sent to venue", event_id=event.id, status=event.status.value)


def _venue_response_gate(
    principal: Principal, event: Optional[Event], action: EventAction
) -> tuple[Optional[EventStatus], Optional[WorkflowResult]]:
    if not event:
        return None, fail(ResultCode.not_found, "Event not found")
    if not is_venue_owner(principal, event):
        return None, fail(ResultCode.forbidden, "Only the venue owner can respond to this request")
    target = next_status(EVENT_TRANSITIONS, action, event.status)
    if target is None:
        return None, fail(ResultCode.invalid_state, "Event is not pending venue approval")
    return target, None


def approve_event_request(
    db: Session, principal: Principal, event_id: str, effects: SideEffects
) -> WorkflowResult:
    """PENDING_VENUE_APPROVAL -> SEEKING_ARTISTS (venue owner only)."""
    event = _get_event(db, event_id)
    target, failure = _venue_response_gate(principal, event, EventAction.approve_venue)
    if failure:
        return failure

    event.status = target
    venue_name = venue_label(event)
    notification_service.create_notification(
        db,
        NotificationType.EVENT_REQUEST_APPROVED,
        event.created_by,
        title="Event request approved",
        message=f'{venue_name} approved your event request for "{event.title}"',
        event_id=event.id,
        action_url=f"/dashboard/artist/events/{event.id}",
    )
    db.commit()
    logger.info("Event %s approved by venue %s", event.id, event.venue_id)

    creator = event.creator
    if creator is not None:
        effects.email(
            creator.email,
            templates.event_request_approved_for_creator(
                creator.name or creator.email, venue_name, event.title, event.event_date, event.id
            ),
        )
    effects.revalidate("/events", f"/events/{event.slug}")
    return ok("Event request approved successfully", event_id=event.id, status=event.status.value)


def decline_event_request(
    db: Session,
    principal: Principal,
    event_id: str,
    reason: Optional[str],
    effects: SideEffects,
) -> WorkflowResult:
    """PENDING_VENUE_APPROVAL -> CANCELLED; the reason is appended to the notification."""
    event = _get_event(db, event_id)
    target, failure = _venue_response_gate(principal, event, EventAction.decline_venue)
    if failure:
        return failure

    event.status = target
    venue_name = venue_label(event)
    message = f'{venue_name} declined your event request for "{event.title}"'
    if reason:
        message += f": {reason}"
    notification_service.create_notification(
        db,
        NotificationType.EVENT_REQUEST_DECLINED,
        event.created_by,
        title="Event request declined",
        message=message,
        event_id=event.id,
        action_url=f"/dashboard/artist/events/{event.id}",
    )
    db.commit()
    logger.info("Event %s declined by venue %s", event.id, event.venue_id)

    creator = event.creator
    if creator is not None:
        effects.email(
            creator.email,
            templates.event_request_declined_for_creator(
                creator.name or creator.email, venue_name, event.title, reason, event.id
            ),
        )
    return ok("Event request declined", event_id=event.id, status=event.status.value)


# ---------------------------------------------------------------------------
# Performance sub-machine
# ---------------------------------------------------------------------------

def apply_for_performance(
    db: Session,
    principal: Principal,
    event_id: str,
    artist_id: str,
    data: Mapping[str, Any],
    effects: SideEffects,
) -> WorkflowResult:
    """Create a PENDING performance.

    Called by the artist themself (an application) or by the venue owner or
    event creator on the artist's behalf (an invitation).
    """
    payload = dict(data)
    payload.update(event_id=event_id, artist_id=artist_id)
    validation = validate_performance(payload)
    if not validation.valid:
        return fail(ResultCode.validation_error, "Invalid performance data", errors=validation.errors)

    event = _get_event(db, event_id)
    if not event:
        return fail(ResultCode.not_found, "Event not found")
    artist = db.query(Artist).options(joinedload(Artist.user)).filter(Artist.id == artist_id).first()
    if not artist:
        return fail(ResultCode.not_found, "Artist not found")

    is_application = principal.artist_id == artist.id
    if not is_application and not can_manage_event(principal, event):
        return fail(ResultCode.forbidden, "Not allowed to add performances to this event")

    if event.status not in ACCEPTING_ARTISTS:
        return fail(ResultCode.invalid_state, "Event is not accepting performances")

    existing = (
        db.query(Performance.id)
        .filter(Performance.event_id == event.id, Performance.artist_id == artist.id)
        .first()
    )
    if existing:
        return fail(ResultCode.invalid_state, ALREADY_APPLIED)

    performance = Performance(
        event_id=event.id,
        artist_id=artist.id,
        status=PerformanceStatus.PENDING,
        proposed_fee=payload.get("proposed_fee"),
        agreed_fee=payload.get("agreed_fee"),
        hours=payload.get("hours"),
        start_time=ensure_utc(payload["start_time"]) if payload.get("start_time") else None,
        end_time=ensure_utc(payload["end_time"]) if payload.get("end_time") else None,
        venue_notes=payload.get("venue_notes"),
        artist_notes=payload.get("artist_notes"),
        invited_by=None if is_application else principal.id,
    )
    try:
        with db.begin_nested():
            db.add(performance)
    except IntegrityError:
        # Lost a race with a concurrent application for the same pair
        logger.info("Duplicate performance for artist %s on event %s", artist.id, event.id)
        return fail(ResultCode.invalid_state, ALREADY_APPLIED)

    venue_name = venue_label(event)
    if is_application:
        if event.venue is not None:
            notification_service.create_notification(
                db,
                NotificationType.PERFORMANCE_APPLICATION,
                event.venue.user_id,
                title="New performance application",
                message=f'{artist.name} applied to perform at "{event.title}"',
                event_id=event.id,
                performance_id=performance.id,
                action_url=f"/dashboard/venue/events/{event.id}",
            )
        message = "Application submitted"
    else:
        notification_service.create_notification(
            db,
            NotificationType.PERFORMANCE_INVITATION,
            artist.user_id,
            title="Performance invitation",
            message=f'{venue_name or _display_name(principal)} invited you to perform at "{event.title}"',
            event_id=event.id,
            performance_id=performance.id,
            action_url=f"/dashboard/artist/events/{event.id}",
        )
        message = "Invitation sent"
    db.commit()
    logger.info("Performance %s created (%s) for artist %s on event %s",
                performance.id, "application" if is_application else "invitation", artist.id, event.id)

    if not is_application:
        effects.email(
            artist.user.email if artist.user else None,
            templates.performance_invitation_for_artist(
                artist.name, venue_name, event.title, event.event_date, performance.hours, performance.id
            ),
        )
    return ok(message, performance_id=performance.id, status=performance.status.value)


def _performance_gate(
    principal: Principal, performance: Optional[Performance], action: PerformanceAction
) -> tuple[Optional[PerformanceStatus], Optional[WorkflowResult]]:
    if not performance:
        return None, fail(ResultCode.not_found, "Performance not found")
    if not can_manage_event(principal, performance.event):
        return None, fail(ResultCode.forbidden, "Only the venue owner or event creator can manage this performance")
    return _performance_target(performance, action)


def _response_gate(
    principal: Principal, performance: Optional[Performance], action: PerformanceAction
) -> tuple[Optional[PerformanceStatus], Optional[WorkflowResult]]:
    """Whoever did not create the record answers it: the manager for an application,
    the invited artist for an invitation."""
    if not performance:
        return None, fail(ResultCode.not_found, "Performance not found")
    if performance.invited_by:
        if principal.artist_id != performance.artist_id:
            return None, fail(ResultCode.forbidden, "Only the invited artist can respond to this invitation")
    elif not can_manage_event(principal, performance.event):
        return None, fail(ResultCode.forbidden, "Only the venue owner or event creator can manage this performance")
    return _performance_target(performance, action)


def _performance_target(
    performance: Performance, action: PerformanceAction
) -> tuple[Optional[PerformanceStatus], Optional[WorkflowResult]]:
    target = next_status(PERFORMANCE_TRANSITIONS, action, performance.status)
    if target is None:
        return None, fail(
            ResultCode.invalid_state,
            f"Cannot {action.value} a performance that is {performance.status.value}",
        )
    return target, None


def _requester(event: Event) -> Optional[User]:
    """Counterparty of an invitation: the venue owner, else the event creator."""
    if event.venue is not None and event.venue.user is not None:
        return event.venue.user
    return event.creator


def _notify_invitation_response(
    db: Session,
    performance: Performance,
    accepted: bool,
    reason: Optional[str],
    effects: SideEffects,
) -> None:
    event = performance.event
    artist = performance.artist
    recipient = _requester(event)
    if recipient is None:
        return
    verb = "accepted" if accepted else "declined"
    notification_service.create_notification(
        db,
        NotificationType.PERFORMANCE_INVITATION_ACCEPTED if accepted
        else NotificationType.PERFORMANCE_INVITATION_DECLINED,
        recipient.id,
        title=f"Performance invitation {verb}",
        message=f'{artist.name} {verb} your invitation to perform at "{event.title}"{_reason_suffix(reason)}',
        event_id=event.id,
        performance_id=performance.id,
        action_url=f"/dashboard/events/{event.id}/performances",
    )
    effects.email(
        recipient.email,
        templates.invitation_response_for_requester(
            recipient.name or venue_label(event) or recipient.email, artist.name, accepted,
            event.title, event.event_date, performance.hours, event.id, reason,
        ),
    )


def _reason_suffix(reason: Optional[str]) -> str:
    return f": {reason}" if reason else ""


def approve_performance(
    db: Session, principal: Principal, performance_id: str, effects: SideEffects
) -> WorkflowResult:
    """PENDING -> CONFIRMED.

    Approving an application is the venue owner's or event creator's call;
    accepting an invitation is the invited artist's.
    """
    performance = _get_performance(db, performance_id)
    target, failure = _response_gate(principal, performance, PerformanceAction.approve)
    if failure:
        return failure

    event = performance.event
    artist = performance.artist
    is_invitation = bool(performance.invited_by)
    performance.status = target
    if performance.agreed_fee is None:
        performance.agreed_fee = performance.proposed_fee

    if is_invitation:
        _notify_invitation_response(db, performance, True, None, effects)
    else:
        notification_service.create_notification(
            db,
            NotificationType.PERFORMANCE_APPROVED,
            artist.user_id,
            title="Performance confirmed",
            message=f'Your performance at "{event.title}" has been confirmed',
            event_id=event.id,
            performance_id=performance.id,
            action_url=f"/dashboard/artist/events/{event.id}",
        )
    db.commit()
    logger.info("Performance %s confirmed by user %s", performance.id, principal.id)

    if not is_invitation:
        effects.email(
            artist.user.email if artist.user else None,
            templates.performance_confirmed_for_artist(
                artist.name, event.title, event.event_date, performance.hours, event.id
            ),
        )
    effects.revalidate(f"/events/{event.slug}")
    message = "Invitation accepted" if is_invitation else "Performance approved"
    return ok(message, performance_id=performance.id, status=performance.status.value)


def decline_performance(
    db: Session,
    principal: Principal,
    performance_id: str,
    reason: Optional[str],
    effects: SideEffects,
) -> WorkflowResult:
    """PENDING -> DECLINED; the other side is told why when a reason is given."""
    performance = _get_performance(db, performance_id)
    target, failure = _response_gate(principal, performance, PerformanceAction.decline)
    if failure:
        return failure

    event = performance.event
    performance.status = target
    if performance.invited_by:
        if reason:
            performance.artist_notes = reason
        _notify_invitation_response(db, performance, False, reason, effects)
        db.commit()
        logger.info("Invitation %s declined by artist %s", performance.id, performance.artist_id)
        return ok("Invitation declined", performance_id=performance.id, status=performance.status.value)

    if reason:
        performance.venue_notes = reason
    notification_service.create_notification(
        db,
        NotificationType.PERFORMANCE_DECLINED,
        performance.artist.user_id,
        title="Performance declined",
        message=f'Your performance request for "{event.title}" was declined{_reason_suffix(reason)}',
        event_id=event.id,
        performance_id=performance.id,
    )
    db.commit()
    logger.info("Performance %s declined by user %s", performance.id, principal.id)
    return ok("Performance declined", performance_id=performance.id, status=performance.status.value)


def _notify_performance_cancelled(
    db: Session, performance: Performance, was_confirmed: bool, reason: Optional[str], effects: SideEffects
) -> None:
    event = performance.event
    artist = performance.artist
    message = f'Your performance at "{event.title}" has been cancelled'
    if reason:
        message += f": {reason}"
    notification_service.create_notification(
        db,
        NotificationType.PERFORMANCE_CANCELLED,
        artist.user_id,
        title="Performance cancelled",
        message=message,
        event_id=event.id,
        performance_id=performance.id,
    )
    effects.email(
        artist.user.email if artist.user else None,
        templates.performance_cancelled_for_artist(artist.name, venue_label(event), event.title, was_confirmed, reason),
    )


def cancel_performance(
    db: Session,
    principal: Principal,
    performance_id: str,
    reason: Optional[str],
    effects: SideEffects,
) -> WorkflowResult:
    """PENDING|CONFIRMED -> CANCELLED. The artist hears about it only when the venue cancels."""
    performance = _get_performance(db, performance_id)
    target, failure = _performance_gate(principal, performance, PerformanceAction.cancel)
    if failure:
        return failure

    was_confirmed = performance.status == PerformanceStatus.CONFIRMED
    performance.status = target
    if is_venue_owner(principal, performance.event):
        _notify_performance_cancelled(db, performance, was_confirmed, reason, effects)
    db.commit()
    logger.info("Performance %s cancelled by user %s", performance.id, principal.id)
    return ok("Performance cancelled", performance_id=performance.id, status=performance.status.value)


def cancel_all_performances_for_event(
    db: Session, event_id: str, reason: Optional[str], effects: SideEffects
) -> int:
    """Cancel every live performance of a cancelled event. The caller commits."""
    performances = (
        db.query(Performance)
        .options(
            joinedload(Performance.event).joinedload(Event.venue),
            joinedload(Performance.artist).joinedload(Artist.user),
        )
        .filter(
            Performance.event_id == event_id,
            Performance.status.in_([PerformanceStatus.PENDING, PerformanceStatus.CONFIRMED]),
        )
        .all()
    )
    for performance in performances:
        was_confirmed = performance.status == PerformanceStatus.CONFIRMED
        performance.status = next_status(PERFORMANCE_TRANSITIONS, PerformanceAction.cancel, performance.status)
        _notify_performance_cancelled(db, performance, was_confirmed, reason, effects)
    if performances:
        logger.info("Cancelled %d performances for event %s", len(performances), event_id)
    return len(performances)



def complete_performances_for_event(db: Session, event_id: str) -> int:
    """CONFIRMED -> COMPLETED for every performance of a completed event. The caller commits."""
    performances = (
        db.query(Performance)
        .filter(Performance.event_id == event_id, Performance.status == PerformanceStatus.CONFIRMED)
        .all()
    )
    for performance in performances:
        performance.status = next_status(PERFORMANCE_TRANSITIONS, PerformanceAction.complete, performance.status)
    if performances:
        logger.info("Completed %d performances for event %s", len(performances), event_id)
    return len(performances)


# ---------------------------------------------------------------------------
# Pending approvals overview
# ---------------------------------------------------------------------------

def _event_summary(event: Event) -> dict[str, Any]:
    return {
        "id": event.id,
        "title": event.title,
        "slug": event.slug,
        "event_date": event.event_date,
        "status": event.status.value,
        "created_by": event.created_by,
        "creator_name": event.creator.name if event.creator else None,
    }


def _performance_summary(performance: Performance) -> dict[str, Any]:
    return {
        "id": performance.id,
        "status": performance.status.value,
        "event_id": performance.event_id,
        "event_title": performance.event.title if performance.event else None,
        "artist_id": performance.artist_id,
        "artist_name": performance.artist.name if performance.artist else None,
        "proposed_fee": performance.proposed_fee,
        "hours": performance.hours,
        "is_invitation": bool(performance.invited_by),
        "created_at": performance.created_at,
    }


def list_pending_approvals(db: Session, principal: Principal) -> dict[str, Any]:
    """Everything awaiting a decision by, or about, the caller."""
    pending_performances = (
        db.query(Performance)
        .join(Event, Performance.event_id == Event.id)
        .options(joinedload(Performance.event), joinedload(Performance.artist))
        .filter(Performance.status == PerformanceStatus.PENDING)
    )

    event_requests: list[dict[str, Any]] = []
    venue_applications: list[dict[str, Any]] = []
    if principal.venue_id:
        events = (
            db.query(Event)
            .options(joinedload(Event.creator))
            .filter(
                Event.venue_id == principal.venue_id,
                Event.status == EventStatus.PENDING_VENUE_APPROVAL,
            )
            .order_by(Event.event_date)
            .all()
        )
        event_requests = [_event_summary(e) for e in events]
        venue_applications = [
            _performance_summary(p)
            for p in pending_performances.filter(Event.venue_id == principal.venue_id)
            .order_by(Performance.created_at.desc())
            .all()
        ]

    my_applications: list[dict[str, Any]] = []
    if principal.artist_id:
        my_applications = [
            _performance_summary(p)
            for p in pending_performances.filter(Performance.artist_id == principal.artist_id)
            .order_by(Performance.created_at.desc())
            .all()
        ]

    created_event_applications = [
        _performance_summary(p)
        for p in pending_performances.filter(Event.created_by == principal.id)
        .order_by(Performance.created_at.desc())
        .all()
    ]

    return {
        "notifications": notification_service.list_unread(db, principal.id),
        "event_requests": event_requests,
        "performance_applications": venue_applications,
        "my_applications": my_applications,
        "created_event_applications": created_event_applications,
    }
