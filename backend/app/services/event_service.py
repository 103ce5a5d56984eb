"""Event management service.

Responsibilities:
- Creation with validation; artists creating at an internal venue go
  straight into the venue-approval workflow
- Authorization hook: only the creator or the venue owner may modify
- Partial updates re-checked against the creation rules they touch
- Status changes restricted to the transitions map, with the publishing
  fan-out triggered on entering PUBLISHED and withdrawn on unpublish or cancel
- Line-up (EventArtist) management
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from app.auth import Principal
from app.models.booking import Booking
from app.models.event import Event, EventArtist, EventStatus
from app.models.notification import Notification
from app.models.performance import Performance
from app.models.profile import Artist, Venue
from app.models.user import UserRole
from app.services import booking_service, publishing_service, workflow_service
from app.services.side_effects import SideEffects
from app.services.transitions import event_action_for_target
from app.services.validation import event_date_errors, validate_event_creation, venue_mode_errors
from app.utils.dates import ensure_utc
from app.utils.slugs import unique_slug

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title", "description", "event_date", "end_date", "total_hours", "total_budget", "is_public",
    "external_venue_name", "external_venue_address", "external_venue_city", "external_venue_contact",
)


def get_event_or_404(db: Session, event_id: str) -> Event:
    event = (
        db.query(Event)
        .options(joinedload(Event.venue), joinedload(Event.event_artists))
        .filter(Event.id == event_id)
        .first()
    )
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _check_authorization(principal: Principal, event: Event) -> None:
    """Only the creator or the venue owner may modify an event."""
    if not workflow_service.can_manage_event(principal, event):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the event creator or venue owner can modify this event",
        )


def create_event(db: Session, principal: Principal, data: dict[str, Any], effects: SideEffects) -> Event:
    """Create an event in DRAFT.

    An artist creating at an internal venue is immediately submitted for the
    venue's approval; venue-owned and external-venue events stay in DRAFT.
    """
    payload = dict(data)
    artist_ids = payload.pop("artist_ids", None) or []
    payload["created_by"] = principal.id

    validation = validate_event_creation(payload)
    if not validation.valid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Invalid event data", "errors": validation.errors},
        )

    venue_id = payload.get("venue_id")
    if principal.role == UserRole.VENUE and (not venue_id or venue_id != principal.venue_id):
        raise HTTPException(status_code=403, detail="Venues can only create events at their own venue")
    if venue_id and not db.query(Venue.id).filter(Venue.id == venue_id).first():
        raise HTTPException(status_code=404, detail="Venue not found")

    artists = db.query(Artist).filter(Artist.id.in_(artist_ids)).all() if artist_ids else []
    if len(artists) != len(set(artist_ids)):
        raise HTTPException(status_code=404, detail="Artist not found")

    title = payload["title"].strip()
    event = Event(
        title=title,
        slug=unique_slug(db, Event, title),
        description=payload.get("description"),
        created_by=principal.id,
        venue_id=venue_id or None,
        external_venue_name=payload.get("external_venue_name") or None,
        external_venue_address=payload.get("external_venue_address"),
        external_venue_city=payload.get("external_venue_city"),
        external_venue_contact=payload.get("external_venue_contact"),
        event_date=ensure_utc(payload["event_date"]),
        end_date=ensure_utc(payload["end_date"]) if payload.get("end_date") else None,
        total_hours=payload.get("total_hours"),
        total_budget=payload.get("total_budget"),
        is_public=payload.get("is_public", True),
        status=EventStatus.DRAFT,
    )
    db.add(event)
    db.flush()
    for artist in artists:
        db.add(EventArtist(event_id=event.id, artist_id=artist.id))
    db.commit()
    logger.info("Event %s created by user %s", event.id, principal.id)

    if venue_id and principal.role == UserRole.ARTIST:
        result = workflow_service.request_venue_approval(db, principal, event.id, venue_id, effects)
        if not result.success:
            logger.warning("Venue approval request for event %s failed: %s", event.id, result.message)

    db.refresh(event)
    effects.revalidate("/events")
    return event


def _update_errors(event: Event, updates: dict[str, Any]) -> list[str]:
    """Re-check the creation rules touched by a partial update, against the resulting event."""
    errors: list[str] = []
    if "title" in updates and not (updates["title"] or "").strip():
        errors.append("Title is required")
    if "event_date" in updates:
        errors.extend(event_date_errors(updates["event_date"]))
    if "external_venue_name" in updates:
        errors.extend(venue_mode_errors(event.venue_id, updates["external_venue_name"]))
    return errors


def update_event(
    db: Session,
    principal: Principal,
    event_id: str,
    updates: dict[str, Any],
    effects: SideEffects,
) -> Event:
    """Apply a partial update; a status change must be an allowed transition.

    Leaving PUBLISHED for DRAFT or CANCELLED withdraws the event's booking
    requests; completing the event completes its accepted bookings and
    confirmed performances instead.
    """
    event = get_event_or_404(db, event_id)
    _check_authorization(principal, event)

    old_status = event.status
    new_status = updates.get("status")
    if new_status is not None:
        new_status = EventStatus(new_status)
        if new_status != old_status and event_action_for_target(old_status, new_status) is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot change event status from {old_status.value} to {new_status.value}",
            )

    errors = _update_errors(event, updates)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Invalid event data", "errors": errors},
        )

    for field in UPDATABLE_FIELDS:
        if field not in updates:
            continue
        value = updates[field]
        if field in ("event_date", "end_date") and value is not None:
            value = ensure_utc(value)
        if field == "external_venue_name":
            value = value or None
        if field == "title":
            value = value.strip()
            if value != event.title:
                event.slug = unique_slug(db, Event, value, exclude_id=event.id)
        setattr(event, field, value)

    status_changed = new_status is not None and new_status != old_status
    if status_changed:
        event.status = new_status
        if new_status == EventStatus.CANCELLED:
            workflow_service.cancel_all_performances_for_event(db, event.id, updates.get("reason"), effects)
        elif new_status == EventStatus.COMPLETED:
            booking_service.complete_bookings_for_event(db, event.id)
            workflow_service.complete_performances_for_event(db, event.id)
    db.commit()
    logger.info("Event %s updated by user %s%s", event.id, principal.id,
                f" ({old_status.value} -> {new_status.value})" if status_changed else "")

    if status_changed and new_status == EventStatus.PUBLISHED:
        publishing_service.create_booking_requests_for_event(db, event.id, effects)
    elif (status_changed and old_status == EventStatus.PUBLISHED
          and new_status in (EventStatus.DRAFT, EventStatus.CANCELLED)):
        publishing_service.cancel_booking_requests_for_event(db, event.id, effects)

    db.refresh(event)
    effects.revalidate("/events", f"/events/{event.slug}")
    return event


def delete_event(db: Session, principal: Principal, event_id: str) -> None:
    """Hard delete; only allowed while the event has no bookings or performances."""
    event = get_event_or_404(db, event_id)
    _check_authorization(principal, event)

    if db.query(Booking).filter(Booking.event_id == event.id).count():
        raise HTTPException(status_code=400, detail="Cannot delete event with existing bookings")
    if db.query(Performance).filter(Performance.event_id == event.id).count():
        raise HTTPException(status_code=400, detail="Cannot delete event with existing performances")

    # Notifications outlive the event they mention
    db.query(Notification).filter(Notification.event_id == event.id).update(
        {Notification.event_id: None}, synchronize_session=False
    )
    db.delete(event)
    db.commit()
    logger.info("Event %s deleted by user %s", event_id, principal.id)


def _get_entry(db: Session, event_id: str, artist_id: str) -> Optional[EventArtist]:
    return (
        db.query(EventArtist)
        .filter(EventArtist.event_id == event_id, EventArtist.artist_id == artist_id)
        .first()
    )


def add_artist_to_event(
    db: Session,
    principal: Principal,
    event_id: str,
    artist_id: str,
    effects: SideEffects,
    fee=None,
    hours: Optional[float] = None,
    notes: Optional[str] = None,
) -> EventArtist:
    """Add an artist to the line-up; a published event sends them a booking request at once."""
    event = get_event_or_404(db, event_id)
    _check_authorization(principal, event)
    if not db.query(Artist.id).filter(Artist.id == artist_id).first():
        raise HTTPException(status_code=404, detail="Artist not found")
    if _get_entry(db, event.id, artist_id):
        raise HTTPException(status_code=409, detail="Artist already added to this event")

    entry = EventArtist(event_id=event.id, artist_id=artist_id, fee=fee, hours=hours, notes=notes)
    db.add(entry)
    db.commit()
    logger.info("Artist %s added to event %s", artist_id, event.id)

    if event.status == EventStatus.PUBLISHED:
        publishing_service.create_booking_request_for_artist(db, event.id, artist_id, effects)
    db.refresh(entry)
    return entry


def update_event_artist(
    db: Session, principal: Principal, event_id: str, artist_id: str, updates: dict[str, Any]
) -> EventArtist:
    event = get_event_or_404(db, event_id)
    _check_authorization(principal, event)
    entry = _get_entry(db, event.id, artist_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Artist is not part of this event")

    for field in ("fee", "hours", "notes", "confirmed"):
        if field in updates:
            setattr(entry, field, updates[field])
    db.commit()
    db.refresh(entry)
    return entry


def remove_artist_from_event(db: Session, principal: Principal, event_id: str, artist_id: str) -> None:
    event = get_event_or_404(db, event_id)
    _check_authorization(principal, event)
    entry = _get_entry(db, event.id, artist_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Artist is not part of this event")

    has_bookings = (
        db.query(Booking.id)
        .filter(Booking.event_id == event.id, Booking.artist_id == artist_id)
        .first()
    )
    if has_bookings:
        raise HTTPException(status_code=400, detail="Cannot remove artist with existing bookings")

    db.delete(entry)
    db.commit()
    logger.info("Artist %s removed from event %s", artist_id, event.id)
