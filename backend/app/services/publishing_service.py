"""Event publishing fan-out: one booking request per unconfirmed line-up artist.

``event_service.update_event`` calls ``create_booking_requests_for_event``
when an event moves to PUBLISHED and ``cancel_booking_requests_for_event``
when it leaves PUBLISHED. Re-running the fan-out is safe: an artist who
already has a booking for the event is skipped.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.mail import templates
from app.models.booking import Booking, BookingStatus
from app.models.event import Event, EventArtist, EventStatus
from app.models.notification import NotificationType
from app.models.profile import Artist
from app.services import notification_service
from app.services.side_effects import SideEffects

logger = logging.getLogger(__name__)


@dataclass
class FanoutResult:
    success: bool
    message: str
    created: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: int = 0


def _load_event(db: Session, event_id: str) -> Optional[Event]:
    return (
        db.query(Event)
        .options(
            joinedload(Event.venue),
            joinedload(Event.event_artists).joinedload(EventArtist.artist).joinedload(Artist.user),
        )
        .filter(Event.id == event_id)
        .first()
    )


def _check_publishable(event: Optional[Event]) -> Optional[FanoutResult]:
    if event is None:
        return FanoutResult(success=False, message="Event not found")
    if event.status != EventStatus.PUBLISHED:
        return FanoutResult(success=False, message="Event is not published")
    if event.event_date is None:
        return FanoutResult(success=False, message="Event has no date")
    return None


def _request_booking(db: Session, event: Event, entry: EventArtist, effects: SideEffects, result: FanoutResult) -> None:
    """Create the PENDING booking for one line-up entry, isolating failures."""
    artist = entry.artist
    existing = (
        db.query(Booking.id)
        .filter(Booking.artist_id == entry.artist_id, Booking.event_id == event.id)
        .first()
    )
    if existing:
        result.skipped += 1
        return

    booking = Booking(
        artist_id=entry.artist_id,
        venue_id=event.venue_id,
        event_id=event.id,
        event_date=event.event_date,
        hours=entry.hours or event.total_hours,
        note=f"Booking request for event: {event.title}",
        status=BookingStatus.PENDING,
    )
    try:
        with db.begin_nested():
            db.add(booking)
    except SQLAlchemyError:
        logger.exception("Could not create booking request for artist %s on event %s", entry.artist_id, event.id)
        result.failed += 1
        return

    venue_name = event.venue.name if event.venue else (event.external_venue_name or "")
    notification_service.create_notification(
        db,
        NotificationType.BOOKING_REQUEST,
        artist.user_id,
        title="New booking request",
        message=f'You have a booking request for "{event.title}"',
        event_id=event.id,
        action_url=f"/dashboard/artist/gigs/{booking.id}",
    )
    effects.email(
        artist.user.email if artist.user else None,
        templates.booking_request_for_artist(
            artist.name, venue_name, event.event_date, booking.hours, booking.id, event_title=event.title
        ),
    )
    result.created += 1


def create_booking_requests_for_event(db: Session, event_id: str, effects: SideEffects) -> FanoutResult:
    """Send booking requests to every unconfirmed artist of a published event."""
    event = _load_event(db, event_id)
    failure = _check_publishable(event)
    if failure:
        logger.info("Fan-out skipped for event %s: %s", event_id, failure.message)
        return failure

    result = FanoutResult(success=True, message="")
    for entry in event.event_artists:
        if entry.confirmed:
            continue
        _request_booking(db, event, entry, effects, result)
    db.commit()

    result.message = f"Created {result.created} booking requests"
    logger.info(
        "Fan-out for event %s: %d created, %d skipped, %d failed",
        event.id, result.created, result.skipped, result.failed,
    )
    return result


def create_booking_request_for_artist(
    db: Session, event_id: str, artist_id: str, effects: SideEffects
) -> FanoutResult:
    """Single-artist fan-out for an artist added to an already published event."""
    event = _load_event(db, event_id)
    failure = _check_publishable(event)
    if failure:
        return failure

    entry = next((ea for ea in event.event_artists if ea.artist_id == artist_id), None)
    if entry is None:
        return FanoutResult(success=False, message="Artist is not part of this event")

    result = FanoutResult(success=True, message="")
    if entry.confirmed:
        result.skipped += 1
    else:
        _request_booking(db, event, entry, effects, result)
    db.commit()

    result.message = "Booking request created" if result.created else "No booking request needed"
    return result


def cancel_booking_requests_for_event(db: Session, event_id: str, effects: SideEffects) -> FanoutResult:
    """Cancel live bookings of an event leaving PUBLISHED and reset its line-up confirmations."""
    event = db.query(Event).options(joinedload(Event.venue)).filter(Event.id == event_id).first()
    if event is None:
        return FanoutResult(success=False, message="Event not found")

    bookings = (
        db.query(Booking)
        .options(joinedload(Booking.artist).joinedload(Artist.user))
        .filter(
            Booking.event_id == event.id,
            Booking.status.in_([BookingStatus.PENDING, BookingStatus.ACCEPTED]),
        )
        .all()
    )
    if not bookings:
        return FanoutResult(success=True, message="No booking requests to cancel")

    for booking in bookings:
        booking.status = BookingStatus.CANCELLED
    db.query(EventArtist).filter(EventArtist.event_id == event.id).update(
        {EventArtist.confirmed: False}, synchronize_session=False
    )

    venue_name = event.venue.name if event.venue else (event.external_venue_name or "")
    notified: set[str] = set()
    for booking in bookings:
        artist = booking.artist
        if artist.id in notified:
            continue
        notified.add(artist.id)
        notification_service.create_notification(
            db,
            NotificationType.BOOKING_CANCELLED,
            artist.user_id,
            title="Booking cancelled",
            message=f'Your booking for "{event.title}" has been cancelled',
            event_id=event.id,
        )
        effects.email(
            artist.user.email if artist.user else None,
            templates.booking_cancelled_for_artist(artist.name, venue_name, booking.event_date, event_title=event.title),
        )
    db.commit()

    logger.info("Cancelled %d booking requests for event %s", len(bookings), event.id)
    return FanoutResult(success=True, message=f"Cancelled {len(bookings)} booking requests", cancelled=len(bookings))
