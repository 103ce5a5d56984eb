"""Booking lifecycle: direct venue-to-artist requests and the artist's response."""
import logging
from typing import Any, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.auth import Principal
from app.mail import templates
from app.models.booking import Booking, BookingStatus
from app.models.event import Event, EventArtist, EventStatus
from app.models.notification import NotificationType
from app.models.profile import Artist, Venue
from app.models.user import UserRole
from app.services import notification_service
from app.services.conflict_service import has_artist_conflict
from app.services.results import ResultCode, WorkflowResult, fail, ok
from app.services.side_effects import SideEffects
from app.services.transitions import BOOKING_TRANSITIONS, BookingAction, next_status
from app.utils.dates import ensure_utc
from app.utils.slugs import unique_slug

logger = logging.getLogger(__name__)

UNAVAILABLE = "Artist is unavailable at that time"


def _get_booking(db: Session, booking_id: str) -> Optional[Booking]:
    return (
        db.query(Booking)
        .options(
            joinedload(Booking.artist).joinedload(Artist.user),
            joinedload(Booking.venue).joinedload(Venue.user),
            joinedload(Booking.event),
        )
        .filter(Booking.id == booking_id)
        .first()
    )


def _counterparty_user_id(booking: Booking) -> Optional[str]:
    """Whoever asked for the booking: the venue owner, else the event creator."""
    if booking.venue is not None:
        return booking.venue.user_id
    if booking.event is not None:
        return booking.event.created_by
    return None


def _venue_name(booking: Booking) -> str:
    if booking.venue is not None:
        return booking.venue.name
    if booking.event is not None:
        return booking.event.external_venue_name or booking.event.title
    return ""


def can_view_booking(principal: Principal, booking: Booking) -> bool:
    return (
        principal.role == UserRole.ADMIN
        or (principal.artist_id is not None and principal.artist_id == booking.artist_id)
        or (principal.venue_id is not None and principal.venue_id == booking.venue_id)
        or (booking.event is not None and booking.event.created_by == principal.id)
    )


def create_booking(
    db: Session, principal: Principal, data: Mapping[str, Any], effects: SideEffects
) -> WorkflowResult:
    """A venue asks an artist for a slot; refused up front if the artist is busy."""
    if not principal.is_venue:
        return fail(ResultCode.forbidden, "Only venues can create bookings")

    artist_id = data.get("artist_id")
    if not artist_id:
        return fail(ResultCode.validation_error, "Artist ID is required", errors=["Artist ID is required"])
    event_date = data.get("event_date")
    if not event_date:
        return fail(ResultCode.validation_error, "Event date is required", errors=["Event date is required"])
    hours = data.get("hours")
    if hours is not None and hours <= 0:
        return fail(ResultCode.validation_error, "Hours must be positive", errors=["Hours must be positive"])

    artist = db.query(Artist).options(joinedload(Artist.user)).filter(Artist.id == artist_id).first()
    if not artist:
        return fail(ResultCode.not_found, "Artist not found")
    venue = db.query(Venue).filter(Venue.id == principal.venue_id).first()

    if has_artist_conflict(db, artist.id, event_date, hours):
        return fail(ResultCode.conflict, UNAVAILABLE)

    booking = Booking(
        artist_id=artist.id,
        venue_id=venue.id,
        event_date=ensure_utc(event_date),
        hours=hours,
        note=data.get("note"),
        status=BookingStatus.PENDING,
    )
    db.add(booking)
    db.flush()
    notification_service.create_notification(
        db,
        NotificationType.BOOKING_REQUEST,
        artist.user_id,
        title="New booking request",
        message=f"{venue.name} sent you a booking request",
        action_url=f"/dashboard/artist/gigs/{booking.id}",
    )
    db.commit()
    logger.info("Booking %s requested by venue %s for artist %s", booking.id, venue.id, artist.id)

    effects.email(
        artist.user.email if artist.user else None,
        templates.booking_request_for_artist(artist.name, venue.name, booking.event_date, booking.hours, booking.id),
    )
    effects.revalidate("/dashboard/artist/gigs")
    return ok("Booking request sent", booking_id=booking.id, status=booking.status.value)


def _create_event_for_booking(db: Session, booking: Booking) -> Event:
    """Turn an accepted standalone booking into a published event with a confirmed line-up."""
    artist = booking.artist
    venue = booking.venue
    title = f"{artist.name} at {venue.name}"
    event = Event(
        title=title,
        slug=unique_slug(db, Event, title),
        description=booking.note,
        created_by=venue.user_id,
        venue_id=venue.id,
        event_date=booking.event_date,
        total_hours=booking.hours,
        is_public=True,
        status=EventStatus.PUBLISHED,
    )
    db.add(event)
    db.flush()
    db.add(EventArtist(event_id=event.id, artist_id=artist.id, hours=booking.hours, confirmed=True))
    booking.event_id = event.id
    logger.info("Created event %s for booking %s", event.id, booking.id)
    return event


def _artist_gate(
    principal: Principal, booking: Optional[Booking], action: BookingAction
) -> tuple[Optional[BookingStatus], Optional[WorkflowResult]]:
    if not booking:
        return None, fail(ResultCode.not_found, "Booking not found")
    if principal.artist_id != booking.artist_id:
        return None, fail(ResultCode.forbidden, "Only the booked artist can respond to this booking")
    target = next_status(BOOKING_TRANSITIONS, action, booking.status)
    if target is None:
        return None, fail(ResultCode.invalid_state, "Booking is not pending")
    return target, None


def accept_booking(
    db: Session, principal: Principal, booking_id: str, effects: SideEffects
) -> WorkflowResult:
    """PENDING -> ACCEPTED, unless the slot now collides with another commitment."""
    booking = _get_booking(db, booking_id)
    target, failure = _artist_gate(principal, booking, BookingAction.accept)
    if failure:
        return failure

    if has_artist_conflict(db, booking.artist_id, booking.event_date, booking.hours, exclude_booking_id=booking.id):
        return fail(ResultCode.conflict, UNAVAILABLE)

    booking.status = target
    if booking.event_id:
        db.query(EventArtist).filter(
            EventArtist.event_id == booking.event_id,
            EventArtist.artist_id == booking.artist_id,
        ).update({EventArtist.confirmed: True}, synchronize_session=False)
    elif booking.venue is not None:
        _create_event_for_booking(db, booking)

    recipient = _counterparty_user_id(booking)
    if recipient:
        notification_service.create_notification(
            db,
            NotificationType.BOOKING_ACCEPTED,
            recipient,
            title="Booking accepted",
            message=f"{booking.artist.name} accepted your booking request",
            event_id=booking.event_id,
            action_url=f"/dashboard/venue/bookings/{booking.id}",
        )
    db.commit()
    logger.info("Booking %s accepted by artist %s", booking.id, booking.artist_id)

    if booking.venue is not None:
        effects.email(
            booking.venue.user.email if booking.venue.user else None,
            templates.booking_response_for_venue(
                booking.venue.name, booking.artist.name, True, booking.event_date, booking.id
            ),
        )
    effects.revalidate("/events")
    return ok("Booking accepted", booking_id=booking.id, status=booking.status.value, event_id=booking.event_id)


def decline_booking(
    db: Session, principal: Principal, booking_id: str, effects: SideEffects
) -> WorkflowResult:
    """PENDING -> DECLINED by the artist."""
    booking = _get_booking(db, booking_id)
    target, failure = _artist_gate(principal, booking, BookingAction.decline)
    if failure:
        return failure

    booking.status = target
    recipient = _counterparty_user_id(booking)
    if recipient:
        notification_service.create_notification(
            db,
            NotificationType.BOOKING_DECLINED,
            recipient,
            title="Booking declined",
            message=f"{booking.artist.name} declined your booking request",
            event_id=booking.event_id,
            action_url=f"/dashboard/venue/bookings/{booking.id}",
        )
    db.commit()
    logger.info("Booking %s declined by artist %s", booking.id, booking.artist_id)

    if booking.venue is not None:
        effects.email(
            booking.venue.user.email if booking.venue.user else None,
            templates.booking_response_for_venue(
                booking.venue.name, booking.artist.name, False, booking.event_date, booking.id
            ),
        )
    return ok("Booking declined", booking_id=booking.id, status=booking.status.value)


def cancel_booking(
    db: Session, principal: Principal, booking_id: str, effects: SideEffects
) -> WorkflowResult:
    """PENDING -> CANCELLED by the requesting venue (or event creator for external venues)."""
    booking = _get_booking(db, booking_id)
    if not booking:
        return fail(ResultCode.not_found, "Booking not found")
    is_requester = (
        principal.role == UserRole.ADMIN
        or (principal.venue_id is not None and principal.venue_id == booking.venue_id)
        or (booking.venue_id is None and booking.event is not None and booking.event.created_by == principal.id)
    )
    if not is_requester:
        return fail(ResultCode.forbidden, "Only the requesting venue can cancel this booking")
    target = next_status(BOOKING_TRANSITIONS, BookingAction.cancel, booking.status)
    if target is None:
        return fail(ResultCode.invalid_state, "Booking is not pending")

    booking.status = target
    artist = booking.artist
    notification_service.create_notification(
        db,
        NotificationType.BOOKING_CANCELLED,
        artist.user_id,
        title="Booking cancelled",
        message=f"{_venue_name(booking)} cancelled their booking request",
        event_id=booking.event_id,
        action_url=f"/dashboard/artist/gigs/{booking.id}",
    )
    db.commit()
    logger.info("Booking %s cancelled by user %s", booking.id, principal.id)

    effects.email(
        artist.user.email if artist.user else None,
        templates.booking_cancelled_for_artist(
            artist.name, _venue_name(booking), booking.event_date,
            event_title=booking.event.title if booking.event else None,
        ),
    )
    return ok("Booking cancelled", booking_id=booking.id, status=booking.status.value)


def get_booking(db: Session, principal: Principal, booking_id: str) -> WorkflowResult:
    booking = _get_booking(db, booking_id)
    if not booking:
        return fail(ResultCode.not_found, "Booking not found")
    if not can_view_booking(principal, booking):
        return fail(ResultCode.forbidden, "Not allowed to view this booking")
    return ok("Booking found", booking=booking)


def list_bookings(
    db: Session, principal: Principal, status: Optional[BookingStatus] = None
) -> list[Booking]:
    """Bookings where the caller is the artist or the venue, latest date first."""
    conditions = []
    if principal.artist_id:
        conditions.append(Booking.artist_id == principal.artist_id)
    if principal.venue_id:
        conditions.append(Booking.venue_id == principal.venue_id)
    if not conditions:
        return []

    query = (
        db.query(Booking)
        .options(joinedload(Booking.artist), joinedload(Booking.venue), joinedload(Booking.event))
        .filter(or_(*conditions))
    )
    if status is not None:
        query = query.filter(Booking.status == status)
    return query.order_by(Booking.event_date.desc()).all()


def complete_bookings_for_event(db: Session, event_id: str) -> int:
    """ACCEPTED -> COMPLETED for every booking of a completed event. The caller commits."""
    bookings = (
        db.query(Booking)
        .filter(Booking.event_id == event_id, Booking.status == BookingStatus.ACCEPTED)
        .all()
    )
    for booking in bookings:
        booking.status = next_status(BOOKING_TRANSITIONS, BookingAction.complete, booking.status)
    if bookings:
        logger.info("Completed %d bookings for event %s", len(bookings), event_id)
    return len(bookings)
