"""Artist scheduling conflict checks.

A proposed slot ``[start, start + hours)`` conflicts with an artist's
ACCEPTED booking or declared unavailability window when the two half-open
intervals overlap. Touching endpoints never conflict.

Bookings are pre-filtered to the calendar day of ``start`` (local timezone)
so the query stays small; live performances never run close to 24h.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.booking import Booking, BookingStatus, ArtistUnavailability
from app.utils.dates import add_hours, ensure_utc, local_day_bounds

logger = logging.getLogger(__name__)

DEFAULT_DURATION_HOURS = settings.DEFAULT_BOOKING_HOURS


def effective_hours(hours: Optional[float]) -> float:
    """Zero, negative or missing durations collapse to the default."""
    if hours is None or hours <= 0:
        return DEFAULT_DURATION_HOURS
    return hours


def booking_window(start: datetime, hours: Optional[float] = None) -> tuple[datetime, datetime]:
    start = ensure_utc(start)
    return start, add_hours(start, effective_hours(hours))


def intervals_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    """Half-open overlap test: ``[start1, end1)`` against ``[start2, end2)``."""
    return ensure_utc(start1) < ensure_utc(end2) and ensure_utc(end1) > ensure_utc(start2)


def has_artist_conflict(
    db: Session,
    artist_id: str,
    start: datetime,
    hours: Optional[float] = None,
    exclude_booking_id: Optional[str] = None,
) -> bool:
    """True if the artist is already booked or unavailable during the slot."""
    start, end = booking_window(start, hours)
    day_start, day_end = local_day_bounds(start, settings.LOCAL_TIMEZONE)

    query = db.query(Booking).filter(
        Booking.artist_id == artist_id,
        Booking.status == BookingStatus.ACCEPTED,
        Booking.event_date >= day_start,
        Booking.event_date <= day_end,
    )
    if exclude_booking_id:
        query = query.filter(Booking.id != exclude_booking_id)

    for booking in query.all():
        b_start, b_end = booking_window(booking.event_date, booking.hours)
        if intervals_overlap(start, end, b_start, b_end):
            logger.info("Artist %s conflicts with booking %s at %s", artist_id, booking.id, b_start)
            return True

    windows = (
        db.query(ArtistUnavailability)
        .filter(
            ArtistUnavailability.artist_id == artist_id,
            ArtistUnavailability.end > day_start,
        )
        .all()
    )
    for window in windows:
        if intervals_overlap(start, end, window.start, window.end):
            logger.info("Artist %s unavailable (window %s) at %s", artist_id, window.id, start)
            return True

    return False
