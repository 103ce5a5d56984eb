"""Email bodies for workflow notifications."""
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Optional

from app.config import settings
from app.utils.dates import format_local

SIGNATURE = "<hr/><p>Enescena</p>"


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str
    text: str


def _link(path: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}{path}"


def _when(event_date: datetime, hours: Optional[float] = None) -> str:
    when = format_local(event_date, settings.LOCAL_TIMEZONE)
    return f"{when} • {hours:g}h" if hours else when


def _reason(reason: Optional[str]) -> str:
    return f": {reason}" if reason else ""


def event_request_for_venue(venue_name: str, requester_name: str, event_title: str,
                            event_date: datetime, event_id: str) -> EmailContent:
    link = _link(f"/dashboard/venue/events/{event_id}")
    return EmailContent(
        subject=f"New event request: {event_title}",
        html=(
            "<h2>New event request</h2>"
            f"<p>Hi {escape(venue_name)},</p>"
            f"<p><b>{escape(requester_name)}</b> wants to host \"<b>{escape(event_title)}</b>\" at your venue.</p>"
            f"<p><b>When:</b> {_when(event_date)}</p>"
            f'<p><a href="{link}">Review request</a></p>{SIGNATURE}'
        ),
        text=f"{requester_name} wants to host \"{event_title}\" at your venue on {_when(event_date)}. Review: {link}",
    )


def event_request_approved_for_creator(creator_name: str, venue_name: str, event_title: str,
                                       event_date: datetime, event_id: str) -> EmailContent:
    link = _link(f"/dashboard/artist/events/{event_id}")
    return EmailContent(
        subject=f"{venue_name} approved your event request",
        html=(
            "<h2>Event request approved</h2>"
            f"<p>Hi {escape(creator_name)},</p>"
            f"<p><b>{escape(venue_name)}</b> approved \"<b>{escape(event_title)}</b>\".</p>"
            f"<p><b>When:</b> {_when(event_date)}</p>"
            f'<p><a href="{link}">View event</a></p>{SIGNATURE}'
        ),
        text=f"{venue_name} approved \"{event_title}\" ({_when(event_date)}). Details: {link}",
    )


def event_request_declined_for_creator(creator_name: str, venue_name: str, event_title: str,
                                       reason: Optional[str], event_id: str) -> EmailContent:
    link = _link(f"/dashboard/artist/events/{event_id}")
    reason_html = f"<p><b>Reason:</b> {escape(reason)}</p>" if reason else ""
    return EmailContent(
        subject=f"{venue_name} declined your event request",
        html=(
            "<h2>Event request declined</h2>"
            f"<p>Hi {escape(creator_name)},</p>"
            f"<p><b>{escape(venue_name)}</b> declined \"<b>{escape(event_title)}</b>\".</p>"
            f"{reason_html}{SIGNATURE}"
        ),
        text=f"{venue_name} declined \"{event_title}\"{_reason(reason)}. Details: {link}",
    )


def performance_invitation_for_artist(artist_name: str, venue_name: str, event_title: str,
                                      event_date: datetime, hours: Optional[float],
                                      performance_id: str) -> EmailContent:
    link = _link(f"/dashboard/artist/events/{performance_id}")
    return EmailContent(
        subject=f"Performance invitation from {venue_name}",
        html=(
            "<h2>Performance invitation</h2>"
            f"<p>Hi {escape(artist_name)},</p>"
            f"<p><b>{escape(venue_name)}</b> invited you to perform at \"<b>{escape(event_title)}</b>\".</p>"
            f"<p><b>When:</b> {_when(event_date, hours)}</p>"
            f'<p><a href="{link}">View &amp; respond</a></p>{SIGNATURE}'
        ),
        text=f"Performance invitation from {venue_name} for \"{event_title}\" at {_when(event_date, hours)}. Respond: {link}",
    )


def invitation_response_for_requester(recipient_name: str, artist_name: str, accepted: bool, event_title: str,
                                      event_date: datetime, hours: Optional[float], event_id: str,
                                      reason: Optional[str] = None) -> EmailContent:
    verb = "accepted" if accepted else "declined"
    link = _link(f"/dashboard/events/{event_id}/performances")
    return EmailContent(
        subject=f"{artist_name} {verb} your invitation",
        html=(
            f"<h2>Invitation {verb}</h2>"
            f"<p>Hi {escape(recipient_name)},</p>"
            f"<p><b>{escape(artist_name)}</b> {verb} your invitation to perform at "
            f"\"<b>{escape(event_title)}</b>\"{escape(_reason(reason))}.</p>"
            f"<p><b>When:</b> {_when(event_date, hours)}</p>"
            f'<p><a href="{link}">View line-up</a></p>{SIGNATURE}'
        ),
        text=f"{artist_name} {verb} your invitation to perform at \"{event_title}\"{_reason(reason)}. Details: {link}",
    )


def performance_confirmed_for_artist(artist_name: str, event_title: str, event_date: datetime,
                                     hours: Optional[float], event_id: str) -> EmailContent:
    link = _link(f"/dashboard/artist/events/{event_id}")
    return EmailContent(
        subject=f"You're confirmed for {event_title}",
        html=(
            "<h2>Performance confirmed</h2>"
            f"<p>Hi {escape(artist_name)},</p>"
            f"<p>Your performance at \"<b>{escape(event_title)}</b>\" is confirmed.</p>"
            f"<p><b>When:</b> {_when(event_date, hours)}</p>"
            f'<p><a href="{link}">View event</a></p>{SIGNATURE}'
        ),
        text=f"Your performance at \"{event_title}\" ({_when(event_date, hours)}) is confirmed. Details: {link}",
    )


def performance_cancelled_for_artist(artist_name: str, venue_name: str, event_title: str,
                                     was_confirmed: bool, reason: Optional[str]) -> EmailContent:
    what = "confirmed performance" if was_confirmed else "invitation to perform"
    return EmailContent(
        subject=f"Performance cancelled: {event_title}",
        html=(
            "<h2>Performance cancelled</h2>"
            f"<p>Hi {escape(artist_name)},</p>"
            f"<p>Your {what} at \"<b>{escape(event_title)}</b>\" ({escape(venue_name)}) has been cancelled"
            f"{escape(_reason(reason))}.</p>{SIGNATURE}"
        ),
        text=f"Your {what} at \"{event_title}\" ({venue_name}) has been cancelled{_reason(reason)}.",
    )


def booking_request_for_artist(artist_name: str, venue_name: str, event_date: datetime,
                               hours: Optional[float], booking_id: str,
                               event_title: Optional[str] = None) -> EmailContent:
    link = _link(f"/dashboard/artist/gigs/{booking_id}")
    about = f" for \"{event_title}\"" if event_title else ""
    return EmailContent(
        subject=f"New booking request from {venue_name}",
        html=(
            "<h2>New booking request</h2>"
            f"<p>Hi {escape(artist_name)},</p>"
            f"<p><b>{escape(venue_name)}</b> sent you a booking request{escape(about)}.</p>"
            f"<p><b>When:</b> {_when(event_date, hours)}</p>"
            f'<p><a href="{link}">Accept or decline</a></p>{SIGNATURE}'
        ),
        text=f"{venue_name} sent you a booking request{about} at {_when(event_date, hours)}. Respond: {link}",
    )


def booking_cancelled_for_artist(artist_name: str, venue_name: str, event_date: datetime,
                                 event_title: Optional[str] = None) -> EmailContent:
    about = f" for \"{event_title}\"" if event_title else ""
    return EmailContent(
        subject=f"Booking cancelled by {venue_name}",
        html=(
            "<h2>Booking cancelled</h2>"
            f"<p>Hi {escape(artist_name)},</p>"
            f"<p>Your booking{escape(about)} on {_when(event_date)} with <b>{escape(venue_name)}</b> "
            f"has been cancelled.</p>{SIGNATURE}"
        ),
        text=f"Your booking{about} on {_when(event_date)} with {venue_name} has been cancelled.",
    )


def booking_response_for_venue(venue_name: str, artist_name: str, accepted: bool,
                               event_date: datetime, booking_id: str) -> EmailContent:
    verb = "accepted" if accepted else "declined"
    link = _link(f"/dashboard/venue/bookings/{booking_id}")
    return EmailContent(
        subject=f"{artist_name} {verb} your booking request",
        html=(
            f"<h2>Booking {verb}</h2>"
            f"<p>Hi {escape(venue_name)},</p>"
            f"<p><b>{escape(artist_name)}</b> {verb} your booking request for {_when(event_date)}.</p>"
            f'<p><a href="{link}">View booking</a></p>{SIGNATURE}'
        ),
        text=f"{artist_name} {verb} your booking request for {_when(event_date)}. Details: {link}",
    )
