"""Tests for the booking lifecycle (create / accept / decline / cancel)."""
from datetime import datetime, timezone

from app.models.booking import Booking, BookingStatus
from app.models.event import Event, EventArtist, EventStatus
from app.services import booking_service
from app.services.results import ResultCode
from tests.conftest import future, make_artist, make_event, make_venue, principal_of, register

SLOT = datetime(2030, 9, 12, 18, 0, tzinfo=timezone.utc)


def _setup(client):
    venue = register(client, "room@example.com", "VENUE", "Room Owner", venue_name="Blue Room")
    artist = register(client, "ana@example.com", "ARTIST", "Ana", artist_name="Ana Live")
    return venue, artist


def _request(client, venue, artist, start=SLOT, hours=None):
    payload = {"artist_id": artist["artist"]["id"], "event_date": start.isoformat()}
    if hours is not None:
        payload["hours"] = hours
    return client.post("/api/bookings/", json=payload, headers=venue["headers"])


class TestCreateBooking:

    def test_venue_creates_pending_booking(self, client, outbox):
        venue, artist = _setup(client)
        resp = _request(client, venue, artist, hours=2)
        assert resp.status_code == 201, resp.text
        assert resp.json()["status"] == "PENDING"
        assert [m["to"] for m in outbox] == ["ana@example.com"]

        notes = client.get("/api/notifications/", headers=artist["headers"]).json()
        assert notes["notifications"][0]["type"] == "BOOKING_REQUEST"

    def test_artist_cannot_create_booking(self, client):
        venue, artist = _setup(client)
        resp = _request(client, artist, artist)
        assert resp.status_code == 403

    def test_unknown_artist(self, client):
        venue, _ = _setup(client)
        resp = client.post("/api/bookings/", json={"artist_id": "missing", "event_date": SLOT.isoformat()},
                           headers=venue["headers"])
        assert resp.status_code == 404

    def test_non_positive_hours_rejected(self, client):
        venue, artist = _setup(client)
        assert _request(client, venue, artist, hours=0).status_code == 422

    def test_conflicting_request_rejected(self, client, db):
        venue, artist = _setup(client)
        db.add(Booking(artist_id=artist["artist"]["id"], event_date=SLOT, hours=2, status=BookingStatus.ACCEPTED))
        db.commit()

        resp = _request(client, venue, artist, start=SLOT.replace(minute=30))
        assert resp.status_code == 409
        assert resp.json()["message"] == "Artist is unavailable at that time"
        assert resp.json()["error"] == "conflict"

        assert _request(client, venue, artist, start=SLOT.replace(hour=20), hours=1).status_code == 201


class TestRespond:

    def test_accept_standalone_creates_published_event(self, client):
        venue, artist = _setup(client)
        booking = _request(client, venue, artist, hours=2).json()

        resp = client.patch(f"/api/bookings/{booking['booking_id']}", json={"action": "ACCEPT"},
                            headers=artist["headers"])
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ACCEPTED"

        event = client.get(f"/api/events/{body['event_id']}").json()
        assert event["title"] == "Ana Live at Blue Room"
        assert event["status"] == "PUBLISHED"
        assert event["event_artists"][0]["confirmed"] is True

        notes = client.get("/api/notifications/", headers=venue["headers"]).json()
        assert notes["notifications"][0]["type"] == "BOOKING_ACCEPTED"

    def test_accept_twice_fails(self, client):
        venue, artist = _setup(client)
        booking_id = _request(client, venue, artist).json()["booking_id"]
        client.patch(f"/api/bookings/{booking_id}", json={"action": "ACCEPT"}, headers=artist["headers"])
        resp = client.patch(f"/api/bookings/{booking_id}", json={"action": "DECLINE"}, headers=artist["headers"])
        assert resp.status_code == 409
        assert resp.json()["success"] is False

    def test_accept_gated_by_conflict(self, client):
        venue, artist = _setup(client)
        first = _request(client, venue, artist, hours=2).json()["booking_id"]
        second = _request(client, venue, artist, start=SLOT.replace(hour=19), hours=2).json()["booking_id"]

        assert client.patch(f"/api/bookings/{first}", json={"action": "ACCEPT"},
                            headers=artist["headers"]).status_code == 200
        resp = client.patch(f"/api/bookings/{second}", json={"action": "ACCEPT"}, headers=artist["headers"])
        assert resp.status_code == 409
        assert client.get(f"/api/bookings/{second}", headers=artist["headers"]).json()["status"] == "PENDING"

    def test_only_booked_artist_responds(self, client):
        venue, artist = _setup(client)
        other = register(client, "bo@example.com", "ARTIST", "Bo")
        booking_id = _request(client, venue, artist).json()["booking_id"]
        assert client.patch(f"/api/bookings/{booking_id}", json={"action": "ACCEPT"},
                            headers=other["headers"]).status_code == 403
        assert client.patch(f"/api/bookings/{booking_id}", json={"action": "ACCEPT"},
                            headers=venue["headers"]).status_code == 403

    def test_decline(self, client, outbox):
        venue, artist = _setup(client)
        booking_id = _request(client, venue, artist).json()["booking_id"]
        resp = client.patch(f"/api/bookings/{booking_id}", json={"action": "DECLINE"}, headers=artist["headers"])
        assert resp.json()["status"] == "DECLINED"
        assert outbox[-1]["to"] == "room@example.com"

    def test_cancel_by_venue(self, client):
        venue, artist = _setup(client)
        booking_id = _request(client, venue, artist).json()["booking_id"]
        assert client.patch(f"/api/bookings/{booking_id}", json={"action": "CANCEL"},
                            headers=artist["headers"]).status_code == 403
        resp = client.patch(f"/api/bookings/{booking_id}", json={"action": "CANCEL"}, headers=venue["headers"])
        assert resp.status_code == 200
        assert resp.json()["status"] == "CANCELLED"

    def test_unknown_booking(self, client):
        _, artist = _setup(client)
        resp = client.patch("/api/bookings/missing", json={"action": "ACCEPT"}, headers=artist["headers"])
        assert resp.status_code == 404


class TestEventLinkedBookings:

    def test_accept_confirms_lineup_entry(self, db, effects):
        venue = make_venue(db)
        artist = make_artist(db)
        event = make_event(db, venue.user_id, venue=venue, status=EventStatus.PUBLISHED, artists=[artist])
        booking = Booking(artist_id=artist.id, venue_id=venue.id, event_id=event.id,
                          event_date=event.event_date, status=BookingStatus.PENDING)
        db.add(booking)
        db.commit()

        result = booking_service.accept_booking(db, principal_of(db, artist), booking.id, effects)
        assert result.success is True
        db.expire_all()
        assert db.query(EventArtist).one().confirmed is True
        assert db.query(Event).count() == 1

    def test_list_bookings_scoped_to_caller(self, db, effects):
        venue = make_venue(db)
        artist = make_artist(db)
        other = make_artist(db, "Other Artist")
        for who in (artist, other):
            db.add(Booking(artist_id=who.id, venue_id=venue.id, event_date=future(), status=BookingStatus.PENDING))
        db.commit()
        assert len(booking_service.list_bookings(db, principal_of(db, venue))) == 2
        assert [b.artist_id for b in booking_service.list_bookings(db, principal_of(db, artist))] == [artist.id]

    def test_get_booking_forbidden_for_stranger(self, db):
        venue = make_venue(db)
        artist = make_artist(db)
        stranger = make_artist(db, "Stranger")
        booking = Booking(artist_id=artist.id, venue_id=venue.id, event_date=future(), status=BookingStatus.PENDING)
        db.add(booking)
        db.commit()
        assert booking_service.get_booking(db, principal_of(db, stranger), booking.id).code == ResultCode.forbidden
        assert booking_service.get_booking(db, principal_of(db, artist), booking.id).success is True
