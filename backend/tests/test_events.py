"""Tests for Event CRUD, line-up management and status changes.

Covers:
- Creation rules (validation errors, venue-scoped creation, artist -> venue approval)
- Authorization hook: creator or venue owner only
- Status changes restricted to the transition table
- Slug generation and regeneration on title change
- Delete / remove-artist guards when bookings exist
"""
from app.models.booking import Booking, BookingStatus
from app.models.event import Event
from tests.conftest import future, register


def _setup(client):
    venue = register(client, "room@example.com", "VENUE", "Room Owner", venue_name="Blue Room")
    artist = register(client, "ana@example.com", "ARTIST", "Ana", artist_name="Ana Live")
    return venue, artist


def _create(client, owner, title="Friday Jazz", **extra):
    payload = {
        "title": title,
        "event_date": future().isoformat(),
        "venue_id": owner["venue"]["id"] if owner.get("venue") else None,
        "total_hours": 3,
        **extra,
    }
    return client.post("/api/events/", json=payload, headers=owner["headers"])


class TestCreateEvent:

    def test_venue_creates_draft(self, client):
        venue, _ = _setup(client)
        resp = _create(client, venue)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["status"] == "DRAFT"
        assert data["slug"] == "friday-jazz"
        assert data["venue_id"] == venue["venue"]["id"]

    def test_validation_errors_reported_together(self, client):
        venue, _ = _setup(client)
        resp = client.post("/api/events/", json={"title": " "}, headers=venue["headers"])
        assert resp.status_code == 422
        errors = resp.json()["detail"]["errors"]
        assert "Title is required" in errors
        assert "Event date is required" in errors
        assert "Either venue ID or external venue name is required" in errors

    def test_venue_cannot_create_at_another_venue(self, client):
        venue, _ = _setup(client)
        other = register(client, "hall@example.com", "VENUE", "Hall Owner", venue_name="Great Hall")
        resp = _create(client, venue, venue_id=other["venue"]["id"])
        assert resp.status_code == 403

    def test_artist_at_venue_goes_to_approval(self, client, outbox):
        venue, artist = _setup(client)
        resp = _create(client, artist, venue_id=venue["venue"]["id"])
        assert resp.status_code == 201
        assert resp.json()["status"] == "PENDING_VENUE_APPROVAL"
        assert [m["to"] for m in outbox] == ["room@example.com"]

    def test_artist_external_venue_stays_draft(self, client):
        _, artist = _setup(client)
        resp = _create(client, artist, external_venue_name="Town Square")
        assert resp.status_code == 201
        assert resp.json()["status"] == "DRAFT"

    def test_unknown_lineup_artist(self, client):
        venue, _ = _setup(client)
        assert _create(client, venue, artist_ids=["missing"]).status_code == 404

    def test_duplicate_titles_get_suffixed_slugs(self, client):
        venue, _ = _setup(client)
        _create(client, venue)
        second = _create(client, venue).json()
        assert second["slug"] == "friday-jazz-1"

    def test_unauthenticated(self, client):
        resp = client.post("/api/events/", json={"title": "x"})
        assert resp.status_code == 401


class TestUpdateEvent:

    def test_title_change_regenerates_slug(self, client):
        venue, _ = _setup(client)
        event = _create(client, venue).json()
        resp = client.patch(f"/api/events/{event['id']}", json={"title": "Saturday Soul"},
                            headers=venue["headers"])
        assert resp.status_code == 200
        assert resp.json()["slug"] == "saturday-soul"

    def test_only_creator_or_venue_owner(self, client):
        venue, artist = _setup(client)
        event = _create(client, venue).json()
        resp = client.patch(f"/api/events/{event['id']}", json={"description": "hijack"},
                            headers=artist["headers"])
        assert resp.status_code == 403

    def test_disallowed_status_change(self, client):
        venue, _ = _setup(client)
        event = _create(client, venue).json()
        resp = client.patch(f"/api/events/{event['id']}", json={"status": "COMPLETED"},
                            headers=venue["headers"])
        assert resp.status_code == 409

    def test_cancel_then_publish_refused(self, client):
        venue, _ = _setup(client)
        event = _create(client, venue).json()
        url = f"/api/events/{event['id']}"
        assert client.patch(url, json={"status": "CANCELLED"}, headers=venue["headers"]).status_code == 200
        assert client.patch(url, json={"status": "PUBLISHED"}, headers=venue["headers"]).status_code == 409

    def test_external_name_rejected_on_internal_venue_event(self, client):
        venue, _ = _setup(client)
        event = _create(client, venue).json()
        resp = client.patch(f"/api/events/{event['id']}", json={"external_venue_name": "Park"},
                            headers=venue["headers"])
        assert resp.status_code == 422
        assert resp.json()["detail"]["errors"] == ["Cannot specify both internal venue and external venue"]
        stored = client.get(f"/api/events/{event['id']}").json()
        assert stored["external_venue_name"] is None
        assert stored["venue_id"] == venue["venue"]["id"]

    def test_clearing_external_name_rejected(self, client):
        _, artist = _setup(client)
        event = _create(client, artist, external_venue_name="Town Square").json()
        for name in (None, ""):
            resp = client.patch(f"/api/events/{event['id']}", json={"external_venue_name": name},
                                headers=artist["headers"])
            assert resp.status_code == 422
            assert resp.json()["detail"]["errors"] == ["Either venue ID or external venue name is required"]
        assert client.get(f"/api/events/{event['id']}").json()["external_venue_name"] == "Town Square"

    def test_renaming_external_venue(self, client):
        _, artist = _setup(client)
        event = _create(client, artist, external_venue_name="Town Square").json()
        resp = client.patch(f"/api/events/{event['id']}", json={"external_venue_name": "Harbour Stage"},
                            headers=artist["headers"])
        assert resp.status_code == 200
        assert resp.json()["external_venue_name"] == "Harbour Stage"

    def test_event_date_cannot_move_into_the_past(self, client):
        venue, _ = _setup(client)
        event = _create(client, venue).json()
        resp = client.patch(f"/api/events/{event['id']}", json={"event_date": "2001-01-01T20:00:00Z"},
                            headers=venue["headers"])
        assert resp.status_code == 422
        assert resp.json()["detail"]["errors"] == ["Event date must be in the future"]
        assert client.get(f"/api/events/{event['id']}").json()["event_date"][:4] != "2001"

        resp = client.patch(f"/api/events/{event['id']}", json={"event_date": None}, headers=venue["headers"])
        assert resp.json()["detail"]["errors"] == ["Event date is required"]

        later = future(days=60).isoformat()
        assert client.patch(f"/api/events/{event['id']}", json={"event_date": later},
                            headers=venue["headers"]).status_code == 200

    def test_unknown_event(self, client):
        venue, _ = _setup(client)
        assert client.patch("/api/events/missing", json={}, headers=venue["headers"]).status_code == 404


class TestDeleteAndLineup:

    def test_delete_draft_event(self, client):
        venue, _ = _setup(client)
        event = _create(client, venue).json()
        assert client.delete(f"/api/events/{event['id']}", headers=venue["headers"]).status_code == 204
        assert client.get(f"/api/events/{event['id']}").status_code == 404

    def test_delete_blocked_by_bookings(self, client, db):
        venue, artist = _setup(client)
        event = _create(client, venue).json()
        db.add(Booking(artist_id=artist["artist"]["id"], venue_id=venue["venue"]["id"], event_id=event["id"],
                       event_date=future(), status=BookingStatus.DECLINED))
        db.commit()
        resp = client.delete(f"/api/events/{event['id']}", headers=venue["headers"])
        assert resp.status_code == 400
        assert db.query(Event).count() == 1

    def test_add_and_remove_lineup_artist(self, client):
        venue, artist = _setup(client)
        event = _create(client, venue).json()
        url = f"/api/events/{event['id']}/artists"
        resp = client.post(url, json={"artist_id": artist["artist"]["id"], "fee": 150},
                           headers=venue["headers"])
        assert resp.status_code == 201
        assert resp.json()["confirmed"] is False

        dup = client.post(url, json={"artist_id": artist["artist"]["id"]}, headers=venue["headers"])
        assert dup.status_code == 409

        patched = client.patch(f"{url}/{artist['artist']['id']}", json={"hours": 1.5}, headers=venue["headers"])
        assert patched.json()["hours"] == 1.5

        assert client.delete(f"{url}/{artist['artist']['id']}", headers=venue["headers"]).status_code == 204
        assert client.get(url).json() == []

    def test_remove_blocked_by_bookings(self, client, db):
        venue, artist = _setup(client)
        event = _create(client, venue, artist_ids=[artist["artist"]["id"]]).json()
        db.add(Booking(artist_id=artist["artist"]["id"], venue_id=venue["venue"]["id"], event_id=event["id"],
                       event_date=future(), status=BookingStatus.PENDING))
        db.commit()
        resp = client.delete(f"/api/events/{event['id']}/artists/{artist['artist']['id']}",
                             headers=venue["headers"])
        assert resp.status_code == 400


class TestApprovalEndpoints:

    def test_request_approval_for_draft(self, client):
        venue, artist = _setup(client)
        event = _create(client, artist, external_venue_name="Town Square").json()
        resp = client.post(f"/api/events/{event['id']}/request-approval",
                           json={"venue_id": venue["venue"]["id"]}, headers=artist["headers"])
        assert resp.status_code == 200
        assert resp.json()["status"] == "PENDING_VENUE_APPROVAL"

        again = client.post(f"/api/events/{event['id']}/request-approval",
                            json={"venue_id": venue["venue"]["id"]}, headers=artist["headers"])
        assert again.status_code == 409
        assert again.json()["error"] == "invalid_state"

    def test_venue_request_and_respond(self, client):
        venue, artist = _setup(client)
        resp = client.post("/api/events/venue-request", json={
            "venue_id": venue["venue"]["id"], "title": "Ana Live Set", "event_date": future().isoformat(),
        }, headers=artist["headers"])
        assert resp.status_code == 201
        event_id = resp.json()["event_id"]

        approved = client.post(f"/api/events/{event_id}/respond", json={"action": "approve"},
                               headers=venue["headers"])
        assert approved.status_code == 200
        assert client.get(f"/api/events/{event_id}").json()["status"] == "SEEKING_ARTISTS"

    def test_venue_request_validation(self, client):
        venue, artist = _setup(client)
        resp = client.post("/api/events/venue-request", json={"venue_id": venue["venue"]["id"]},
                           headers=artist["headers"])
        assert resp.status_code == 422
        assert "Title is required" in resp.json()["errors"]

    def test_list_filters_by_status(self, client):
        venue, _ = _setup(client)
        _create(client, venue, title="One")
        second = _create(client, venue, title="Two").json()
        client.patch(f"/api/events/{second['id']}", json={"status": "CANCELLED"}, headers=venue["headers"])
        titles = [e["title"] for e in client.get("/api/events/", params={"status": "DRAFT"}).json()]
        assert titles == ["One"]
