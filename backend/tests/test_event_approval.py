"""Tests for the event venue-approval sub-machine.

Covers:
- Artist-created events at an internal venue go to PENDING_VENUE_APPROVAL
- Approve -> SEEKING_ARTISTS, decline -> CANCELLED with reason in the notification
- State gates: a second approve/decline fails without mutating
- Not-found vs forbidden are distinct result codes
"""
import pytest
from fastapi import HTTPException

from app.models.event import Event, EventStatus
from app.models.notification import Notification, NotificationType
from app.services import event_service, workflow_service
from app.services.results import ResultCode
from tests.conftest import future, make_artist, make_event, make_venue, principal_of, register


def _artist_request(db, effects):
    """Artist creates an event at a venue through the normal creation path."""
    artist = make_artist(db)
    venue = make_venue(db)
    principal = principal_of(db, artist)
    event = event_service.create_event(
        db, principal, {"title": "Album Launch", "event_date": future(), "venue_id": venue.id}, effects
    )
    return artist, venue, event


class TestRequestApproval:

    def test_artist_event_at_venue_requests_approval(self, db, effects):
        artist, venue, event = _artist_request(db, effects)
        assert event.status == EventStatus.PENDING_VENUE_APPROVAL
        assert event.venue_id == venue.id

        notes = db.query(Notification).filter(Notification.user_id == venue.user_id).all()
        assert [n.type for n in notes] == [NotificationType.EVENT_REQUEST]
        assert notes[0].event_id == event.id
        assert [to for to, _ in effects.emails] == [venue.user.email]

    def test_external_venue_event_stays_draft(self, db, effects):
        artist = make_artist(db)
        event = event_service.create_event(
            db, principal_of(db, artist),
            {"title": "Street Gig", "event_date": future(), "external_venue_name": "Town Square"},
            effects,
        )
        assert event.status == EventStatus.DRAFT
        assert db.query(Notification).count() == 0

    def test_venue_event_at_own_venue_stays_draft(self, db, effects):
        venue = make_venue(db)
        event = event_service.create_event(
            db, principal_of(db, venue), {"title": "House Night", "event_date": future(), "venue_id": venue.id}, effects
        )
        assert event.status == EventStatus.DRAFT

    def test_venue_cannot_create_at_other_venue(self, db, effects):
        mine = make_venue(db, "Mine")
        theirs = make_venue(db, "Theirs")
        with pytest.raises(HTTPException) as exc:
            event_service.create_event(
                db, principal_of(db, mine), {"title": "X", "event_date": future(), "venue_id": theirs.id}, effects
            )
        assert exc.value.status_code == 403

    def test_only_creator_can_request(self, db, effects):
        artist = make_artist(db)
        stranger = make_artist(db, "Stranger")
        venue = make_venue(db)
        event = make_event(db, artist.user_id)
        result = workflow_service.request_venue_approval(db, principal_of(db, stranger), event.id, venue.id, effects)
        assert result.success is False
        assert result.code == ResultCode.forbidden

    def test_request_from_non_draft_fails(self, db, effects):
        artist = make_artist(db)
        venue = make_venue(db)
        event = make_event(db, artist.user_id, status=EventStatus.PUBLISHED)
        result = workflow_service.request_venue_approval(db, principal_of(db, artist), event.id, venue.id, effects)
        assert result.success is False
        assert result.code == ResultCode.invalid_state
        db.refresh(event)
        assert event.status == EventStatus.PUBLISHED
        assert event.venue_id is None

    def test_request_event_at_venue(self, db, effects):
        artist = make_artist(db)
        venue = make_venue(db)
        result = workflow_service.request_event_at_venue(
            db, principal_of(db, artist), venue.id, {"title": "Acoustic Set", "event_date": future()}, effects
        )
        assert result.success is True
        event = db.query(Event).filter(Event.id == result.data["event_id"]).first()
        assert event.status == EventStatus.PENDING_VENUE_APPROVAL
        assert event.slug == "acoustic-set"

    def test_request_event_at_venue_validates(self, db, effects):
        artist = make_artist(db)
        venue = make_venue(db)
        result = workflow_service.request_event_at_venue(
            db, principal_of(db, artist), venue.id, {"title": ""}, effects
        )
        assert result.code == ResultCode.validation_error
        assert "Title is required" in result.data["errors"]
        assert db.query(Event).count() == 0


class TestVenueResponse:

    def test_approve(self, db, effects):
        artist, venue, event = _artist_request(db, effects)
        result = workflow_service.approve_event_request(db, principal_of(db, venue), event.id, effects)
        assert result.success is True
        assert result.message == "Event request approved successfully"
        db.refresh(event)
        assert event.status == EventStatus.SEEKING_ARTISTS

        notes = db.query(Notification).filter(Notification.user_id == artist.user_id).all()
        assert [n.type for n in notes] == [NotificationType.EVENT_REQUEST_APPROVED]

    def test_decline_with_reason(self, db, effects):
        artist, venue, event = _artist_request(db, effects)
        result = workflow_service.decline_event_request(db, principal_of(db, venue), event.id, "Fully booked", effects)
        assert result.success is True
        db.refresh(event)
        assert event.status == EventStatus.CANCELLED

        note = db.query(Notification).filter(Notification.user_id == artist.user_id).one()
        assert note.type == NotificationType.EVENT_REQUEST_DECLINED
        assert "Fully booked" in note.message
        assert note.message.endswith(": Fully booked")

    def test_decline_without_reason(self, db, effects):
        artist, venue, event = _artist_request(db, effects)
        workflow_service.decline_event_request(db, principal_of(db, venue), event.id, None, effects)
        note = db.query(Notification).filter(Notification.user_id == artist.user_id).one()
        assert note.message.endswith('"Album Launch"')

    def test_second_response_fails_without_mutation(self, db, effects):
        artist, venue, event = _artist_request(db, effects)
        principal = principal_of(db, venue)
        assert workflow_service.approve_event_request(db, principal, event.id, effects).success is True

        again = workflow_service.approve_event_request(db, principal, event.id, effects)
        declined = workflow_service.decline_event_request(db, principal, event.id, "late", effects)
        for result in (again, declined):
            assert result.success is False
            assert result.code == ResultCode.invalid_state
            assert result.message == "Event is not pending venue approval"
        db.refresh(event)
        assert event.status == EventStatus.SEEKING_ARTISTS

    def test_other_venue_forbidden(self, db, effects):
        _, _, event = _artist_request(db, effects)
        other = make_venue(db, "Other Venue")
        result = workflow_service.approve_event_request(db, principal_of(db, other), event.id, effects)
        assert result.code == ResultCode.forbidden
        db.refresh(event)
        assert event.status == EventStatus.PENDING_VENUE_APPROVAL

    def test_unknown_event_not_found(self, db, effects):
        venue = make_venue(db)
        result = workflow_service.approve_event_request(db, principal_of(db, venue), "missing", effects)
        assert result.code == ResultCode.not_found


class TestRespondAPI:

    def test_decline_via_api(self, client, outbox):
        artist = register(client, "ana@example.com", "ARTIST", "Ana")
        venue = register(client, "room@example.com", "VENUE", "Room Owner", venue_name="Blue Room")
        resp = client.post("/api/events/", json={
            "title": "Album Launch",
            "event_date": future().isoformat(),
            "venue_id": venue["venue"]["id"],
        }, headers=artist["headers"])
        assert resp.status_code == 201, resp.text
        event = resp.json()
        assert event["status"] == "PENDING_VENUE_APPROVAL"
        assert [m["to"] for m in outbox] == ["room@example.com"]

        resp = client.post(f"/api/events/{event['id']}/respond",
                           json={"action": "decline", "reason": "Fully booked"}, headers=venue["headers"])
        assert resp.status_code == 200
        assert resp.json()["success"] is True

        resp = client.post(f"/api/events/{event['id']}/respond",
                           json={"action": "approve"}, headers=venue["headers"])
        assert resp.status_code == 409
        assert resp.json()["success"] is False

        notes = client.get("/api/notifications/", headers=artist["headers"]).json()["notifications"]
        assert "Fully booked" in notes[0]["message"]

    def test_respond_forbidden_for_creator(self, client):
        artist = register(client, "ana@example.com", "ARTIST", "Ana")
        venue = register(client, "room@example.com", "VENUE", "Room Owner", venue_name="Blue Room")
        event = client.post("/api/events/", json={
            "title": "Album Launch", "event_date": future().isoformat(), "venue_id": venue["venue"]["id"],
        }, headers=artist["headers"]).json()
        resp = client.post(f"/api/events/{event['id']}/respond", json={"action": "approve"}, headers=artist["headers"])
        assert resp.status_code == 403
        assert client.post("/api/events/missing/respond", json={"action": "approve"},
                           headers=venue["headers"]).status_code == 404
