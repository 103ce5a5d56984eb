"""Event API routes: delegates to event_service and the approval workflow."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import Principal, get_current_principal
from app.database import get_db
from app.models.event import Event, EventArtist, EventStatus
from app.schemas.event import (
    EventArtistIn, EventArtistOut, EventArtistUpdate, EventCreate, EventOut, EventRespond,
    EventUpdate, RequestApproval, VenueEventRequest,
)
from app.services import event_service, workflow_service
from app.services.results import to_response
from app.services.side_effects import SideEffects, get_side_effects

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """Create an event; artists at an internal venue are sent for venue approval."""
    return event_service.create_event(db, principal, payload.model_dump(), effects)


@router.post("/venue-request", status_code=status.HTTP_201_CREATED)
def request_event_at_venue(
    payload: VenueEventRequest,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """An artist proposes a new event at a venue (starts pending venue approval)."""
    data = payload.model_dump(exclude={"venue_id", "artist_ids"})
    result = workflow_service.request_event_at_venue(db, principal, payload.venue_id, data, effects)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/", response_model=list[EventOut])
def list_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    venue_id: Optional[str] = Query(None),
    public_only: bool = Query(True),
    db: Session = Depends(get_db),
):
    """List events with optional filters, soonest first."""
    query = db.query(Event)
    if status_filter:
        query = query.filter(Event.status == status_filter)
    if venue_id:
        query = query.filter(Event.venue_id == venue_id)
    if public_only:
        query = query.filter(Event.is_public.is_(True))
    return query.order_by(Event.event_date).all()


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Fetch a single event with its line-up."""
    return event_service.get_event_or_404(db, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """Partial update; publishing sends booking requests, unpublishing cancels them."""
    updates = payload.model_dump(exclude_unset=True)
    return event_service.update_event(db, principal, event_id, updates, effects)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    event_service.delete_event(db, principal, event_id)


@router.post("/{event_id}/respond")
def respond_to_event_request(
    event_id: str,
    payload: EventRespond,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """Venue owner approves or declines a pending event request."""
    if payload.action == "approve":
        result = workflow_service.approve_event_request(db, principal, event_id, effects)
    else:
        result = workflow_service.decline_event_request(db, principal, event_id, payload.reason, effects)
    return to_response(result)


@router.post("/{event_id}/request-approval")
def request_venue_approval(
    event_id: str,
    payload: RequestApproval,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """Submit a DRAFT event to a venue for approval."""
    result = workflow_service.request_venue_approval(db, principal, event_id, payload.venue_id, effects)
    return to_response(result)


@router.get("/{event_id}/artists", response_model=list[EventArtistOut])
def list_event_artists(event_id: str, db: Session = Depends(get_db)):
    event_service.get_event_or_404(db, event_id)
    return db.query(EventArtist).filter(EventArtist.event_id == event_id).all()


@router.post("/{event_id}/artists", response_model=EventArtistOut, status_code=status.HTTP_201_CREATED)
def add_event_artist(
    event_id: str,
    payload: EventArtistIn,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """Add an artist to the line-up."""
    return event_service.add_artist_to_event(
        db, principal, event_id, payload.artist_id, effects,
        fee=payload.fee, hours=payload.hours, notes=payload.notes,
    )


@router.patch("/{event_id}/artists/{artist_id}", response_model=EventArtistOut)
def update_event_artist(
    event_id: str,
    artist_id: str,
    payload: EventArtistUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return event_service.update_event_artist(
        db, principal, event_id, artist_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{event_id}/artists/{artist_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_event_artist(
    event_id: str,
    artist_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    event_service.remove_artist_from_event(db, principal, event_id, artist_id)
