"""Booking API routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import Principal, get_current_principal
from app.database import get_db
from app.models.booking import BookingStatus
from app.schemas.booking import BookingActionIn, BookingCreate, BookingOut
from app.services import booking_service
from app.services.results import to_response
from app.services.side_effects import SideEffects, get_side_effects

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """Venue requests an artist; 409 if the artist is unavailable."""
    result = booking_service.create_booking(db, principal, payload.model_dump(), effects)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/", response_model=list[BookingOut])
def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return booking_service.list_bookings(db, principal, status_filter)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    result = booking_service.get_booking(db, principal, booking_id)
    if not result.success:
        return to_response(result)
    return result.data["booking"]


@router.patch("/{booking_id}")
def act_on_booking(
    booking_id: str,
    payload: BookingActionIn,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """ACCEPT or DECLINE (artist), or CANCEL (venue)."""
    if payload.action == "ACCEPT":
        result = booking_service.accept_booking(db, principal, booking_id, effects)
    elif payload.action == "DECLINE":
        result = booking_service.decline_booking(db, principal, booking_id, effects)
    else:
        result = booking_service.cancel_booking(db, principal, booking_id, effects)
    return to_response(result)
