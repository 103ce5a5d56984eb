"""Artist unavailability API routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import Principal, get_current_principal, require_artist
from app.database import get_db
from app.schemas.booking import UnavailabilityCreate, UnavailabilityOut
from app.services import availability_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UnavailabilityOut, status_code=status.HTTP_201_CREATED)
def create_window(
    payload: UnavailabilityCreate,
    principal: Principal = Depends(require_artist),
    db: Session = Depends(get_db),
):
    """Declare a blackout window; end must be after start."""
    return availability_service.create_window(db, principal, payload.start, payload.end, payload.reason)


@router.get("/", response_model=list[UnavailabilityOut])
def list_windows(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return availability_service.list_windows(db, principal)


@router.delete("/{window_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_window(
    window_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    availability_service.delete_window(db, principal, window_id)
