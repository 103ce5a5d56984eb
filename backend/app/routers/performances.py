"""Performance API routes: applications, invitations and their resolution."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.auth import Principal, get_current_principal
from app.database import get_db
from app.models.event import Event
from app.models.performance import Performance
from app.schemas.performance import PerformanceActionIn, PerformanceCreate, PerformanceOut
from app.services import workflow_service
from app.services.results import to_response
from app.services.side_effects import SideEffects, get_side_effects

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED)
def apply_for_performance(
    payload: PerformanceCreate,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """Artist applies, or the venue/creator invites ``artist_id``."""
    artist_id = payload.artist_id or principal.artist_id
    data = payload.model_dump(exclude={"event_id", "artist_id"})
    result = workflow_service.apply_for_performance(db, principal, payload.event_id, artist_id, data, effects)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/", response_model=list[PerformanceOut])
def list_performances(
    event_id: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Performances of an event (managers see all, artists their own), or the caller's own."""
    query = db.query(Performance)
    if event_id:
        event = db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        query = query.filter(Performance.event_id == event_id)
        if not workflow_service.can_manage_event(principal, event):
            query = query.filter(Performance.artist_id == principal.artist_id)
    else:
        query = query.filter(Performance.artist_id == principal.artist_id)
    return query.order_by(Performance.created_at.desc()).all()


@router.get("/{performance_id}", response_model=PerformanceOut)
def get_performance(
    performance_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    performance = db.query(Performance).filter(Performance.id == performance_id).first()
    if not performance:
        raise HTTPException(status_code=404, detail="Performance not found")
    if performance.artist_id != principal.artist_id and not workflow_service.can_manage_event(principal, performance.event):
        raise HTTPException(status_code=403, detail="forbidden")
    return performance


@router.patch("/{performance_id}")
def act_on_performance(
    performance_id: str,
    payload: PerformanceActionIn,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """APPROVE or DECLINE (the side that did not create the record), or CANCEL (venue/creator)."""
    if payload.action == "APPROVE":
        result = workflow_service.approve_performance(db, principal, performance_id, effects)
    elif payload.action == "DECLINE":
        result = workflow_service.decline_performance(db, principal, performance_id, payload.reason, effects)
    else:
        result = workflow_service.cancel_performance(db, principal, performance_id, payload.reason, effects)
    return to_response(result)
