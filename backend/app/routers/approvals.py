"""Approvals API routes: one inbox for pending event requests and performances."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import Principal, get_current_principal
from app.database import get_db
from app.schemas.notification import ApprovalAction
from app.services import workflow_service
from app.services.results import to_response
from app.services.side_effects import SideEffects, get_side_effects

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
def list_pending_approvals(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return workflow_service.list_pending_approvals(db, principal)


@router.post("/")
def act_on_approval(
    payload: ApprovalAction,
    principal: Principal = Depends(get_current_principal),
    effects: SideEffects = Depends(get_side_effects),
    db: Session = Depends(get_db),
):
    """Approve or decline an event request or a performance."""
    if payload.type == "event":
        if payload.action == "approve":
            result = workflow_service.approve_event_request(db, principal, payload.id, effects)
        else:
            result = workflow_service.decline_event_request(db, principal, payload.id, payload.reason, effects)
    elif payload.action == "approve":
        result = workflow_service.approve_performance(db, principal, payload.id, effects)
    else:
        result = workflow_service.decline_performance(db, principal, payload.id, payload.reason, effects)
    return to_response(result)
