"""Notification API routes."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth import Principal, get_current_principal
from app.database import get_db
from app.schemas.notification import MarkRead
from app.services import notification_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
def list_notifications(
    unread_only: bool = Query(False),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Newest notifications (at most 50, or every unread one) plus the unread count."""
    if unread_only:
        notifications = notification_service.list_unread(db, principal.id)
    else:
        notifications = notification_service.list_for_user(db, principal.id)
    return {
        "notifications": notifications,
        "unread_count": notification_service.unread_count(db, principal.id),
    }


@router.patch("/")
def mark_notifications_read(
    payload: MarkRead,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    if payload.mark_all_as_read:
        updated = notification_service.mark_all_read(db, principal.id)
    else:
        updated = notification_service.mark_read(db, payload.notification_id, principal.id)
    return {"success": True, "updated": updated}
