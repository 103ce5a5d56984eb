"""Notification sink: in-app messages for workflow counterparties."""
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.notification import Notification, NotificationType
from app.models.performance import Performance
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    type: NotificationType,
    user_id: str,
    *,
    title: str,
    message: str,
    event_id: Optional[str] = None,
    performance_id: Optional[str] = None,
    action_url: Optional[str] = None,
) -> Optional[Notification]:
    """Insert an unread notification inside a savepoint.

    Failures roll back only the savepoint and are logged; the caller's
    transition goes ahead regardless. The caller commits.
    """
    try:
        with db.begin_nested():
            notification = Notification(
                type=type,
                user_id=user_id,
                title=title,
                message=message,
                event_id=event_id,
                performance_id=performance_id,
                action_url=action_url,
                is_read=False,
            )
            db.add(notification)
    except SQLAlchemyError:
        logger.exception("Failed to create %s notification for user %s", type.value, user_id)
        return None
    logger.info("Notification %s queued for user %s", type.value, user_id)
    return notification


def serialize_notification(n: Notification) -> dict[str, Any]:
    """Notification with the minimal related-entity projections."""
    performance = None
    if n.performance is not None:
        performance = {
            "id": n.performance.id,
            "event_title": n.performance.event.title if n.performance.event else None,
            "artist_name": n.performance.artist.name if n.performance.artist else None,
        }
    return {
        "id": n.id,
        "type": n.type.value,
        "title": n.title,
        "message": n.message,
        "action_url": n.action_url,
        "is_read": n.is_read,
        "read_at": n.read_at,
        "created_at": n.created_at,
        "event": {"id": n.event.id, "title": n.event.title} if n.event is not None else None,
        "performance": performance,
    }


def _with_relations(db: Session):
    return db.query(Notification).options(
        joinedload(Notification.event),
        joinedload(Notification.performance).joinedload(Performance.event),
        joinedload(Notification.performance).joinedload(Performance.artist),
    )


def list_unread(db: Session, user_id: str) -> list[dict[str, Any]]:
    """Unread notifications for ``user_id``, newest first."""
    rows = (
        _with_relations(db)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .order_by(Notification.created_at.desc())
        .all()
    )
    return [serialize_notification(n) for n in rows]


def list_for_user(db: Session, user_id: str, limit: int = 50) -> list[dict[str, Any]]:
    """Most recent notifications (read or not) for ``user_id``."""
    rows = (
        _with_relations(db)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )
    return [serialize_notification(n) for n in rows]


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def mark_read(db: Session, notification_id: str, user_id: str) -> int:
    """Mark one notification read. Scoped to its owner; unknown ids are a no-op."""
    updated = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .update({Notification.is_read: True, Notification.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated


def mark_all_read(db: Session, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True, Notification.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    logger.info("Marked %d notifications read for user %s", updated, user_id)
    return updated
