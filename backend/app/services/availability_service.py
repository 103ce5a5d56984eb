"""Artist unavailability windows: blackout periods the conflict checker honours."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.auth import Principal
from app.models.booking import ArtistUnavailability
from app.utils.dates import ensure_utc

logger = logging.getLogger(__name__)


def create_window(
    db: Session,
    principal: Principal,
    start: datetime,
    end: datetime,
    reason: Optional[str] = None,
) -> ArtistUnavailability:
    if not principal.is_artist:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Artist profile required")
    start, end = ensure_utc(start), ensure_utc(end)
    if end <= start:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end_before_start")

    window = ArtistUnavailability(artist_id=principal.artist_id, start=start, end=end, reason=reason)
    db.add(window)
    db.commit()
    db.refresh(window)
    logger.info("Artist %s unavailable %s -> %s", principal.artist_id, start, end)
    return window


def list_windows(db: Session, principal: Principal) -> list[ArtistUnavailability]:
    """The caller's windows, soonest first."""
    if not principal.artist_id:
        return []
    return (
        db.query(ArtistUnavailability)
        .filter(ArtistUnavailability.artist_id == principal.artist_id)
        .order_by(ArtistUnavailability.start)
        .all()
    )


def delete_window(db: Session, principal: Principal, window_id: str) -> None:
    window = db.query(ArtistUnavailability).filter(ArtistUnavailability.id == window_id).first()
    if not window:
        raise HTTPException(status_code=404, detail="Unavailability window not found")
    if window.artist_id != principal.artist_id:
        raise HTTPException(status_code=403, detail="forbidden")
    db.delete(window)
    db.commit()
    logger.info("Artist %s removed unavailability window %s", principal.artist_id, window_id)
