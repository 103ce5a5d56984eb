"""Caller identity: verified token → email → Principal.

Token issuance lives with the external auth provider; this module only
verifies the signature and resolves the email to a local user. Workflow
services receive the resulting ``Principal`` explicitly.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.database import get_db
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    id: str
    email: str
    role: UserRole
    name: Optional[str] = None
    venue_id: Optional[str] = None
    artist_id: Optional[str] = None

    @property
    def is_artist(self) -> bool:
        return self.role == UserRole.ARTIST and self.artist_id is not None

    @property
    def is_venue(self) -> bool:
        return self.role == UserRole.VENUE and self.venue_id is not None


def verify_token(token: str) -> Optional[str]:
    """Return the verified email claim of ``token``, or None."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        logger.info("Rejected token: %s", exc)
        return None
    email = payload.get("email") or payload.get("sub")
    return str(email).strip().lower() if email else None


def resolve_principal(db: Session, email: str) -> Optional[Principal]:
    user = (
        db.query(User)
        .options(joinedload(User.artist), joinedload(User.venue))
        .filter(User.email == email)
        .first()
    )
    if not user:
        return None
    return Principal(
        id=user.id,
        email=user.email,
        role=user.role,
        name=user.name,
        venue_id=user.venue.id if user.venue else None,
        artist_id=user.artist.id if user.artist else None,
    )


def get_verified_email(
    authorization: Optional[str] = Header(None),
    id_token: Optional[str] = Cookie(None),
) -> str:
    """Verified email of the caller, from the bearer header or the id_token cookie (401 otherwise)."""
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
    token = token or id_token
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")

    email = verify_token(token)
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
    return email


def get_current_principal(
    email: str = Depends(get_verified_email),
    db: Session = Depends(get_db),
) -> Principal:
    """Resolve the verified caller to a local user (403 if unknown)."""
    principal = resolve_principal(db, email)
    if not principal:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
    return principal


def require_artist(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_artist:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Artist profile required")
    return principal