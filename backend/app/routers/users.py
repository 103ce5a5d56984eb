"""User API routes: registration of the verified caller and profile lookups."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload

from app.auth import Principal, get_current_principal, get_verified_email
from app.database import get_db
from app.models.profile import Artist, Venue
from app.models.user import User, UserRole
from app.schemas.user import ArtistOut, UserCreate, UserOut, VenueOut
from app.utils.slugs import unique_slug

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: UserCreate,
    email: str = Depends(get_verified_email),
    db: Session = Depends(get_db),
):
    """Create the local user (and artist or venue profile) for a verified email."""
    if db.query(User.id).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="User already registered")

    user = User(email=email, name=payload.name, role=payload.role)
    db.add(user)
    db.flush()
    if payload.role == UserRole.ARTIST:
        name = payload.artist_name or payload.name
        db.add(Artist(user_id=user.id, name=name, slug=unique_slug(db, Artist, name)))
    elif payload.role == UserRole.VENUE:
        name = payload.venue_name or payload.name
        db.add(Venue(
            user_id=user.id,
            name=name,
            slug=unique_slug(db, Venue, name),
            city=payload.city,
            address=payload.address,
        ))
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.role.value)
    return user


@router.get("/me", response_model=UserOut)
def get_me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    """The caller's user record with its profile."""
    return (
        db.query(User)
        .options(joinedload(User.artist), joinedload(User.venue))
        .filter(User.id == principal.id)
        .first()
    )


@router.get("/artists", response_model=list[ArtistOut])
def list_artists(db: Session = Depends(get_db)):
    return db.query(Artist).order_by(Artist.name).all()


@router.get("/venues", response_model=list[VenueOut])
def list_venues(db: Session = Depends(get_db)):
    return db.query(Venue).order_by(Venue.name).all()
