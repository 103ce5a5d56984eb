"""Pydantic schemas for Users and their Artist/Venue profiles."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.models.user import UserRole


class UserCreate(BaseModel):
    """Registration of the verified caller; the email comes from the token."""
    name: str
    role: UserRole
    artist_name: Optional[str] = None
    venue_name: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None


class ArtistOut(BaseModel):
    id: str
    name: str
    slug: str

    model_config = {"from_attributes": True}


class VenueOut(BaseModel):
    id: str
    name: str
    slug: str
    city: Optional[str] = None
    address: Optional[str] = None

    model_config = {"from_attributes": True}


class UserOut(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
    artist: Optional[ArtistOut] = None
    venue: Optional[VenueOut] = None

    model_config = {"from_attributes": True}
