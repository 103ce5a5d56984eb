"""Pydantic schemas for Bookings and artist unavailability."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel

from app.models.booking import BookingStatus


class BookingCreate(BaseModel):
    artist_id: str
    event_date: datetime
    hours: Optional[float] = None
    note: Optional[str] = None


class BookingActionIn(BaseModel):
    action: Literal["ACCEPT", "DECLINE", "CANCEL"]


class BookingOut(BaseModel):
    id: str
    artist_id: str
    venue_id: Optional[str] = None
    event_id: Optional[str] = None
    event_date: datetime
    hours: Optional[float] = None
    note: Optional[str] = None
    status: BookingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UnavailabilityCreate(BaseModel):
    start: datetime
    end: datetime
    reason: Optional[str] = None


class UnavailabilityOut(BaseModel):
    id: str
    artist_id: str
    start: datetime
    end: datetime
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
