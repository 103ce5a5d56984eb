"""Pydantic schemas for Events and their line-up."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field

from app.models.event import EventStatus


class EventCreate(BaseModel):
    # Business rules (future date, venue XOR external venue) are checked by the validator
    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    venue_id: Optional[str] = None
    external_venue_name: Optional[str] = None
    external_venue_address: Optional[str] = None
    external_venue_city: Optional[str] = None
    external_venue_contact: Optional[str] = None
    total_hours: Optional[float] = None
    total_budget: Optional[Decimal] = None
    is_public: bool = True
    artist_ids: list[str] = []


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_hours: Optional[float] = Field(None, gt=0)
    total_budget: Optional[Decimal] = Field(None, gt=0)
    is_public: Optional[bool] = None
    external_venue_name: Optional[str] = None
    external_venue_address: Optional[str] = None
    external_venue_city: Optional[str] = None
    external_venue_contact: Optional[str] = None
    status: Optional[Literal["DRAFT", "PUBLISHED", "CANCELLED", "COMPLETED"]] = None
    reason: Optional[str] = None  # passed on to cancelled performers


class EventArtistIn(BaseModel):
    artist_id: str
    fee: Optional[Decimal] = Field(None, ge=0)
    hours: Optional[float] = Field(None, gt=0)
    notes: Optional[str] = None


class EventArtistUpdate(BaseModel):
    fee: Optional[Decimal] = Field(None, ge=0)
    hours: Optional[float] = Field(None, gt=0)
    notes: Optional[str] = None
    confirmed: Optional[bool] = None


class EventArtistOut(BaseModel):
    id: str
    event_id: str
    artist_id: str
    fee: Optional[Decimal] = None
    hours: Optional[float] = None
    confirmed: bool
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    id: str
    title: str
    slug: str
    description: Optional[str] = None
    created_by: str
    venue_id: Optional[str] = None
    external_venue_name: Optional[str] = None
    external_venue_address: Optional[str] = None
    external_venue_city: Optional[str] = None
    external_venue_contact: Optional[str] = None
    event_date: datetime
    end_date: Optional[datetime] = None
    total_hours: Optional[float] = None
    total_budget: Optional[Decimal] = None
    is_public: bool
    status: EventStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    event_artists: list[EventArtistOut] = []

    model_config = {"from_attributes": True}


class EventRespond(BaseModel):
    """Venue owner's answer to a venue-approval request."""
    action: Literal["approve", "decline"]
    reason: Optional[str] = None


class RequestApproval(BaseModel):
    venue_id: str


class VenueEventRequest(EventCreate):
    """An artist's request to host a new event at ``venue_id``."""
    venue_id: str
