"""Pydantic schemas for Performances."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel

from app.models.performance import PerformanceStatus


class PerformanceCreate(BaseModel):
    event_id: str
    artist_id: Optional[str] = None  # defaults to the calling artist
    proposed_fee: Optional[Decimal] = None
    agreed_fee: Optional[Decimal] = None
    hours: Optional[float] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    venue_notes: Optional[str] = None
    artist_notes: Optional[str] = None


class PerformanceActionIn(BaseModel):
    action: Literal["APPROVE", "DECLINE", "CANCEL"]
    reason: Optional[str] = None


class PerformanceOut(BaseModel):
    id: str
    event_id: str
    artist_id: str
    status: PerformanceStatus
    proposed_fee: Optional[Decimal] = None
    agreed_fee: Optional[Decimal] = None
    hours: Optional[float] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    venue_notes: Optional[str] = None
    artist_notes: Optional[str] = None
    invited_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
