"""Booking and ArtistUnavailability ORM models."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Float, ForeignKey, Index, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_artist_status_date", "artist_id", "status", "event_date"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    artist_id = Column(String(36), ForeignKey("artists.id"), nullable=False)
    venue_id = Column(String(36), ForeignKey("venues.id"), nullable=True)  # null for external-venue events
    event_id = Column(String(36), ForeignKey("events.id"), nullable=True)
    event_date = Column(DateTime(timezone=True), nullable=False)
    hours = Column(Float, nullable=True)
    note = Column(Text, nullable=True)
    status = Column(SAEnum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    artist = relationship("Artist")
    venue = relationship("Venue")
    event = relationship("Event")


class ArtistUnavailability(Base):
    """Blackout window declared by an artist, consumed by the conflict checker."""

    __tablename__ = "artist_unavailability"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    artist_id = Column(String(36), ForeignKey("artists.id"), nullable=False, index=True)
    start = Column(DateTime(timezone=True), nullable=False)
    end = Column(DateTime(timezone=True), nullable=False)
    reason = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
