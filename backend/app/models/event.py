"""Event and EventArtist ORM models."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, DateTime, Float, Numeric, Boolean, ForeignKey,
    UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class EventStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_VENUE_APPROVAL = "PENDING_VENUE_APPROVAL"
    SEEKING_VENUE = "SEEKING_VENUE"
    SEEKING_ARTISTS = "SEEKING_ARTISTS"
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    slug = Column(String(300), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    # Exactly one venue mode: internal venue_id or the external_* fields
    venue_id = Column(String(36), ForeignKey("venues.id"), nullable=True)
    external_venue_name = Column(String(255), nullable=True)
    external_venue_address = Column(String(255), nullable=True)
    external_venue_city = Column(String(120), nullable=True)
    external_venue_contact = Column(String(255), nullable=True)

    event_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    total_hours = Column(Float, nullable=True)
    total_budget = Column(Numeric(12, 2), nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.DRAFT)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("User")
    venue = relationship("Venue")
    event_artists = relationship("EventArtist", back_populates="event", cascade="all, delete-orphan")
    performances = relationship("Performance", back_populates="event")


class EventArtist(Base):
    """Line-up entry; unconfirmed entries receive booking requests on publish."""

    __tablename__ = "event_artists"
    __table_args__ = (UniqueConstraint("event_id", "artist_id", name="uq_event_artist"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    artist_id = Column(String(36), ForeignKey("artists.id"), nullable=False)
    fee = Column(Numeric(12, 2), nullable=True)
    hours = Column(Float, nullable=True)
    confirmed = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="event_artists")
    artist = relationship("Artist")
