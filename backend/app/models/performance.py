"""Performance ORM model: an artist's application/invitation for one event."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, DateTime, Float, Numeric, ForeignKey,
    UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class PerformanceStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Performance(Base):
    __tablename__ = "performances"
    __table_args__ = (UniqueConstraint("event_id", "artist_id", name="uq_performance_event_artist"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    artist_id = Column(String(36), ForeignKey("artists.id"), nullable=False)
    status = Column(SAEnum(PerformanceStatus), nullable=False, default=PerformanceStatus.PENDING)
    proposed_fee = Column(Numeric(12, 2), nullable=True)
    agreed_fee = Column(Numeric(12, 2), nullable=True)
    hours = Column(Float, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    venue_notes = Column(Text, nullable=True)
    artist_notes = Column(Text, nullable=True)
    # Set when the venue owner or event creator invited the artist; None for applications
    invited_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="performances")
    artist = relationship("Artist")
