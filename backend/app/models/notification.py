"""Notification ORM model: in-app messages created by workflow transitions."""
import uuid
import enum
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.dates import utcnow


class NotificationType(str, enum.Enum):
    EVENT_REQUEST = "EVENT_REQUEST"
    EVENT_REQUEST_APPROVED = "EVENT_REQUEST_APPROVED"
    EVENT_REQUEST_DECLINED = "EVENT_REQUEST_DECLINED"
    PERFORMANCE_APPLICATION = "PERFORMANCE_APPLICATION"
    PERFORMANCE_INVITATION = "PERFORMANCE_INVITATION"
    PERFORMANCE_APPROVED = "PERFORMANCE_APPROVED"
    PERFORMANCE_DECLINED = "PERFORMANCE_DECLINED"
    PERFORMANCE_CANCELLED = "PERFORMANCE_CANCELLED"
    PERFORMANCE_INVITATION_ACCEPTED = "PERFORMANCE_INVITATION_ACCEPTED"
    PERFORMANCE_INVITATION_DECLINED = "PERFORMANCE_INVITATION_DECLINED"
    BOOKING_REQUEST = "BOOKING_REQUEST"
    BOOKING_ACCEPTED = "BOOKING_ACCEPTED"
    BOOKING_DECLINED = "BOOKING_DECLINED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(SAEnum(NotificationType), nullable=False)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=True)
    performance_id = Column(String(36), ForeignKey("performances.id"), nullable=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    action_url = Column(String(500), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)  # sub-second ordering

    event = relationship("Event")
    performance = relationship("Performance")
