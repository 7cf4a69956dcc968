"""Notification ORM model — append-only rows written by the database sink."""
import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.sql import func
from event_capacity.database import Base


class NotificationType(str, enum.Enum):
    event_cancelled = "event_cancelled"
    waitlist_promoted = "waitlist_promoted"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    event_id = Column(String(36), nullable=False)
    type = Column(SAEnum(NotificationType), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
