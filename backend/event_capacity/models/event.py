"""Event ORM model — the catalog entry the engine reads capacity and status from."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Integer, Float, Enum as SAEnum, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from event_capacity.database import Base


class EventStatus(str, enum.Enum):
    active = "active"
    cancelled = "cancelled"
    completed = "completed"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("max_participants >= 1", name="ck_events_max_participants_positive"),
    )

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organizer_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(500), nullable=True)
    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=True)
    price = Column(Float, nullable=True)
    max_participants = Column(Integer, nullable=False)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.active)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    participations = relationship("Participation", back_populates="event")
