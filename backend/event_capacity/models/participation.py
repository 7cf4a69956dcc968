"""Participation ORM model — one row per (user, event), mutated in place."""
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from event_capacity.database import Base


class ParticipationStatus(str, enum.Enum):
    REGISTERED = "REGISTERED"
    CONFIRMED = "CONFIRMED"
    WAITLISTED = "WAITLISTED"
    CANCELLED = "CANCELLED"
    ATTENDED = "ATTENDED"


# Statuses that occupy a capacity slot.
ACTIVE_STATUSES = (ParticipationStatus.REGISTERED, ParticipationStatus.CONFIRMED)


class Participation(Base):
    __tablename__ = "participations"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_participations_user_event"),
        Index("ix_participations_waitlist_order", "event_id", "status", "registered_at", "id"),
    )

    # Autoincrement id doubles as the stable insertion-order tie breaker.
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False, index=True)
    status = Column(SAEnum(ParticipationStatus), nullable=False)
    registered_at = Column(DateTime(timezone=True), nullable=False)

    event = relationship("Event", back_populates="participations")
