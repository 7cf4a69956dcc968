"""Pydantic schemas for Participations."""
from datetime import datetime
from pydantic import BaseModel

from event_capacity.models.participation import ParticipationStatus


class ParticipationOut(BaseModel):
    id: int
    user_id: str
    event_id: str
    status: ParticipationStatus
    registered_at: datetime

    model_config = {"from_attributes": True}


class WaitlistEntryOut(BaseModel):
    position: int
    user_id: str
    registered_at: datetime
