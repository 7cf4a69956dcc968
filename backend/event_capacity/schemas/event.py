"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from event_capacity.models.event import EventStatus


class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None
    price: Optional[float] = Field(default=None, ge=0)
    max_participants: int = Field(ge=1)


class EventUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    price: Optional[float] = Field(default=None, ge=0)
    max_participants: Optional[int] = Field(default=None, ge=1)
    status: Optional[Literal["active", "cancelled", "completed"]] = None


class EventOut(BaseModel):
    event_id: str
    organizer_id: str
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None
    price: Optional[float] = None
    max_participants: int
    status: EventStatus
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventDetailOut(EventOut):
    current_participants: int
    spots_remaining: int
