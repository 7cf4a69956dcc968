"""Pydantic schemas for the statistics projections."""
from pydantic import BaseModel


class EventStatisticsOut(BaseModel):
    event_id: str
    capacity: int
    registered_count: int
    confirmed_count: int
    waitlisted_count: int
    cancelled_count: int
    attended_count: int
    active_count: int
    display_count: int
    spots_remaining: int
    fill_rate: float
    attendance_rate: float
    is_past: bool


class OrganizerStatisticsOut(BaseModel):
    organizer_id: str
    events_created: int
    active_events: int
    registered_count: int
    confirmed_count: int
    waitlisted_count: int
    cancelled_count: int
    attended_count: int
    fill_rate: float
    attendance_rate: float
