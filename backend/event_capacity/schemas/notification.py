"""Pydantic schemas for Notifications."""
from datetime import datetime
from pydantic import BaseModel

from event_capacity.models.notification import NotificationType


class NotificationOut(BaseModel):
    id: int
    user_id: str
    event_id: str
    type: NotificationType
    message: str
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}
