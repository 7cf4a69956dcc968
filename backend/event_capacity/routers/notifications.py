"""Notification read routes for the calling user."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from event_capacity.database import get_db
from event_capacity.dependencies import Caller, get_current_user
from event_capacity.schemas.notification import NotificationOut
from event_capacity.services import notifications

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[NotificationOut])
def list_notifications(
    unread_only: bool = Query(False),
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's notifications, newest first."""
    return notifications.list_for_user(db, caller.user_id, unread_only=unread_only)


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_notification_read(
    notification_id: int,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = notifications.mark_read(db, caller.user_id, notification_id)
    logger.info("User %s read notification %s", caller.user_id, notification_id)
    return notification
