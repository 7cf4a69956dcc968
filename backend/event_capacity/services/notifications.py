"""Notification sink adapter — best-effort, after-commit message delivery.

The participation decision is always committed before anything is handed
to the sink; a sink failure is logged and swallowed so it can never undo
or fail the operation that triggered it.
"""
import logging
from typing import Protocol

from fastapi import HTTPException
from sqlalchemy.orm import Session

from event_capacity.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def send(self, db: Session, *, user_id: str, event_id: str, kind: NotificationType, message: str) -> None:
        ...


class DatabaseNotificationSink:
    """Appends one ``Notification`` row per message."""

    def send(self, db: Session, *, user_id: str, event_id: str, kind: NotificationType, message: str) -> None:
        db.add(Notification(user_id=user_id, event_id=event_id, type=kind, message=message))
        db.commit()


def notify(
    db: Session,
    sink: NotificationSink,
    *,
    user_id: str,
    event_id: str,
    kind: NotificationType,
    message: str,
) -> bool:
    """Deliver one message; return False instead of raising when the sink fails."""
    try:
        sink.send(db, user_id=user_id, event_id=event_id, kind=kind, message=message)
    except Exception:
        db.rollback()
        logger.exception("Failed to send %s notification to user %s for event %s", kind.value, user_id, event_id)
        return False
    return True


def list_for_user(db: Session, user_id: str, unread_only: bool = False) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def mark_read(db: Session, user_id: str, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification
