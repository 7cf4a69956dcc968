"""Request-scoped providers: caller identity and the notification sink."""
import enum
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, status

from event_capacity.services.notifications import DatabaseNotificationSink, NotificationSink


class Role(str, enum.Enum):
    ORGANIZER = "ORGANIZER"
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: str = Header("USER"),
) -> Caller:
    """Identity as asserted by the upstream identity provider's gateway headers."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header")
    try:
        role = Role(x_user_role.upper())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid role: {x_user_role}")
    return Caller(user_id=x_user_id, role=role)


_sink = DatabaseNotificationSink()


def get_notification_sink() -> NotificationSink:
    return _sink
