"""Stable error kinds raised by the services.

Each kind is an ``HTTPException`` so routers can let it propagate untouched;
``detail`` always carries a machine-readable ``code`` next to the message.
"""
from typing import Optional

from fastapi import HTTPException, status


class EngineError(HTTPException):
    """Base class for every rejected operation."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "ERROR"
    message: str = "Request rejected"

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            status_code=self.status_code,
            detail={"code": self.code, "message": message or self.message},
        )


class EventNotFound(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "EVENT_NOT_FOUND"
    message = "Event not found"


class EventNotJoinable(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "EVENT_NOT_JOINABLE"
    message = "Event is not open for registration"


class AlreadyRegistered(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_REGISTERED"
    message = "User is already registered for this event"


class NotRegistered(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_REGISTERED"
    message = "User is not registered for this event"


class AlreadyCancelled(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_CANCELLED"
    message = "Participation is already cancelled"


class ParticipationClosed(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "PARTICIPATION_CLOSED"
    message = "Participation cannot make this transition"


class NotEventOrganizer(EngineError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "NOT_EVENT_ORGANIZER"
    message = "Only the organizer may manage this event"


class OrganizerRoleRequired(EngineError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "ORGANIZER_ROLE_REQUIRED"
    message = "Only organizers may perform this action"


class EventBusy(EngineError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "EVENT_BUSY"
    message = "Event is busy, please retry"


class CatalogUnavailable(EngineError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "CATALOG_UNAVAILABLE"
    message = "Event catalog could not be read"


class InvalidEventUpdate(EngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_EVENT_UPDATE"
    message = "Invalid event update"
