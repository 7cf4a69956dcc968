"""Event catalog service — the thin catalog the participation engine reads from.

Responsibilities:
- Authorization hook: only the organizer (or an admin) may modify an event
- Catalog reads with a row lock for the engine's serialized sections
- Capacity increases promote the waitlist once per newly free slot
- Cancellation fans out one ``event_cancelled`` notification per live participation
"""
import logging
from datetime import datetime
from typing import Optional, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from event_capacity.dependencies import Caller, Role
from event_capacity.errors import (
    CatalogUnavailable,
    EventNotFound,
    InvalidEventUpdate,
    NotEventOrganizer,
    OrganizerRoleRequired,
)
from event_capacity.models.event import Event, EventStatus
from event_capacity.models.notification import NotificationType
from event_capacity.models.participation import Participation, ParticipationStatus
from event_capacity.services import locks, participation_store
from event_capacity.services.capacity import has_free_slot
from event_capacity.services.notifications import NotificationSink, notify
from event_capacity.services.waitlist import promote_next
from event_capacity.timeutils import as_utc, format_local, utcnow

logger = logging.getLogger(__name__)

_NON_NULLABLE_FIELDS = {"name", "starts_at", "max_participants", "status"}


def load_event(db: Session, event_id: str, for_update: bool = False) -> Event:
    """Fetch an event or raise ``EventNotFound``; a database failure is ``CatalogUnavailable``."""
    query = db.query(Event).filter(Event.event_id == event_id)
    if for_update:
        query = query.with_for_update()
    try:
        event = query.first()
    except SQLAlchemyError:
        logger.exception("Event catalog lookup failed for %s", event_id)
        raise CatalogUnavailable()
    if not event:
        raise EventNotFound()
    return event


def ensure_can_manage(event: Event, actor: Caller) -> None:
    """Only the organizer (or an admin) may manage the event."""
    if not actor.is_admin and event.organizer_id != actor.user_id:
        raise NotEventOrganizer()


def create_event(
    db: Session,
    actor: Caller,
    name: str,
    starts_at: datetime,
    max_participants: int,
    description: Optional[str] = None,
    location: Optional[str] = None,
    ends_at: Optional[datetime] = None,
    price: Optional[float] = None,
) -> Event:
    if actor.role not in (Role.ORGANIZER, Role.ADMIN):
        raise OrganizerRoleRequired()
    # Stored as UTC; SQLite drops the offset.
    starts_at = as_utc(starts_at)
    if ends_at is not None:
        ends_at = as_utc(ends_at)
    if ends_at is not None and ends_at < starts_at:
        raise InvalidEventUpdate("ends_at must not be before starts_at")

    event = Event(
        organizer_id=actor.user_id,
        name=name,
        description=description,
        location=location,
        starts_at=starts_at,
        ends_at=ends_at,
        price=price,
        max_participants=max_participants,
        status=EventStatus.active,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by organizer %s, capacity %d", name, event.event_id, actor.user_id, max_participants)
    return event


def list_events(
    db: Session,
    organizer_id: Optional[str] = None,
    event_status: Optional[EventStatus] = None,
    start_after: Optional[datetime] = None,
    start_before: Optional[datetime] = None,
) -> list[Event]:
    query = db.query(Event)
    if organizer_id:
        query = query.filter(Event.organizer_id == organizer_id)
    if event_status:
        query = query.filter(Event.status == event_status)
    if start_after:
        query = query.filter(Event.starts_at >= as_utc(start_after))
    if start_before:
        query = query.filter(Event.starts_at <= as_utc(start_before))
    return query.order_by(Event.starts_at).all()


def update_event(
    db: Session,
    event_id: str,
    actor: Caller,
    updates: dict[str, Any],
    sink: NotificationSink,
) -> Event:
    """Apply catalog field changes; fill any newly free capacity from the waitlist."""
    with locks.serialized(db, event_id):
        event = load_event(db, event_id, for_update=True)
        ensure_can_manage(event, actor)

        if event.status == EventStatus.cancelled:
            raise InvalidEventUpdate("Cancelled events cannot be modified")
        if updates.get("status") == EventStatus.cancelled.value:
            raise InvalidEventUpdate("Use the cancel endpoint to cancel an event")

        for field, value in updates.items():
            if value is None and field in _NON_NULLABLE_FIELDS:
                raise InvalidEventUpdate(f"{field} cannot be null")
            if field == "status":
                value = EventStatus(value)
            elif field in ("starts_at", "ends_at") and value is not None:
                value = as_utc(value)
            setattr(event, field, value)
        if event.ends_at is not None and as_utc(event.ends_at) < as_utc(event.starts_at):
            raise InvalidEventUpdate("ends_at must not be before starts_at")
        event.updated_at = utcnow()

        # One promoter call per free slot, each re-reading occupancy.
        promoted_user_ids = []
        if event.status == EventStatus.active:
            while has_free_slot(participation_store.count_active(db, event_id), event.max_participants):
                promoted = promote_next(db, event_id)
                if promoted is None:
                    break
                promoted_user_ids.append(promoted.user_id)

        event_name = event.name
        db.commit()

    db.refresh(event)
    logger.info("Updated event %s (%s); promoted %d from waitlist", event_id, ", ".join(sorted(updates)), len(promoted_user_ids))
    for user_id in promoted_user_ids:
        notify(
            db, sink,
            user_id=user_id,
            event_id=event_id,
            kind=NotificationType.waitlist_promoted,
            message=f'A spot opened up for "{event_name}". You have been moved from the waitlist to registered.',
        )
    return event


def cancel_event(db: Session, event_id: str, actor: Caller, sink: NotificationSink) -> Event:
    """Soft-cancel an event, then notify everyone still holding a participation."""
    with locks.serialized(db, event_id):
        event = load_event(db, event_id, for_update=True)
        ensure_can_manage(event, actor)
        if event.status == EventStatus.cancelled:
            raise InvalidEventUpdate("Event is already cancelled")

        now = utcnow()
        event.status = EventStatus.cancelled
        event.cancelled_at = now
        event.updated_at = now

        recipients = [
            user_id
            for (user_id,) in db.query(Participation.user_id)
            .filter(Participation.event_id == event_id, Participation.status != ParticipationStatus.CANCELLED)
            .order_by(Participation.id)
            .all()
        ]
        message = f'Event "{event.name}" on {format_local(event.starts_at)} has been cancelled.'
        db.commit()

    logger.info("Cancelled event %s by %s; notifying %d participants", event_id, actor.user_id, len(recipients))
    for user_id in recipients:
        notify(db, sink, user_id=user_id, event_id=event_id, kind=NotificationType.event_cancelled, message=message)
    db.refresh(event)
    return event
