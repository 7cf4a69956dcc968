"""Participation lifecycle service — join, leave, reinstatement and promotion.

Every read-decide-write runs inside ``locks.serialized`` with the event row
locked, so two requests racing for the last slot resolve to one REGISTERED
and one WAITLISTED rather than an error. Notifications go out only after
the state change has committed.

Transitions:
- join, no row          -> REGISTERED | WAITLISTED (capacity decides)
- join, CANCELLED row   -> reinstated, same rule, ``registered_at`` reset
- join, any other row   -> AlreadyRegistered
- leave, live row       -> CANCELLED, then at most one waitlist promotion
- leave, CANCELLED row  -> AlreadyCancelled
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from event_capacity.dependencies import Caller
from event_capacity.errors import (
    AlreadyCancelled,
    AlreadyRegistered,
    EventNotJoinable,
    NotRegistered,
    ParticipationClosed,
)
from event_capacity.models.event import EventStatus
from event_capacity.models.notification import NotificationType
from event_capacity.models.participation import Participation, ParticipationStatus
from event_capacity.services import locks, participation_store
from event_capacity.services.capacity import decide_admission, has_free_slot
from event_capacity.services.event_service import ensure_can_manage, load_event
from event_capacity.services.notifications import NotificationSink, notify
from event_capacity.services.waitlist import promote_next
from event_capacity.timeutils import utcnow

logger = logging.getLogger(__name__)

_LEAVABLE = (ParticipationStatus.REGISTERED, ParticipationStatus.CONFIRMED, ParticipationStatus.WAITLISTED)


def join_event(db: Session, user_id: str, event_id: str) -> Participation:
    """Admit, waitlist or reinstate ``user_id`` for ``event_id``."""
    with locks.serialized(db, event_id):
        event = load_event(db, event_id, for_update=True)
        if event.status != EventStatus.active:
            raise EventNotJoinable(f"Event is {event.status.value}")

        participation = participation_store.get_participation(db, user_id, event_id)
        if participation is not None and participation.status != ParticipationStatus.CANCELLED:
            raise AlreadyRegistered()

        active_count = participation_store.count_active(db, event_id)
        capacity = event.max_participants
        decision = decide_admission(active_count, capacity)
        now = utcnow()

        if participation is None:
            participation = Participation(user_id=user_id, event_id=event_id, status=decision, registered_at=now)
            db.add(participation)
            action = "joined"
        else:
            participation.status = decision
            participation.registered_at = now
            action = "rejoined"

        try:
            db.commit()
        except IntegrityError:
            raise AlreadyRegistered()

    db.refresh(participation)
    logger.info(
        "User %s %s event %s as %s (%d/%d active before)",
        user_id, action, event_id, decision.value, active_count, capacity,
    )
    return participation


def leave_event(db: Session, user_id: str, event_id: str, sink: NotificationSink) -> Participation:
    """Cancel ``user_id``'s participation and hand a freed slot to the waitlist head."""
    with locks.serialized(db, event_id):
        event = load_event(db, event_id, for_update=True)

        participation = participation_store.get_participation(db, user_id, event_id)
        if participation is None:
            raise NotRegistered()
        if participation.status == ParticipationStatus.CANCELLED:
            raise AlreadyCancelled()
        if participation.status not in _LEAVABLE:
            raise ParticipationClosed(f"Participation is {participation.status.value}")

        previous = participation.status
        participation.status = ParticipationStatus.CANCELLED
        db.flush()

        promoted_user_id: Optional[str] = None
        if event.status == EventStatus.active and has_free_slot(
            participation_store.count_active(db, event_id), event.max_participants
        ):
            promoted = promote_next(db, event_id)
            if promoted is not None:
                promoted_user_id = promoted.user_id

        event_name = event.name
        db.commit()

    db.refresh(participation)
    logger.info("User %s left event %s (was %s)", user_id, event_id, previous.value)
    if promoted_user_id is not None:
        notify(
            db, sink,
            user_id=promoted_user_id,
            event_id=event_id,
            kind=NotificationType.waitlist_promoted,
            message=f'A spot opened up for "{event_name}". You have been moved from the waitlist to registered.',
        )
    return participation


def get_participations_for_events(db: Session, user_id: str, event_ids: list[str]) -> dict[str, ParticipationStatus]:
    """Batch read of the caller's status per event; events without a row are omitted."""
    return participation_store.statuses_for_user(db, user_id, event_ids)


def list_participants(db: Session, event_id: str, actor: Caller) -> list[Participation]:
    event = load_event(db, event_id)
    ensure_can_manage(event, actor)
    return participation_store.list_for_event(db, event_id)


def get_waitlist(db: Session, event_id: str, actor: Caller) -> list[dict]:
    event = load_event(db, event_id)
    ensure_can_manage(event, actor)
    return [
        {"position": position, "user_id": p.user_id, "registered_at": p.registered_at}
        for position, p in enumerate(participation_store.waitlist_query(db, event_id).all(), start=1)
    ]


def _transition(
    db: Session,
    event_id: str,
    user_id: str,
    actor: Caller,
    allowed_from: tuple,
    target: ParticipationStatus,
) -> Participation:
    with locks.serialized(db, event_id):
        event = load_event(db, event_id, for_update=True)
        ensure_can_manage(event, actor)
        if event.status == EventStatus.cancelled:
            raise EventNotJoinable("Event is cancelled")

        participation = participation_store.get_participation(db, user_id, event_id)
        if participation is None:
            raise NotRegistered()
        if participation.status not in allowed_from:
            raise ParticipationClosed(
                f"Cannot move participation from {participation.status.value} to {target.value}"
            )
        participation.status = target
        db.commit()

    db.refresh(participation)
    logger.info("Organizer %s set user %s to %s for event %s", actor.user_id, user_id, target.value, event_id)
    return participation


def confirm_participation(db: Session, event_id: str, user_id: str, actor: Caller) -> Participation:
    """REGISTERED -> CONFIRMED; capacity is unaffected."""
    return _transition(
        db, event_id, user_id, actor,
        allowed_from=(ParticipationStatus.REGISTERED,),
        target=ParticipationStatus.CONFIRMED,
    )


def mark_attended(db: Session, event_id: str, user_id: str, actor: Caller) -> Participation:
    """REGISTERED or CONFIRMED -> ATTENDED (terminal)."""
    return _transition(
        db, event_id, user_id, actor,
        allowed_from=(ParticipationStatus.REGISTERED, ParticipationStatus.CONFIRMED),
        target=ParticipationStatus.ATTENDED,
    )
