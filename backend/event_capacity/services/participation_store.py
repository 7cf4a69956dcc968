"""Participation record store — keyed reads and the named aggregate queries.

The row set is the source of truth; nothing here caches a counter.
Two counts are deliberately separate:

- ``count_active`` is the capacity query (REGISTERED + CONFIRMED).
- ``count_display_participants`` is the "current participants" display
  count (every row that is not CANCELLED, waitlist included).
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from event_capacity.models.participation import Participation, ParticipationStatus, ACTIVE_STATUSES


def get_participation(db: Session, user_id: str, event_id: str) -> Optional[Participation]:
    return (
        db.query(Participation)
        .filter(Participation.user_id == user_id, Participation.event_id == event_id)
        .first()
    )


def count_active(db: Session, event_id: str) -> int:
    return (
        db.query(func.count(Participation.id))
        .filter(Participation.event_id == event_id, Participation.status.in_(ACTIVE_STATUSES))
        .scalar()
        or 0
    )


def count_display_participants(db: Session, event_id: str) -> int:
    return (
        db.query(func.count(Participation.id))
        .filter(Participation.event_id == event_id, Participation.status != ParticipationStatus.CANCELLED)
        .scalar()
        or 0
    )


def count_by_status(db: Session, event_ids: list[str]) -> dict[ParticipationStatus, int]:
    """Per-status row counts across ``event_ids``; every status is present in the result."""
    counts = {s: 0 for s in ParticipationStatus}
    if not event_ids:
        return counts
    rows = (
        db.query(Participation.status, func.count(Participation.id))
        .filter(Participation.event_id.in_(event_ids))
        .group_by(Participation.status)
        .all()
    )
    for participation_status, n in rows:
        counts[ParticipationStatus(participation_status)] = n
    return counts


def waitlist_query(db: Session, event_id: str):
    """WAITLISTED rows in promotion order: oldest ``registered_at`` first, then insertion order."""
    return (
        db.query(Participation)
        .filter(Participation.event_id == event_id, Participation.status == ParticipationStatus.WAITLISTED)
        .order_by(Participation.registered_at.asc(), Participation.id.asc())
    )


def list_for_event(db: Session, event_id: str) -> list[Participation]:
    return (
        db.query(Participation)
        .filter(Participation.event_id == event_id)
        .order_by(Participation.registered_at.asc(), Participation.id.asc())
        .all()
    )


def statuses_for_user(db: Session, user_id: str, event_ids: list[str]) -> dict[str, ParticipationStatus]:
    if not event_ids:
        return {}
    rows = (
        db.query(Participation.event_id, Participation.status)
        .filter(Participation.user_id == user_id, Participation.event_id.in_(event_ids))
        .all()
    )
    return {event_id: ParticipationStatus(participation_status) for event_id, participation_status in rows}


def count_by_event_and_status(db: Session, event_ids: list[str]) -> dict[str, dict[ParticipationStatus, int]]:
    """Like ``count_by_status`` but keyed per event; every requested event is present."""
    counts = {event_id: {s: 0 for s in ParticipationStatus} for event_id in event_ids}
    if not event_ids:
        return counts
    rows = (
        db.query(Participation.event_id, Participation.status, func.count(Participation.id))
        .filter(Participation.event_id.in_(event_ids))
        .group_by(Participation.event_id, Participation.status)
        .all()
    )
    for event_id, participation_status, n in rows:
        counts[event_id][ParticipationStatus(participation_status)] = n
    return counts
