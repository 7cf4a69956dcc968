"""Statistics projector — read-only aggregates over the participation rows.

Rates never fail on an empty denominator; they come back as 0.0. Attendance
only counts events that have already started; upcoming events add nothing
to either side of that ratio.
"""
import logging
from typing import Any

from sqlalchemy.orm import Session

from event_capacity.dependencies import Caller
from event_capacity.models.event import Event, EventStatus
from event_capacity.models.participation import ParticipationStatus
from event_capacity.services import participation_store
from event_capacity.services.event_service import ensure_can_manage, load_event
from event_capacity.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

REG = ParticipationStatus.REGISTERED
CONF = ParticipationStatus.CONFIRMED
WAIT = ParticipationStatus.WAITLISTED
CANC = ParticipationStatus.CANCELLED
ATT = ParticipationStatus.ATTENDED


def _rate(numerator: int, denominator: int) -> float:
    if not denominator:
        return 0.0
    return round(numerator / denominator, 4)


def _is_past(event: Event) -> bool:
    return as_utc(event.starts_at) < utcnow()


def _attendance_parts(event: Event, counts: dict[ParticipationStatus, int]) -> tuple[int, int]:
    """(attended, registered-at-event-time) for past events, (0, 0) otherwise."""
    if not _is_past(event):
        return 0, 0
    return counts[ATT], counts[REG] + counts[CONF] + counts[ATT]


def project_event(event: Event, counts: dict[ParticipationStatus, int]) -> dict[str, Any]:
    active = counts[REG] + counts[CONF]
    attended, attendance_denominator = _attendance_parts(event, counts)
    return {
        "event_id": event.event_id,
        "capacity": event.max_participants,
        "registered_count": counts[REG],
        "confirmed_count": counts[CONF],
        "waitlisted_count": counts[WAIT],
        "cancelled_count": counts[CANC],
        "attended_count": counts[ATT],
        "active_count": active,
        "display_count": sum(counts.values()) - counts[CANC],
        "spots_remaining": max(event.max_participants - active, 0),
        "fill_rate": _rate(active, event.max_participants),
        "attendance_rate": _rate(attended, attendance_denominator),
        "is_past": _is_past(event),
    }


def get_event_statistics(db: Session, event_id: str, actor: Caller) -> dict[str, Any]:
    event = load_event(db, event_id)
    ensure_can_manage(event, actor)
    counts = participation_store.count_by_status(db, [event.event_id])
    return project_event(event, counts)


def get_organizer_statistics(db: Session, organizer_id: str) -> dict[str, Any]:
    """Totals across every event the organizer created.

    Fill rate is taken over active events only; attendance over past events only.
    """
    events = db.query(Event).filter(Event.organizer_id == organizer_id).all()
    per_event = participation_store.count_by_event_and_status(db, [e.event_id for e in events])

    totals = {s: 0 for s in ParticipationStatus}
    active_sum = capacity_sum = attended_sum = attendance_denominator_sum = 0
    active_events = 0
    for event in events:
        counts = per_event[event.event_id]
        for s, n in counts.items():
            totals[s] += n
        if event.status == EventStatus.active:
            active_events += 1
            active_sum += counts[REG] + counts[CONF]
            capacity_sum += event.max_participants
        attended, denominator = _attendance_parts(event, counts)
        attended_sum += attended
        attendance_denominator_sum += denominator

    logger.debug("Projected statistics for organizer %s over %d events", organizer_id, len(events))
    return {
        "organizer_id": organizer_id,
        "events_created": len(events),
        "active_events": active_events,
        "registered_count": totals[REG],
        "confirmed_count": totals[CONF],
        "waitlisted_count": totals[WAIT],
        "cancelled_count": totals[CANC],
        "attended_count": totals[ATT],
        "fill_rate": _rate(active_sum, capacity_sum),
        "attendance_rate": _rate(attended_sum, attendance_denominator_sum),
    }
