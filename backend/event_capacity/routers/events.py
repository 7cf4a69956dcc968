"""Event API routes — catalog, participation lifecycle and per-event statistics."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from event_capacity.database import get_db
from event_capacity.dependencies import Caller, get_current_user, get_notification_sink
from event_capacity.models.event import EventStatus
from event_capacity.schemas.event import EventCreate, EventDetailOut, EventOut, EventUpdate
from event_capacity.schemas.participation import ParticipationOut, WaitlistEntryOut
from event_capacity.schemas.statistics import EventStatisticsOut
from event_capacity.services import event_service, participation_service, participation_store, statistics_service
from event_capacity.services.notifications import NotificationSink

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Publish a capacity-bounded event (organizers and admins only)."""
    return event_service.create_event(db=db, actor=caller, **payload.model_dump())


@router.get("/", response_model=list[EventOut])
def list_events(
    organizer_id: Optional[str] = Query(None),
    event_status: Optional[EventStatus] = Query(None, alias="status"),
    start_after: Optional[datetime] = Query(None),
    start_before: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
):
    """List events with optional filters."""
    return event_service.list_events(
        db,
        organizer_id=organizer_id,
        event_status=event_status,
        start_after=start_after,
        start_before=start_before,
    )


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Fetch a single event with its live participant counts."""
    event = event_service.load_event(db, event_id)
    active = participation_store.count_active(db, event_id)
    return EventDetailOut(
        **EventOut.model_validate(event).model_dump(),
        current_participants=participation_store.count_display_participants(db, event_id),
        spots_remaining=max(event.max_participants - active, 0),
    )


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    caller: Caller = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
    db: Session = Depends(get_db),
):
    """Update catalog fields (organizer only); extra capacity is filled from the waitlist."""
    return event_service.update_event(
        db=db,
        event_id=event_id,
        actor=caller,
        updates=payload.model_dump(exclude_unset=True),
        sink=sink,
    )


@router.post("/{event_id}/cancel", response_model=EventOut)
def cancel_event(
    event_id: str,
    caller: Caller = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
    db: Session = Depends(get_db),
):
    """Cancel an event (soft delete) and notify its participants."""
    return event_service.cancel_event(db=db, event_id=event_id, actor=caller, sink=sink)


@router.post("/{event_id}/join", response_model=ParticipationOut)
def join_event(
    event_id: str,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Register the caller; a full event puts them on the waitlist."""
    return participation_service.join_event(db, user_id=caller.user_id, event_id=event_id)


@router.post("/{event_id}/leave", response_model=ParticipationOut)
def leave_event(
    event_id: str,
    caller: Caller = Depends(get_current_user),
    sink: NotificationSink = Depends(get_notification_sink),
    db: Session = Depends(get_db),
):
    """Cancel the caller's participation and promote the waitlist head if a slot frees."""
    return participation_service.leave_event(db, user_id=caller.user_id, event_id=event_id, sink=sink)


@router.get("/{event_id}/participants", response_model=list[ParticipationOut])
def list_participants(
    event_id: str,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return participation_service.list_participants(db, event_id, caller)


@router.get("/{event_id}/waitlist", response_model=list[WaitlistEntryOut])
def get_waitlist(
    event_id: str,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Waitlist in promotion order."""
    return participation_service.get_waitlist(db, event_id, caller)


@router.post("/{event_id}/participants/{user_id}/confirm", response_model=ParticipationOut)
def confirm_participation(
    event_id: str,
    user_id: str,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return participation_service.confirm_participation(db, event_id, user_id, caller)


@router.post("/{event_id}/participants/{user_id}/attended", response_model=ParticipationOut)
def mark_attended(
    event_id: str,
    user_id: str,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return participation_service.mark_attended(db, event_id, user_id, caller)


@router.get("/{event_id}/statistics", response_model=EventStatisticsOut)
def get_event_statistics(
    event_id: str,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Per-status counts, fill rate and attendance rate (organizer only)."""
    return statistics_service.get_event_statistics(db, event_id, caller)
