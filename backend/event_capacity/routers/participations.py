"""Participation batch-read routes used to render join/leave affordances."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from event_capacity.database import get_db
from event_capacity.dependencies import Caller, get_current_user
from event_capacity.models.participation import ParticipationStatus
from event_capacity.services import participation_service

router = APIRouter()


@router.get("/", response_model=dict[str, ParticipationStatus])
def get_participations_for_events(
    event_ids: list[str] = Query(default=[]),
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Map each requested event id to the caller's status; events without a record are omitted."""
    return participation_service.get_participations_for_events(db, caller.user_id, event_ids)
