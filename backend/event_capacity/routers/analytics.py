"""Organizer dashboard analytics routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from event_capacity.database import get_db
from event_capacity.dependencies import Caller, Role, get_current_user
from event_capacity.errors import OrganizerRoleRequired
from event_capacity.schemas.statistics import OrganizerStatisticsOut
from event_capacity.services import statistics_service

router = APIRouter()


@router.get("/organizer", response_model=OrganizerStatisticsOut)
def organizer_statistics(caller: Caller = Depends(get_current_user), db: Session = Depends(get_db)):
    """Aggregate statistics across the calling organizer's events."""
    if caller.role not in (Role.ORGANIZER, Role.ADMIN):
        raise OrganizerRoleRequired()
    return statistics_service.get_organizer_statistics(db, caller.user_id)
