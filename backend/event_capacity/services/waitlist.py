"""Waitlist promoter — moves the earliest waitlisted participation into a freed slot.

Callers must hold the event's serialization lock (see ``locks.serialized``)
and call this once per freed slot; the caller commits.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from event_capacity.models.participation import Participation, ParticipationStatus
from event_capacity.services import participation_store

logger = logging.getLogger(__name__)


def promote_next(db: Session, event_id: str) -> Optional[Participation]:
    """Promote the head of the waitlist to REGISTERED, or return None if it is empty.

    Only ``status`` changes; ``registered_at`` keeps its waitlist value.
    """
    head = participation_store.waitlist_query(db, event_id).first()
    if head is None:
        return None
    head.status = ParticipationStatus.REGISTERED
    db.flush()
    logger.info("Promoted user %s from waitlist for event %s", head.user_id, event_id)
    return head
