"""Per-event serialization of read-decide-write sequences.

Inside one process, a ``threading.Lock`` per event id orders concurrent
requests. Across processes the services also take ``SELECT ... FOR UPDATE``
on the event row, so PostgreSQL deployments serialize on the row lock.
Different events never contend.

Registry entries live only while some request holds or waits on them, so
the registry stays bounded by the number of in-flight requests.
"""
import logging
import threading
from contextlib import contextmanager

from sqlalchemy.orm import Session

from event_capacity.config import settings
from event_capacity.errors import EventBusy

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
# event id -> [lock, number of holders and waiters]
_event_locks: dict[str, list] = {}


def _checkout(event_id: str) -> threading.Lock:
    with _registry_lock:
        entry = _event_locks.get(event_id)
        if entry is None:
            entry = _event_locks[event_id] = [threading.Lock(), 0]
        entry[1] += 1
        return entry[0]


def _checkin(event_id: str) -> None:
    with _registry_lock:
        entry = _event_locks[event_id]
        entry[1] -= 1
        if entry[1] == 0:
            del _event_locks[event_id]


@contextmanager
def serialized(db: Session, event_id: str):
    """Hold the event's lock for the block; roll ``db`` back if the block raises."""
    key = str(event_id)
    lock = _checkout(key)
    try:
        if not lock.acquire(timeout=settings.EVENT_LOCK_TIMEOUT_SECONDS):
            logger.warning("Timed out waiting for lock on event %s", event_id)
            raise EventBusy()
        try:
            yield
        except Exception:
            db.rollback()
            raise
        finally:
            lock.release()
    finally:
        _checkin(key)
