"""Capacity evaluator — the admission rule for new and reinstated registrations."""
from event_capacity.models.participation import ParticipationStatus


def decide_admission(active_count: int, capacity: int) -> ParticipationStatus:
    """Return REGISTERED while a slot is free, otherwise WAITLISTED.

    ``active_count`` must be the live REGISTERED + CONFIRMED count read inside
    the same serialized section as the write that follows.
    """
    if active_count < 0:
        raise ValueError(f"active_count must be non-negative, got {active_count}")
    if capacity < 1:
        raise ValueError(f"capacity must be positive, got {capacity}")
    if active_count < capacity:
        return ParticipationStatus.REGISTERED
    return ParticipationStatus.WAITLISTED


def has_free_slot(active_count: int, capacity: int) -> bool:
    return decide_admission(active_count, capacity) == ParticipationStatus.REGISTERED
