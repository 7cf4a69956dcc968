"""Statistics projector tests — per-event and per-organizer aggregates."""
from datetime import datetime, timedelta, timezone

import pytest

from event_capacity.dependencies import Caller, Role
from event_capacity.errors import NotEventOrganizer
from event_capacity.models.event import EventStatus
from event_capacity.services.participation_service import (
    confirm_participation,
    join_event,
    leave_event,
    mark_attended,
)
from event_capacity.services.statistics_service import get_event_statistics, get_organizer_statistics
from event_capacity.timeutils import as_utc
from tests.conftest import ORGANIZER_ID, create_test_event, headers, join, make_event

ORG = headers(ORGANIZER_ID, "ORGANIZER")


class TestEventStatistics:

    def test_past_event_attendance(self, db, organizer, sink):
        ev = make_event(db, capacity=5, starts_in=timedelta(hours=-2))
        for user in ["u1", "u2", "u3"]:
            join_event(db, user, ev.event_id)
        mark_attended(db, ev.event_id, "u1", organizer)
        mark_attended(db, ev.event_id, "u2", organizer)

        stats = get_event_statistics(db, ev.event_id, organizer)

        assert stats["is_past"] is True
        assert stats["attended_count"] == 2
        assert stats["registered_count"] == 1
        assert stats["attendance_rate"] == pytest.approx(0.6667)

    def test_future_event_has_no_attendance(self, db, organizer):
        ev = make_event(db, capacity=4)
        join_event(db, "u1", ev.event_id)
        join_event(db, "u2", ev.event_id)

        stats = get_event_statistics(db, ev.event_id, organizer)

        assert stats["is_past"] is False
        assert stats["attendance_rate"] == 0.0
        assert stats["fill_rate"] == 0.5
        assert stats["spots_remaining"] == 2

    def test_empty_event(self, db, organizer):
        ev = make_event(db, capacity=3, starts_in=timedelta(days=-1))
        stats = get_event_statistics(db, ev.event_id, organizer)
        assert stats["attendance_rate"] == 0.0
        assert stats["fill_rate"] == 0.0
        assert stats["display_count"] == 0
        assert stats["spots_remaining"] == 3

    def test_per_status_counts(self, db, organizer, sink):
        ev = make_event(db, capacity=2)
        for user in ["u1", "u2", "w1", "w2", "gone"]:
            join_event(db, user, ev.event_id)
        confirm_participation(db, ev.event_id, "u1", organizer)
        leave_event(db, "gone", ev.event_id, sink)

        stats = get_event_statistics(db, ev.event_id, organizer)

        assert stats["registered_count"] == 1
        assert stats["confirmed_count"] == 1
        assert stats["waitlisted_count"] == 2
        assert stats["cancelled_count"] == 1
        assert stats["active_count"] == 2
        assert stats["display_count"] == 4
        assert stats["fill_rate"] == 1.0
        assert stats["spots_remaining"] == 0

    def test_spots_remaining_never_negative(self, db, organizer, sink):
        ev = make_event(db, capacity=3)
        for user in ["u1", "u2", "u3"]:
            join_event(db, user, ev.event_id)
        ev.max_participants = 1
        db.commit()

        stats = get_event_statistics(db, ev.event_id, organizer)

        assert stats["active_count"] == 3
        assert stats["spots_remaining"] == 0
        assert stats["fill_rate"] == 3.0

    def test_other_organizer_forbidden(self, db):
        ev = make_event(db)
        with pytest.raises(NotEventOrganizer):
            get_event_statistics(db, ev.event_id, Caller(user_id="organizer-2", role=Role.ORGANIZER))


class TestOrganizerStatistics:

    def test_totals_across_events(self, db, organizer, sink):
        upcoming = make_event(db, capacity=4, name="Upcoming")
        past = make_event(db, capacity=2, starts_in=timedelta(days=-1), name="Past")
        make_event(db, capacity=10, organizer_id="organizer-2", name="Not mine")

        join_event(db, "u1", upcoming.event_id)
        join_event(db, "u2", upcoming.event_id)
        join_event(db, "p1", past.event_id)
        join_event(db, "p2", past.event_id)
        join_event(db, "p3", past.event_id)
        mark_attended(db, past.event_id, "p1", organizer)

        stats = get_organizer_statistics(db, ORGANIZER_ID)

        assert stats["events_created"] == 2
        assert stats["active_events"] == 2
        assert stats["registered_count"] == 3
        assert stats["attended_count"] == 1
        assert stats["waitlisted_count"] == 1
        # (2 + 1) active over (4 + 2) capacity
        assert stats["fill_rate"] == 0.5
        # 1 attended of the 2 who held a slot at the past event
        assert stats["attendance_rate"] == 0.5

    def test_cancelled_events_excluded_from_fill_rate(self, db, organizer):
        live = make_event(db, capacity=2)
        make_event(db, capacity=100, status=EventStatus.cancelled)
        join_event(db, "u1", live.event_id)

        stats = get_organizer_statistics(db, ORGANIZER_ID)

        assert stats["events_created"] == 2
        assert stats["active_events"] == 1
        assert stats["fill_rate"] == 0.5

    def test_organizer_without_events(self, db):
        stats = get_organizer_statistics(db, "nobody")
        assert stats["events_created"] == 0
        assert stats["fill_rate"] == 0.0
        assert stats["attendance_rate"] == 0.0


class TestStatisticsApi:

    def test_event_statistics_endpoint(self, client):
        event = create_test_event(client, capacity=2)
        join(client, event["event_id"], "u1")

        resp = client.get(f"/api/events/{event['event_id']}/statistics", headers=headers(ORGANIZER_ID, "ORGANIZER"))

        assert resp.status_code == 200
        data = resp.json()
        assert data["capacity"] == 2
        assert data["registered_count"] == 1
        assert data["spots_remaining"] == 1

    def test_event_statistics_forbidden_for_participant(self, client):
        event = create_test_event(client)
        join(client, event["event_id"], "u1")
        resp = client.get(f"/api/events/{event['event_id']}/statistics", headers=headers("u1"))
        assert resp.status_code == 403

    def test_organizer_dashboard(self, client):
        create_test_event(client, capacity=4)
        resp = client.get("/api/analytics/organizer", headers=headers(ORGANIZER_ID, "ORGANIZER"))
        assert resp.status_code == 200
        assert resp.json()["events_created"] == 1

    def test_dashboard_requires_organizer_role(self, client):
        resp = client.get("/api/analytics/organizer", headers=headers("u1"))
        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "ORGANIZER_ROLE_REQUIRED"


class TestOffsetTimes:
    """Event times sent with a non-UTC offset keep their instant."""

    def test_past_event_with_offset_counts_attendance(self, client):
        plus_five = timezone(timedelta(hours=5))
        started = datetime.now(plus_five) - timedelta(minutes=90)
        resp = client.post("/api/events/", json={
            "name": "Sunrise Hike",
            "starts_at": started.isoformat(),
            "max_participants": 5,
        }, headers=ORG)
        assert resp.status_code == 201
        eid = resp.json()["event_id"]
        for user in ["u1", "u2", "u3"]:
            join(client, eid, user)
        client.post(f"/api/events/{eid}/participants/u1/attended", headers=ORG)
        client.post(f"/api/events/{eid}/participants/u2/attended", headers=ORG)

        stats = client.get(f"/api/events/{eid}/statistics", headers=ORG).json()

        assert stats["is_past"] is True
        assert stats["attended_count"] == 2
        assert stats["attendance_rate"] == pytest.approx(0.6667)

    def test_stored_instant_matches_sent_instant(self, client):
        plus_five = timezone(timedelta(hours=5))
        starts = datetime(2030, 6, 1, 12, 0, tzinfo=plus_five)
        resp = client.post("/api/events/", json={
            "name": "Offset",
            "starts_at": starts.isoformat(),
            "ends_at": (starts + timedelta(hours=2)).isoformat(),
            "max_participants": 5,
        }, headers=ORG)
        eid = resp.json()["event_id"]

        stored = datetime.fromisoformat(client.get(f"/api/events/{eid}").json()["starts_at"])

        assert as_utc(stored) == starts
        assert as_utc(stored).hour == 7

    def test_upcoming_event_with_negative_offset_is_not_past(self, client):
        minus_eight = timezone(timedelta(hours=-8))
        soon = datetime.now(minus_eight) + timedelta(hours=1)
        resp = client.post("/api/events/", json={
            "name": "Late Meetup",
            "starts_at": soon.isoformat(),
            "max_participants": 5,
        }, headers=ORG)
        eid = resp.json()["event_id"]

        stats = client.get(f"/api/events/{eid}/statistics", headers=ORG).json()

        assert stats["is_past"] is False
