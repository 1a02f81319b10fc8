"""Tests for turning occurrences into event drafts."""
from datetime import date, datetime, time, timedelta, timezone

from showplanner.models.event import EventStatus
from showplanner.models.show import ShowStatus
from showplanner.services import event_generator
from showplanner.services.event_generator import generate_events_for_show
from tests.conftest import NOW, make_show

HORIZON = datetime(2025, 1, 31, 23, 59, 59, tzinfo=timezone.utc)


class TestDrafts:
    def test_draft_fields(self):
        show = make_show(repeat_pattern="daily", length_minutes=90, version=4, first_event_date=date(2025, 1, 1))
        drafts = generate_events_for_show(show, HORIZON, now=NOW)
        first = drafts[0]
        assert first.show_id == show.show_id
        assert first.start_datetime == datetime(2025, 1, 1, 19, tzinfo=timezone.utc)
        assert first.end_datetime - first.start_datetime == timedelta(minutes=90)
        assert first.status is EventStatus.scheduled
        assert first.is_customized is False
        assert first.show_version == 4
        assert first.generated_at == NOW

    def test_stops_at_horizon(self):
        show = make_show(repeat_pattern="daily", first_event_date=date(2025, 1, 1))
        drafts = generate_events_for_show(show, HORIZON, now=NOW)
        assert len(drafts) == 31
        assert all(d.start_datetime <= HORIZON for d in drafts)

    def test_horizon_is_inclusive(self):
        show = make_show(repeat_pattern="daily", first_event_date=date(2025, 1, 1))
        horizon = datetime(2025, 1, 3, 19, tzinfo=timezone.utc)
        drafts = generate_events_for_show(show, horizon, now=NOW)
        assert drafts[-1].start_datetime == horizon
        assert len(drafts) == 3

    def test_occurrence_at_now_is_not_generated(self):
        show = make_show(repeat_pattern="daily", start_time=time(9, 0), first_event_date=date(2025, 1, 1))
        drafts = generate_events_for_show(show, HORIZON, now=NOW)
        assert drafts[0].start_datetime == datetime(2025, 1, 2, 9, tzinfo=timezone.utc)

    def test_cap_limits_drafts(self):
        show = make_show(repeat_pattern="daily", first_event_date=date(2025, 1, 1))
        assert len(generate_events_for_show(show, HORIZON, now=NOW, max_occurrences=5)) == 5

    def test_inactive_show(self):
        show = make_show(repeat_pattern="daily", status=ShowStatus.paused)
        assert generate_events_for_show(show, HORIZON, now=NOW) == []


class TestInconsistentOccurrences:
    def test_undatable_occurrence_skipped(self, monkeypatch):
        good = datetime(2025, 1, 10, 19, tzinfo=timezone.utc)
        monkeypatch.setattr(
            event_generator, "calculate_next_occurrences",
            lambda show, cap, now=None: [None, datetime(2025, 1, 5, 19), good],
        )
        drafts = generate_events_for_show(make_show(), HORIZON, now=NOW)
        assert [d.start_datetime for d in drafts] == [good]

    def test_non_positive_length_skipped(self):
        show = make_show(repeat_pattern="daily", length_minutes=0, first_event_date=date(2025, 1, 1))
        assert generate_events_for_show(show, HORIZON, now=NOW) == []
