"""Tests for the horizon maintenance pass and its background loop."""
import asyncio
from datetime import date, datetime, time, timezone

import pytest

from showplanner.models.event import Event, EventStatus
from showplanner.models.generation_log import EventGenerationLog, TriggerReason
from showplanner.models.show import RepeatPattern, ShowStatus
from showplanner.services import maintenance, show_service
from showplanner.services.event_sync_service import get_last_generated_until
from showplanner.services.maintenance import maintenance_loop, run_maintenance_pass
from tests.conftest import NOW, make_show

FEB_5 = datetime(2025, 2, 5, 9, 0, tzinfo=timezone.utc)
END_OF_MAY = datetime(2025, 5, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)


def _create_daily(db, name="Nightly News"):
    return show_service.create_show(
        db,
        show_name=name,
        start_time=time(19, 0),
        first_event_date=date(2025, 1, 1),
        repeat_pattern=RepeatPattern.daily,
        now=NOW,
    )


def _live_count(db, show_id):
    return db.query(Event).filter(Event.show_id == show_id, Event.status != EventStatus.cancelled).count()


class TestMaintenancePass:
    def test_up_to_date_show_untouched(self, db):
        show = _create_daily(db)
        report = run_maintenance_pass(db, now=NOW)
        assert report.shows_checked == 1
        assert report.shows_extended == 0
        assert report.events_created == 0
        assert _live_count(db, show.show_id) == 120

    def test_extends_only_missing_tail(self, db):
        show = _create_daily(db)
        report = run_maintenance_pass(db, now=FEB_5)

        assert report.shows_extended == 1
        assert report.events_created == 31  # May
        assert _live_count(db, show.show_id) == 151
        assert get_last_generated_until(db, show.show_id) == END_OF_MAY
        log = (
            db.query(EventGenerationLog)
            .filter(EventGenerationLog.trigger_reason == TriggerReason.maintenance)
            .one()
        )
        assert log.events_generated == 31

    def test_second_pass_is_noop(self, db):
        _create_daily(db)
        run_maintenance_pass(db, now=FEB_5)
        report = run_maintenance_pass(db, now=FEB_5)
        assert report.shows_extended == 0

    def test_never_generated_show_gets_full_window(self, db):
        db.add(make_show(show_id="legacy", repeat_pattern="daily", first_event_date=date(2025, 1, 1)))
        db.commit()
        report = run_maintenance_pass(db, now=NOW)
        assert report.events_created == 120
        assert get_last_generated_until(db, "legacy") is not None

    def test_inactive_shows_skipped(self, db):
        show = _create_daily(db)
        show_service.update_show(db, show.show_id, {"status": ShowStatus.paused}, now=NOW)
        report = run_maintenance_pass(db, now=FEB_5)
        assert report.shows_checked == 0
        assert _live_count(db, show.show_id) == 0

    def test_failure_is_isolated(self, db, monkeypatch):
        broken = _create_daily(db, name="Broken")
        healthy = _create_daily(db, name="Healthy")
        broken_id, healthy_id = broken.show_id, healthy.show_id
        real_extend = maintenance.extend_show_horizon

        def flaky_extend(session, show, now=None):
            if show.show_id == broken_id:
                raise RuntimeError("storage unavailable")
            return real_extend(session, show, now=now)

        monkeypatch.setattr(maintenance, "extend_show_horizon", flaky_extend)
        report = run_maintenance_pass(db, now=FEB_5)

        assert report.shows_checked == 2
        assert report.failures == {broken_id: "storage unavailable"}
        assert report.shows_extended == 1
        assert _live_count(db, healthy_id) == 151
        assert _live_count(db, broken_id) == 120

    def test_failed_show_retried_next_pass(self, db, monkeypatch):
        show = _create_daily(db)
        show_id = show.show_id
        real_extend = maintenance.extend_show_horizon

        def failing_extend(session, show, now=None):
            raise RuntimeError("boom")

        monkeypatch.setattr(maintenance, "extend_show_horizon", failing_extend)
        run_maintenance_pass(db, now=FEB_5)
        monkeypatch.setattr(maintenance, "extend_show_horizon", real_extend)

        report = run_maintenance_pass(db, now=FEB_5)
        assert report.events_created == 31
        assert _live_count(db, show_id) == 151


class TestMaintenanceLoop:
    def test_loop_runs_pass_until_cancelled(self, session_factory, monkeypatch):
        setup = session_factory()
        show_id = _create_daily(setup).show_id
        setup.close()

        async def stop(seconds):
            raise asyncio.CancelledError

        monkeypatch.setattr(maintenance.asyncio, "sleep", stop)
        with pytest.raises(asyncio.CancelledError):
            asyncio.run(maintenance_loop(session_factory, 10, clock=lambda: FEB_5))

        check = session_factory()
        try:
            assert _live_count(check, show_id) == 151
        finally:
            check.close()
