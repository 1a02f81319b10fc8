"""Maintenance driver — keeps every active show generated up to the rolling horizon.

A pass walks active shows one by one. Each show is self-contained: a failure
is logged, rolled back and recorded in the report, and the pass moves on. The
failed show is retried next cycle because its stored horizon is still behind.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session, sessionmaker

from showplanner.database import utcnow
from showplanner.models.show import Show, ShowStatus
from showplanner.scheduling.occurrences import ensure_aware
from showplanner.services.event_sync_service import extend_show_horizon

logger = logging.getLogger(__name__)


@dataclass
class MaintenanceReport:
    shows_checked: int = 0
    shows_extended: int = 0
    events_created: int = 0
    failures: dict[str, str] = field(default_factory=dict)


def get_active_shows(db: Session) -> list[Show]:
    return (
        db.query(Show)
        .filter(Show.status == ShowStatus.active)
        .order_by(Show.created_at)
        .all()
    )


def run_maintenance_pass(db: Session, now: Optional[datetime] = None) -> MaintenanceReport:
    """Extend the horizon of every active show that has fallen behind."""
    now = ensure_aware(now)
    report = MaintenanceReport()
    show_ids = [show.show_id for show in get_active_shows(db)]

    for show_id in show_ids:
        report.shows_checked += 1
        try:
            show = db.get(Show, show_id)
            if show is None or show.status != ShowStatus.active:
                continue
            result = extend_show_horizon(db, show, now=now)
        except Exception as exc:
            db.rollback()
            logger.exception("Maintenance failed for show %s", show_id)
            report.failures[show_id] = str(exc)
            continue
        if result is not None:
            report.shows_extended += 1
            report.events_created += result.created

    logger.info(
        "Maintenance pass: %d shows checked, %d extended, %d events created, %d failures",
        report.shows_checked, report.shows_extended, report.events_created, len(report.failures),
    )
    return report


def _run_once(session_factory: sessionmaker, now: datetime) -> MaintenanceReport:
    db = session_factory()
    try:
        return run_maintenance_pass(db, now=now)
    finally:
        db.close()


async def maintenance_loop(
    session_factory: sessionmaker,
    interval_minutes: int,
    clock: Callable[[], datetime] = utcnow,
) -> None:
    """Run a maintenance pass every ``interval_minutes`` until cancelled."""
    logger.info("Maintenance loop started (every %d min)", interval_minutes)
    while True:
        try:
            await asyncio.to_thread(_run_once, session_factory, clock())
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Maintenance pass crashed")
        await asyncio.sleep(interval_minutes * 60)
