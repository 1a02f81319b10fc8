"""Event synchronization — reconciles stored events with a show template.

Responsibilities:
- Persist generated drafts behind the (show_id, start_datetime) uniqueness guard
- Show update: cancel non-customized future events, regenerate to the horizon
- Show cancellation: cancel every future scheduled event
- Horizon extension: generate only the missing tail (used by maintenance)
- Append an EventGenerationLog for every generation run

Every path re-reads current storage state before writing, so a retry or a
concurrent trigger for the same show never doubles up events.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from showplanner.config import settings
from showplanner.errors import FieldViolation, SynchronizationConflict
from showplanner.models.event import Event, EventStatus
from showplanner.models.generation_log import EventGenerationLog, TriggerReason
from showplanner.models.show import Show
from showplanner.scheduling.horizon import get_three_month_horizon
from showplanner.scheduling.occurrences import ensure_aware
from showplanner.services.event_generator import EventDraft, generate_events_for_show

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """What a synchronization run did to one show's events."""

    show_id: str
    created: int = 0
    cancelled: int = 0
    preserved: int = 0
    duplicates: int = 0
    horizon: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Storage helpers
# ---------------------------------------------------------------------------
def get_future_events(db: Session, show_id: str, now: datetime) -> list[Event]:
    """Non-cancelled events of ``show_id`` starting after ``now``."""
    return (
        db.query(Event)
        .filter(
            Event.show_id == show_id,
            Event.start_datetime > now,
            Event.status != EventStatus.cancelled,
        )
        .order_by(Event.start_datetime)
        .all()
    )


def _live_start_times(db: Session, show_id: str) -> set[datetime]:
    rows = (
        db.query(Event.start_datetime)
        .filter(Event.show_id == show_id, Event.status != EventStatus.cancelled)
        .all()
    )
    return {row[0] for row in rows}


def _customized_start_times(db: Session, show_id: str, now: datetime) -> set[datetime]:
    """Future instants held by user-touched events, user-cancelled ones included."""
    rows = (
        db.query(Event.start_datetime)
        .filter(Event.show_id == show_id, Event.start_datetime > now, Event.is_customized.is_(True))
        .all()
    )
    return {row[0] for row in rows}


def _insert_draft(db: Session, draft: EventDraft) -> None:
    """Insert one draft inside a SAVEPOINT; a unique-index hit becomes a SynchronizationConflict."""
    nested = db.begin_nested()
    try:
        db.add(Event(
            show_id=draft.show_id,
            start_datetime=draft.start_datetime,
            end_datetime=draft.end_datetime,
            status=draft.status,
            is_customized=draft.is_customized,
            show_version=draft.show_version,
            generated_at=draft.generated_at,
            last_synced_at=draft.generated_at,
        ))
        db.flush()
        nested.commit()
    except IntegrityError as exc:
        nested.rollback()
        raise SynchronizationConflict(
            "event already exists for this show and start time",
            [FieldViolation(field="start_datetime", constraint="unique per show", value=draft.start_datetime)],
        ) from exc


def persist_drafts(db: Session, drafts: Iterable[EventDraft], result: Optional[SyncResult] = None) -> int:
    """Store drafts whose (show_id, start_datetime) is not already taken.

    Returns the number of events created. Does not commit.
    """
    created = 0
    taken: dict[str, set[datetime]] = {}
    for draft in drafts:
        if draft.show_id not in taken:
            taken[draft.show_id] = _live_start_times(db, draft.show_id)
        if draft.start_datetime in taken[draft.show_id]:
            logger.debug("Event for show %s at %s already exists", draft.show_id, draft.start_datetime.isoformat())
            if result is not None:
                result.duplicates += 1
            continue
        try:
            _insert_draft(db, draft)
        except SynchronizationConflict:
            # Inserted by a concurrent trigger between our read and write
            logger.info(
                "Concurrent insert for show %s at %s, treating as already generated",
                draft.show_id, draft.start_datetime.isoformat(),
            )
            if result is not None:
                result.duplicates += 1
            continue
        taken[draft.show_id].add(draft.start_datetime)
        created += 1
    return created


def write_generation_log(
    db: Session,
    show_id: str,
    events_generated: int,
    generated_until: datetime,
    trigger_reason: TriggerReason,
    now: datetime,
) -> EventGenerationLog:
    log = EventGenerationLog(
        show_id=show_id,
        generation_date=now,
        events_generated=events_generated,
        generated_until=generated_until,
        trigger_reason=trigger_reason,
    )
    db.add(log)
    return log


def get_last_generated_until(db: Session, show_id: str) -> Optional[datetime]:
    """Horizon reached by the most recent generation run, or None if never generated."""
    row = (
        db.query(EventGenerationLog.generated_until)
        .filter(EventGenerationLog.show_id == show_id)
        .order_by(EventGenerationLog.generation_date.desc(), EventGenerationLog.generated_until.desc())
        .first()
    )
    return row[0] if row else None


def _horizon(now: datetime) -> datetime:
    return get_three_month_horizon(now, months=settings.HORIZON_MONTHS)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------
def generate_for_new_show(db: Session, show: Show, now: Optional[datetime] = None) -> SyncResult:
    """Populate a freshly created show up to the horizon."""
    now = ensure_aware(now)
    result = SyncResult(show_id=show.show_id, horizon=_horizon(now))
    drafts = generate_events_for_show(show, result.horizon, now=now)
    result.created = persist_drafts(db, drafts, result)
    write_generation_log(db, show.show_id, result.created, result.horizon, TriggerReason.new_show, now)
    db.commit()
    logger.info("Generated %d events for new show %s until %s", result.created, show.show_id, result.horizon.isoformat())
    return result


def sync_show_update(db: Session, show: Show, now: Optional[datetime] = None) -> SyncResult:
    """Re-align future events with an edited show.

    Customized events are left exactly as they are. Everything else in the
    future is cancelled and regenerated from the new template; a regenerated
    slot that collides with a customized event keeps the customized one, and
    a slot the user cancelled stays cancelled.
    """
    now = ensure_aware(now)
    result = SyncResult(show_id=show.show_id, horizon=_horizon(now))

    for event in get_future_events(db, show.show_id, now):
        if event.is_customized:
            result.preserved += 1
            continue
        event.status = EventStatus.cancelled
        event.last_synced_at = now
        result.cancelled += 1
    # Free the unique slots before regenerating
    db.flush()

    # A slot the user edited or cancelled is never handed back to the generator
    reserved = _customized_start_times(db, show.show_id, now)
    drafts = []
    for draft in generate_events_for_show(show, result.horizon, now=now):
        if draft.start_datetime in reserved:
            result.duplicates += 1
            continue
        drafts.append(draft)
    result.created = persist_drafts(db, drafts, result)
    write_generation_log(db, show.show_id, result.created, result.horizon, TriggerReason.show_update, now)
    db.commit()
    logger.info(
        "Synced show %s v%d: %d cancelled, %d customized kept, %d created",
        show.show_id, show.version, result.cancelled, result.preserved, result.created,
    )
    return result


def sync_show_cancellation(db: Session, show: Show, now: Optional[datetime] = None) -> SyncResult:
    """Cancel every future scheduled event of a cancelled show, customized or not."""
    now = ensure_aware(now)
    result = SyncResult(show_id=show.show_id)
    events = (
        db.query(Event)
        .filter(
            Event.show_id == show.show_id,
            Event.start_datetime > now,
            Event.status == EventStatus.scheduled,
        )
        .all()
    )
    for event in events:
        event.status = EventStatus.cancelled
        event.last_synced_at = now
        result.cancelled += 1
    db.commit()
    logger.info("Cancelled %d future events of show %s", result.cancelled, show.show_id)
    return result


def extend_show_horizon(db: Session, show: Show, now: Optional[datetime] = None) -> Optional[SyncResult]:
    """Generate the missing tail between the stored horizon and the current target.

    Returns None when the show is already generated far enough.
    """
    now = ensure_aware(now)
    target = _horizon(now)
    last_until = get_last_generated_until(db, show.show_id)
    if last_until is not None and last_until >= target:
        return None

    result = SyncResult(show_id=show.show_id, horizon=target)
    drafts = generate_events_for_show(show, target, now=now)
    if last_until is not None:
        drafts = [draft for draft in drafts if draft.start_datetime > last_until]
    result.created = persist_drafts(db, drafts, result)
    write_generation_log(db, show.show_id, result.created, target, TriggerReason.maintenance, now)
    db.commit()
    logger.info(
        "Extended show %s from %s to %s (%d events)",
        show.show_id, last_until.isoformat() if last_until else "nothing", target.isoformat(), result.created,
    )
    return result

