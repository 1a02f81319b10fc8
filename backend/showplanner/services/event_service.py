"""Event service — user edits of individual events.

- Any user edit marks the event customized, exempting it from resync
- End time recomputed from the effective length (override or show default)
- Cancellation is a soft delete; events are never physically removed
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from showplanner.models.event import Event, EventStatus
from showplanner.scheduling.occurrences import ensure_aware

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("event_title", "event_description", "start_datetime", "length_minutes", "status", "custom_fields")


def get_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def customize_event(
    db: Session,
    event_id: str,
    updates: dict[str, Any],
    now: Optional[datetime] = None,
) -> Event:
    """Apply a user edit and flag the event as customized."""
    now = ensure_aware(now)
    event = get_event(db, event_id)
    if event.status == EventStatus.cancelled:
        raise HTTPException(status_code=400, detail="Event is cancelled")

    changes = {}
    for field, value in updates.items():
        if field not in EDITABLE_FIELDS:
            continue
        if field in ("start_datetime", "status") and value is None:
            continue
        if field == "start_datetime":
            value = ensure_aware(value)
        elif field == "status":
            value = EventStatus(value)
        changes[field] = value

    # Check timing before touching the row so a rejected edit leaves nothing dirty
    start = changes.get("start_datetime", event.start_datetime)
    length = changes["length_minutes"] if "length_minutes" in changes else event.length_minutes
    end = start + timedelta(minutes=length or event.show.length_minutes)
    if end <= start:
        raise HTTPException(status_code=400, detail="Event must end after it starts")

    for field, value in changes.items():
        setattr(event, field, value)
    event.end_datetime = end
    event.is_customized = True
    event.updated_at = now
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Another event of this show already starts at that time",
        )
    db.refresh(event)
    logger.info("Customized event %s (%s)", event_id, ", ".join(sorted(updates)))
    return event


def cancel_event(db: Session, event_id: str, now: Optional[datetime] = None) -> Event:
    """User cancellation of a single event."""
    now = ensure_aware(now)
    event = get_event(db, event_id)
    if event.status == EventStatus.cancelled:
        raise HTTPException(status_code=400, detail="Event is already cancelled")

    event.status = EventStatus.cancelled
    event.is_customized = True
    event.updated_at = now
    db.commit()
    db.refresh(event)
    logger.info("Cancelled event %s", event_id)
    return event
