"""Show service — template lifecycle and the event synchronization it triggers.

- Scheduling config validated before anything is written
- Version bumped on every template edit
- Timing/status edits resynchronize future events
- Cancellation is a soft delete (status=cancelled) that cancels scheduled events
"""
import logging
from datetime import date, datetime, time
from typing import Any, Mapping, Optional, Union

import pytz
from fastapi import HTTPException
from sqlalchemy.orm import Session

from showplanner.errors import ConfigValidationError
from showplanner.models.event import Event, EventStatus
from showplanner.models.show import RepeatPattern, Show, ShowStatus
from showplanner.scheduling.occurrences import ensure_aware
from showplanner.scheduling.validator import validate_scheduling_config
from showplanner.schemas.show import SchedulingConfig
from showplanner.services import event_sync_service

logger = logging.getLogger(__name__)

# Fields whose change alters when events happen
TIMING_FIELDS = ("timezone", "start_time", "length_minutes", "first_event_date", "repeat_pattern", "scheduling_config")
UPDATABLE_FIELDS = ("show_name", "status") + TIMING_FIELDS


def _check_timezone(name: str) -> None:
    try:
        pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ConfigValidationError.for_field("unknown timezone", "timezone", "IANA timezone name", name) from None


def _config_to_json(config: Optional[Union[SchedulingConfig, Mapping[str, Any]]]) -> Optional[dict[str, Any]]:
    if config is None:
        return None
    if not isinstance(config, SchedulingConfig):
        config = SchedulingConfig.model_validate(dict(config))
    return config.model_dump(mode="json", exclude_none=True)


def get_show(db: Session, show_id: str) -> Show:
    show = db.query(Show).filter(Show.show_id == show_id).first()
    if not show:
        raise HTTPException(status_code=404, detail="Show not found")
    return show


def create_show(
    db: Session,
    show_name: str,
    start_time: time,
    first_event_date: date,
    length_minutes: int = 60,
    repeat_pattern: Union[RepeatPattern, str] = RepeatPattern.none,
    scheduling_config: Optional[Union[SchedulingConfig, Mapping[str, Any]]] = None,
    timezone: str = "UTC",
    now: Optional[datetime] = None,
) -> Show:
    """Create an active show and generate its events up to the horizon."""
    now = ensure_aware(now)
    validate_scheduling_config(repeat_pattern, scheduling_config)
    _check_timezone(timezone)

    show = Show(
        show_name=show_name,
        timezone=timezone,
        start_time=start_time,
        length_minutes=length_minutes,
        first_event_date=first_event_date,
        repeat_pattern=RepeatPattern(repeat_pattern),
        scheduling_config=_config_to_json(scheduling_config),
        status=ShowStatus.active,
        version=1,
        created_at=now,
        updated_at=now,
    )
    db.add(show)
    db.flush()
    logger.info("Created show '%s' (%s), pattern=%s", show_name, show.show_id, show.repeat_pattern.value)

    event_sync_service.generate_for_new_show(db, show, now=now)
    db.refresh(show)
    return show


def update_show(
    db: Session,
    show_id: str,
    updates: dict[str, Any],
    now: Optional[datetime] = None,
) -> Show:
    """Apply a template edit, bump the version and resync future events."""
    now = ensure_aware(now)
    show = get_show(db, show_id)
    if show.status == ShowStatus.cancelled:
        raise HTTPException(status_code=400, detail="Show is cancelled")

    # scheduling_config is the only field that may be cleared
    updates = {
        k: v for k, v in updates.items()
        if k in UPDATABLE_FIELDS and (v is not None or k == "scheduling_config")
    }
    if updates.get("status") == ShowStatus.cancelled:
        if len(updates) > 1:
            raise HTTPException(status_code=400, detail="Cancel a show without changing other fields")
        return cancel_show(db, show_id, now=now)

    pattern = updates.get("repeat_pattern", show.repeat_pattern)
    config = updates["scheduling_config"] if "scheduling_config" in updates else show.scheduling_config
    validate_scheduling_config(pattern, config)
    if "timezone" in updates:
        _check_timezone(updates["timezone"])

    changed = []
    for field, value in updates.items():
        if field == "scheduling_config":
            value = _config_to_json(value)
        elif field == "repeat_pattern":
            value = RepeatPattern(value)
        elif field == "status":
            value = ShowStatus(value)
        if getattr(show, field) != value:
            setattr(show, field, value)
            changed.append(field)

    if not changed:
        return show

    show.version += 1
    show.updated_at = now
    db.flush()
    logger.info("Updated show %s to version %d (%s)", show_id, show.version, ", ".join(changed))

    if any(field in TIMING_FIELDS or field == "status" for field in changed):
        event_sync_service.sync_show_update(db, show, now=now)
    else:
        db.commit()
    db.refresh(show)
    return show


def cancel_show(db: Session, show_id: str, now: Optional[datetime] = None) -> Show:
    """Soft-delete a show; its future scheduled events are cancelled with it."""
    now = ensure_aware(now)
    show = get_show(db, show_id)
    if show.status == ShowStatus.cancelled:
        raise HTTPException(status_code=400, detail="Show is already cancelled")

    show.status = ShowStatus.cancelled
    show.version += 1
    show.updated_at = now
    db.flush()
    event_sync_service.sync_show_cancellation(db, show, now=now)
    db.refresh(show)
    logger.info("Cancelled show %s", show_id)
    return show


def list_show_events(db: Session, show_id: str, include_cancelled: bool = False) -> list[Event]:
    get_show(db, show_id)
    query = db.query(Event).filter(Event.show_id == show_id)
    if not include_cancelled:
        query = query.filter(Event.status != EventStatus.cancelled)
    return query.order_by(Event.start_datetime).all()
