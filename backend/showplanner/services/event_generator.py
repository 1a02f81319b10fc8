"""Event generator — materializes occurrences up to a horizon as event drafts.

No I/O: reads a show snapshot and the supplied "now", returns drafts for the
synchronizer to persist.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from showplanner.config import settings
from showplanner.errors import FieldViolation, GenerationInconsistency
from showplanner.models.event import EventStatus
from showplanner.models.show import ShowStatus
from showplanner.scheduling.occurrences import calculate_next_occurrences, ensure_aware

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventDraft:
    """An event that has been computed but not yet stored."""

    show_id: str
    start_datetime: datetime
    end_datetime: datetime
    show_version: int
    generated_at: datetime
    status: EventStatus = EventStatus.scheduled
    is_customized: bool = False


def _build_draft(show, occurrence: datetime, now: datetime) -> EventDraft:
    if occurrence is None or occurrence.tzinfo is None:
        raise GenerationInconsistency(
            "occurrence has no usable timestamp",
            [FieldViolation(field="start_datetime", constraint="aware datetime", value=occurrence)],
        )
    end = occurrence + timedelta(minutes=show.length_minutes)
    if end <= occurrence:
        raise GenerationInconsistency(
            "event would end before it starts",
            [FieldViolation(field="length_minutes", constraint="> 0", value=show.length_minutes)],
        )
    return EventDraft(
        show_id=show.show_id,
        start_datetime=occurrence,
        end_datetime=end,
        show_version=show.version,
        generated_at=now,
    )


def generate_events_for_show(
    show,
    horizon: datetime,
    now: Optional[datetime] = None,
    max_occurrences: Optional[int] = None,
) -> list[EventDraft]:
    """Build drafts for every future occurrence up to and including ``horizon``.

    An occurrence that cannot be turned into a valid event is logged and
    skipped; the rest of the run continues.
    """
    now = ensure_aware(now)
    horizon = ensure_aware(horizon)
    if ShowStatus(show.status) is not ShowStatus.active:
        logger.debug("Show %s is %s, nothing to generate", show.show_id, show.status)
        return []

    cap = max_occurrences or settings.EVENT_GENERATION_CAP
    drafts: list[EventDraft] = []
    for occurrence in calculate_next_occurrences(show, cap, now=now):
        try:
            draft = _build_draft(show, occurrence, now)
        except GenerationInconsistency as exc:
            logger.warning("Skipping undatable occurrence %r for show %s: %s", occurrence, show.show_id, exc)
            continue
        if draft.start_datetime <= now:
            continue
        if draft.start_datetime > horizon:
            break
        drafts.append(draft)

    logger.debug("Generated %d drafts for show %s up to %s", len(drafts), show.show_id, horizon.isoformat())
    return drafts
