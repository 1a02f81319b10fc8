"""Show API routes — delegates to show_service for validation and event sync."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from showplanner.database import get_db
from showplanner.schemas.event import EventOut
from showplanner.schemas.show import OccurrencesOut, ShowCreate, ShowOut, ShowUpdate
from showplanner.scheduling.occurrences import calculate_next_occurrences, get_next_occurrence
from showplanner.services import show_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _show_out(show) -> ShowOut:
    out = ShowOut.model_validate(show)
    out.next_occurrence = get_next_occurrence(show)
    return out


@router.post("/", response_model=ShowOut, status_code=status.HTTP_201_CREATED)
def create_show(payload: ShowCreate, db: Session = Depends(get_db)):
    """Create a show and materialize its events up to the horizon."""
    show = show_service.create_show(
        db=db,
        show_name=payload.show_name,
        start_time=payload.start_time,
        first_event_date=payload.first_event_date,
        length_minutes=payload.length_minutes,
        repeat_pattern=payload.repeat_pattern,
        scheduling_config=payload.scheduling_config,
        timezone=payload.timezone,
    )
    return _show_out(show)


@router.get("/{show_id}", response_model=ShowOut)
def get_show(show_id: str, db: Session = Depends(get_db)):
    return _show_out(show_service.get_show(db, show_id))


@router.put("/{show_id}", response_model=ShowOut)
def update_show(show_id: str, payload: ShowUpdate, db: Session = Depends(get_db)):
    """Edit the template; non-customized future events are regenerated.

    ``status=cancelled`` cancels the show and must be sent on its own.
    """
    updates = payload.model_dump(exclude_unset=True)
    return _show_out(show_service.update_show(db, show_id, updates))


@router.post("/{show_id}/cancel", response_model=ShowOut)
def cancel_show(show_id: str, db: Session = Depends(get_db)):
    """Cancel the show and its future scheduled events (soft delete)."""
    return _show_out(show_service.cancel_show(db, show_id))


@router.get("/{show_id}/occurrences", response_model=OccurrencesOut)
def list_occurrences(
    show_id: str,
    count: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Upcoming computed occurrences (not necessarily materialized)."""
    show = show_service.get_show(db, show_id)
    return OccurrencesOut(show_id=show_id, occurrences=calculate_next_occurrences(show, count))


@router.get("/{show_id}/events", response_model=list[EventOut])
def list_show_events(
    show_id: str,
    include_cancelled: bool = Query(False),
    db: Session = Depends(get_db),
):
    return show_service.list_show_events(db, show_id, include_cancelled=include_cancelled)
