"""Event API routes — user edits of single events."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from showplanner.database import get_db
from showplanner.schemas.event import EventOut, EventUpdate
from showplanner.services import event_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(event_id: str, payload: EventUpdate, db: Session = Depends(get_db)):
    """Edit an event. The event becomes customized and survives show updates."""
    updates = payload.model_dump(exclude_unset=True)
    return event_service.customize_event(db, event_id, updates)


@router.post("/{event_id}/cancel", response_model=EventOut)
def cancel_event(event_id: str, db: Session = Depends(get_db)):
    """Cancel a single event (soft delete)."""
    return event_service.cancel_event(db, event_id)
