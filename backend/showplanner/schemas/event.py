"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

from showplanner.models.event import EventStatus


class EventUpdate(BaseModel):
    """User edit of a single event. Any field set here marks the event customized."""

    event_title: Optional[str] = None
    event_description: Optional[str] = None
    start_datetime: Optional[datetime] = None
    length_minutes: Optional[int] = Field(None, gt=0)
    status: Optional[EventStatus] = None
    custom_fields: Optional[dict[str, Any]] = None


class EventOut(BaseModel):
    event_id: str
    show_id: str
    event_title: Optional[str] = None
    event_description: Optional[str] = None
    start_datetime: datetime
    end_datetime: datetime
    length_minutes: Optional[int] = None
    status: EventStatus
    is_customized: bool
    custom_fields: Optional[dict[str, Any]] = None
    show_version: int
    generated_at: datetime
    last_synced_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
