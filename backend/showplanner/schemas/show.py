"""Pydantic schemas for Shows and their scheduling configuration."""
from __future__ import annotations
from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, Field

from showplanner.models.show import MonthlyDayFallback, RepeatPattern, ShowStatus


class SchedulingConfig(BaseModel):
    """Pattern-specific refinement of which days a show falls on.

    ``None`` on a field means absent. Only one group applies per pattern:
    ``weekdays`` (weekly/biweekly), ``monthly_weekday`` + ``monthly_week_number``
    or ``monthly_day`` (+ optional ``monthly_day_fallback``) for monthly.
    Weekdays are numbered 0=Sunday .. 6=Saturday.
    """

    weekdays: Optional[list[int]] = None
    monthly_weekday: Optional[int] = None
    monthly_week_number: Optional[int] = None
    monthly_day: Optional[int] = None
    monthly_day_fallback: Optional[MonthlyDayFallback] = None


class ShowCreate(BaseModel):
    show_name: str
    timezone: str = "UTC"
    start_time: time
    length_minutes: int = Field(60, gt=0)
    first_event_date: date
    repeat_pattern: RepeatPattern = RepeatPattern.none
    scheduling_config: Optional[SchedulingConfig] = None


class ShowUpdate(BaseModel):
    show_name: Optional[str] = None
    timezone: Optional[str] = None
    start_time: Optional[time] = None
    length_minutes: Optional[int] = Field(None, gt=0)
    first_event_date: Optional[date] = None
    repeat_pattern: Optional[RepeatPattern] = None
    scheduling_config: Optional[SchedulingConfig] = None
    status: Optional[ShowStatus] = None


class ShowOut(BaseModel):
    show_id: str
    show_name: str
    timezone: str
    start_time: time
    length_minutes: int
    first_event_date: date
    repeat_pattern: RepeatPattern
    scheduling_config: Optional[SchedulingConfig] = None
    status: ShowStatus
    version: int
    created_at: datetime
    updated_at: datetime
    next_occurrence: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OccurrencesOut(BaseModel):
    show_id: str
    occurrences: list[datetime]
