"""Occurrence calculator — turns a show's repeat pattern into future datetimes.

Pure and side-effect free. "Now" is always passed in so results are
reproducible; every datetime is composed from a calendar date plus the show's
start time in the show's own timezone.

Monthly weekday patterns skip months where the requested Nth weekday does not
exist (e.g. a 5th Monday), so a "monthly" show may have gaps.
"""
import calendar
from datetime import date, datetime, time, timedelta, timezone
from functools import partial
from typing import Any, Callable, Optional

import pytz

from showplanner.models.show import MonthlyDayFallback, RepeatPattern, ShowStatus
from showplanner.schemas.show import SchedulingConfig

WEEKLY_INTERVAL_DAYS = 7
BIWEEKLY_INTERVAL_DAYS = 14


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------
def ensure_aware(now: Optional[datetime]) -> datetime:
    """Return ``now`` as an aware datetime; naive values are taken as UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def show_timezone(show: Any):
    return pytz.timezone(getattr(show, "timezone", None) or "UTC")


def combine_date_time(day: date, start: time, tz) -> datetime:
    """Calendar date + hour/minute/second of ``start``, localized to ``tz``."""
    naive = datetime(day.year, day.month, day.day, start.hour, start.minute, start.second)
    return tz.localize(naive)


def sunday_weekday(day: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def find_next_weekday(start: date, weekday: int) -> date:
    return start + timedelta(days=(weekday - sunday_weekday(start)) % 7)


def find_nth_weekday_in_month(year: int, month: int, weekday: int, n: int) -> Optional[date]:
    """Nth ``weekday`` of the month, or None when it falls outside the month."""
    if n < 1 or n > 5:
        return None
    current = find_next_weekday(date(year, month, 1), weekday)
    current += timedelta(days=7 * (n - 1))
    if current.month != month:
        return None
    return current


def find_last_weekday_in_month(year: int, month: int, weekday: int) -> date:
    # Walk back from the month's final day; any weekday occurs in the last 7 days.
    last_day = date(year, month, calendar.monthrange(year, month)[1])
    return last_day - timedelta(days=(sunday_weekday(last_day) - weekday) % 7)


def iter_months(year: int, month: int):
    while True:
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1


def resolve_scheduling_config(raw: Any) -> Optional[SchedulingConfig]:
    """Accept the JSON dict stored on a show row, a model, or None."""
    if raw is None:
        return None
    if isinstance(raw, SchedulingConfig):
        return raw
    return SchedulingConfig.model_validate(raw)


# ---------------------------------------------------------------------------
# Pattern calculators
# ---------------------------------------------------------------------------
def _single(show, max_occurrences: int, now: datetime, tz) -> list[datetime]:
    occurrence = combine_date_time(show.first_event_date, show.start_time, tz)
    return [occurrence] if occurrence > now else []


def _daily(show, max_occurrences: int, now: datetime, tz) -> list[datetime]:
    current = show.first_event_date
    # Jump close to today instead of stepping through years of history
    floor = now.astimezone(tz).date() - timedelta(days=1)
    if current < floor:
        current = floor
    while combine_date_time(current, show.start_time, tz) < now:
        current += timedelta(days=1)

    return [
        combine_date_time(current + timedelta(days=i), show.start_time, tz)
        for i in range(max_occurrences)
    ]


def _weekly(show, max_occurrences: int, now: datetime, tz, interval_days: int) -> list[datetime]:
    config = resolve_scheduling_config(show.scheduling_config)
    weekdays = [sunday_weekday(show.first_event_date)]
    if config is not None and config.weekdays:
        weekdays = sorted(set(config.weekdays))

    floor = now.astimezone(tz).date() - timedelta(days=1)
    # Rough per-weekday quota; sort-then-truncate below fixes the total.
    per_weekday = max_occurrences // len(weekdays) + 1
    occurrences: list[datetime] = []

    for weekday in weekdays:
        current = find_next_weekday(show.first_event_date, weekday)
        if current < floor:
            # Whole intervals only, so biweekly keeps its phase
            current += timedelta(days=((floor - current).days // interval_days) * interval_days)

        collected = 0
        while collected < per_weekday:
            occurrence = combine_date_time(current, show.start_time, tz)
            if occurrence > now:
                occurrences.append(occurrence)
                collected += 1
            current += timedelta(days=interval_days)

    occurrences.sort()
    return occurrences[:max_occurrences]


def _first_scan_month(show, now: datetime, tz) -> tuple[int, int]:
    """FirstEventDate's month, or the current month once that date has passed."""
    if combine_date_time(show.first_event_date, show.start_time, tz) < now:
        local_now = now.astimezone(tz)
        return local_now.year, local_now.month
    return show.first_event_date.year, show.first_event_date.month


def _scan_months(show, max_occurrences: int, now: datetime, tz, resolve_day) -> list[datetime]:
    """Collect future occurrences month by month.

    ``resolve_day(year, month)`` returns the date for that month or None to skip
    it. At most ``2 * max_occurrences`` months are scanned.
    """
    occurrences: list[datetime] = []
    months = iter_months(*_first_scan_month(show, now, tz))
    for _ in range(max_occurrences * 2):
        year, month = next(months)
        target = resolve_day(year, month)
        if target is None:
            continue
        occurrence = combine_date_time(target, show.start_time, tz)
        if occurrence > now:
            occurrences.append(occurrence)
            if len(occurrences) >= max_occurrences:
                break
    return occurrences


def _monthly_weekday_resolver(weekday: int, week_number: int) -> Callable[[int, int], Optional[date]]:
    if week_number == -1:
        return lambda year, month: find_last_weekday_in_month(year, month, weekday)
    return lambda year, month: find_nth_weekday_in_month(year, month, weekday, week_number)


def _monthly_day_resolver(day: int, fallback: MonthlyDayFallback) -> Callable[[int, int], Optional[date]]:
    def resolve(year: int, month: int) -> Optional[date]:
        days_in_month = calendar.monthrange(year, month)[1]
        if day <= days_in_month:
            return date(year, month, day)
        if fallback is MonthlyDayFallback.skip:
            return None
        return date(year, month, days_in_month)

    return resolve


def _monthly(show, max_occurrences: int, now: datetime, tz) -> list[datetime]:
    config = resolve_scheduling_config(show.scheduling_config)

    if config is not None and config.monthly_weekday is not None and config.monthly_week_number is not None:
        resolver = _monthly_weekday_resolver(config.monthly_weekday, config.monthly_week_number)
    elif config is not None and config.monthly_day is not None:
        fallback = config.monthly_day_fallback or MonthlyDayFallback.last_day
        resolver = _monthly_day_resolver(config.monthly_day, MonthlyDayFallback(fallback))
    else:
        # Same calendar day as the first event
        resolver = _monthly_day_resolver(show.first_event_date.day, MonthlyDayFallback.last_day)

    return _scan_months(show, max_occurrences, now, tz, resolver)


_CALCULATORS = {
    RepeatPattern.none: _single,
    RepeatPattern.daily: _daily,
    RepeatPattern.weekly: partial(_weekly, interval_days=WEEKLY_INTERVAL_DAYS),
    RepeatPattern.biweekly: partial(_weekly, interval_days=BIWEEKLY_INTERVAL_DAYS),
    RepeatPattern.monthly: _monthly,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def calculate_next_occurrences(show, max_occurrences: int, now: Optional[datetime] = None) -> list[datetime]:
    """Return up to ``max_occurrences`` future start datetimes, ascending.

    Shows that are not active have no occurrences.
    """
    if ShowStatus(show.status) is not ShowStatus.active or max_occurrences <= 0:
        return []
    now = ensure_aware(now)
    calculator = _CALCULATORS[RepeatPattern(show.repeat_pattern)]
    return calculator(show, max_occurrences, now, show_timezone(show))


def get_next_occurrence(show, now: Optional[datetime] = None) -> Optional[datetime]:
    occurrences = calculate_next_occurrences(show, 1, now=now)
    return occurrences[0] if occurrences else None
