"""Scheduling config validation, run at show create/update time before anything is persisted.

A missing config is valid for every pattern; the calculator falls back to
defaults derived from the show's first event date.
"""
from typing import Any, Mapping, Optional, Union

from showplanner.errors import ConfigValidationError
from showplanner.models.show import MonthlyDayFallback, RepeatPattern
from showplanner.schemas.show import SchedulingConfig

WEEKDAY_RANGE = "0-6 (0=Sunday, 6=Saturday)"
VALID_WEEK_NUMBERS = (1, 2, 3, 4, -1)
MONTHLY_FIELDS = ("monthly_weekday", "monthly_week_number", "monthly_day", "monthly_day_fallback")


def _as_mapping(config: Union[SchedulingConfig, Mapping[str, Any]]) -> dict[str, Any]:
    if isinstance(config, SchedulingConfig):
        return config.model_dump()
    return dict(config)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_weekday(field_name: str, value: Any) -> None:
    if not _is_int(value) or not 0 <= value <= 6:
        raise ConfigValidationError.for_field(
            f"invalid {field_name.replace('_', ' ')} value", field_name, f"in range {WEEKDAY_RANGE}", value,
        )


def validate_scheduling_config(
    pattern: Union[RepeatPattern, str],
    config: Optional[Union[SchedulingConfig, Mapping[str, Any]]],
) -> None:
    """Raise ``ConfigValidationError`` if ``config`` does not fit ``pattern``."""
    if config is None:
        return

    pattern = RepeatPattern(pattern)
    values = _as_mapping(config)

    if pattern in (RepeatPattern.weekly, RepeatPattern.biweekly):
        _validate_weekly(pattern, values)
    elif pattern is RepeatPattern.monthly:
        _validate_monthly(values)
    elif pattern in (RepeatPattern.none, RepeatPattern.daily):
        # Nothing refines these patterns; any config is ignored.
        return
    else:
        raise ValueError(f"Unhandled repeat pattern: {pattern!r}")


def _validate_weekly(pattern: RepeatPattern, values: dict[str, Any]) -> None:
    weekdays = values.get("weekdays")
    if not weekdays:
        raise ConfigValidationError.for_field(
            f"weekdays required for {pattern.value} pattern", "weekdays", "non-empty", weekdays,
        )
    for weekday in weekdays:
        _check_weekday("weekdays", weekday)

    present = [name for name in MONTHLY_FIELDS if values.get(name) is not None]
    if present:
        raise ConfigValidationError.for_field(
            f"monthly fields not allowed for {pattern.value} pattern", present[0], "absent", values[present[0]],
        )


def _validate_monthly(values: dict[str, Any]) -> None:
    weekday = values.get("monthly_weekday")
    week_number = values.get("monthly_week_number")
    day = values.get("monthly_day")

    touches_weekday_group = weekday is not None or week_number is not None
    has_day_group = day is not None

    if touches_weekday_group and has_day_group:
        raise ConfigValidationError.for_field(
            "cannot specify both weekday-based and day-based config",
            "monthly_day", "exclusive with monthly_weekday/monthly_week_number", day,
        )
    if not touches_weekday_group and not has_day_group:
        raise ConfigValidationError.for_field(
            "either weekday-based or day-based config required for monthly pattern",
            "monthly_day", "monthly_day or monthly_weekday+monthly_week_number required",
        )
    if values.get("weekdays"):
        raise ConfigValidationError.for_field(
            "weekdays not allowed for monthly pattern", "weekdays", "absent", values["weekdays"],
        )

    if touches_weekday_group:
        if weekday is None:
            raise ConfigValidationError.for_field(
                "monthly_weekday required with monthly_week_number", "monthly_weekday", "present",
            )
        if week_number is None:
            raise ConfigValidationError.for_field(
                "monthly_week_number required with monthly_weekday", "monthly_week_number", "present",
            )
        _check_weekday("monthly_weekday", weekday)
        if not _is_int(week_number) or week_number not in VALID_WEEK_NUMBERS:
            raise ConfigValidationError.for_field(
                "invalid monthly week number", "monthly_week_number", "one of 1, 2, 3, 4 or -1 (last)", week_number,
            )
        return

    if not _is_int(day) or not 1 <= day <= 31:
        raise ConfigValidationError.for_field("invalid monthly day value", "monthly_day", "in range 1-31", day)

    fallback = values.get("monthly_day_fallback")
    if fallback is not None:
        try:
            MonthlyDayFallback(fallback)
        except ValueError:
            raise ConfigValidationError.for_field(
                "invalid monthly day fallback", "monthly_day_fallback",
                "one of " + ", ".join(f.value for f in MonthlyDayFallback), fallback,
            ) from None
