"""Recurrence scheduling: config validation, occurrence calculation and the horizon."""
from showplanner.scheduling.validator import validate_scheduling_config  # noqa: F401
from showplanner.scheduling.occurrences import (  # noqa: F401
    calculate_next_occurrences,
    get_next_occurrence,
)
from showplanner.scheduling.horizon import get_three_month_horizon  # noqa: F401
