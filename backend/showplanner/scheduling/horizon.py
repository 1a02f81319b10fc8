"""Rolling generation horizon shared by show creation, updates and maintenance."""
from datetime import datetime, timedelta
from typing import Optional

from showplanner.scheduling.occurrences import ensure_aware

DEFAULT_HORIZON_MONTHS = 3


def _localize(naive: datetime, tz) -> datetime:
    # pytz zones need localize() to pick the offset valid on that date
    if hasattr(tz, "localize"):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def get_three_month_horizon(now: Optional[datetime] = None, months: int = DEFAULT_HORIZON_MONTHS) -> datetime:
    """Last instant of the month ``months`` months after the current one.

    For ``now`` anywhere in January this is the end of April. Computed in
    ``now``'s own timezone, with the UTC offset in effect at the boundary.
    """
    now = ensure_aware(now)
    tz = now.tzinfo
    # First day of the month after the horizon month, then step back.
    month_index = now.month - 1 + months + 1
    year = now.year + month_index // 12
    month = month_index % 12 + 1
    boundary = _localize(datetime(year, month, 1), tz)
    horizon = boundary - timedelta(microseconds=1)
    if hasattr(tz, "normalize"):
        horizon = tz.normalize(horizon)
    return horizon
