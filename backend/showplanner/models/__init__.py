"""ORM models. Importing the package registers every table on Base.metadata."""
from showplanner.models.show import Show, RepeatPattern, ShowStatus, MonthlyDayFallback  # noqa: F401
from showplanner.models.event import Event, EventStatus  # noqa: F401
from showplanner.models.generation_log import EventGenerationLog, TriggerReason  # noqa: F401
