"""Error kinds raised by the scheduling subsystem.

Only ``ConfigValidationError`` ever reaches an API caller. Generation
inconsistencies and synchronization conflicts are handled internally: the
offending occurrence or insert is skipped, logged, and picked up again on the
next maintenance cycle.
"""
import enum
from dataclasses import asdict, dataclass
from typing import Any, Optional


class ErrorKind(str, enum.Enum):
    config_validation = "config_validation"
    generation_inconsistency = "generation_inconsistency"
    synchronization_conflict = "synchronization_conflict"


@dataclass(frozen=True)
class FieldViolation:
    """One field that failed a constraint."""

    field: str
    constraint: str
    value: Any = None


class SchedulingError(Exception):
    """Base error: a kind plus the list of offending fields."""

    kind: ErrorKind

    def __init__(self, message: str, violations: Optional[list[FieldViolation]] = None):
        self.message = message
        self.violations = list(violations or [])
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "violations": [asdict(v) for v in self.violations],
        }


class ConfigValidationError(SchedulingError):
    """Scheduling config does not fit its repeat pattern. Never retried."""

    kind = ErrorKind.config_validation

    @classmethod
    def for_field(cls, message: str, field_name: str, constraint: str, value: Any = None):
        return cls(message, [FieldViolation(field=field_name, constraint=constraint, value=value)])


class GenerationInconsistency(SchedulingError):
    """An occurrence could not be turned into a valid event."""

    kind = ErrorKind.generation_inconsistency


class SynchronizationConflict(SchedulingError):
    """(show_id, start_datetime) already taken by a live event."""

    kind = ErrorKind.synchronization_conflict
