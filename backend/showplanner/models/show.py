"""Show ORM model — the recurring template events are generated from."""
import uuid
import enum
from sqlalchemy import Column, String, Date, Time, Integer, JSON, CheckConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from showplanner.database import Base, UTCDateTime, utcnow


class RepeatPattern(str, enum.Enum):
    none = "none"
    daily = "daily"
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"


class ShowStatus(str, enum.Enum):
    active = "active"
    paused = "paused"
    completed = "completed"
    cancelled = "cancelled"


class MonthlyDayFallback(str, enum.Enum):
    last_day = "last_day"
    skip = "skip"


class Show(Base):
    __tablename__ = "shows"
    __table_args__ = (
        CheckConstraint("length_minutes > 0", name="ck_shows_length_positive"),
    )

    show_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    show_name = Column(String(255), nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")  # IANA tz the start time is recorded in
    start_time = Column(Time, nullable=False)
    length_minutes = Column(Integer, nullable=False, default=60)
    first_event_date = Column(Date, nullable=False)
    repeat_pattern = Column(SAEnum(RepeatPattern), nullable=False, default=RepeatPattern.none)
    scheduling_config = Column(JSON, nullable=True)
    status = Column(SAEnum(ShowStatus), nullable=False, default=ShowStatus.active)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    events = relationship("Event", back_populates="show", order_by="Event.start_datetime")
