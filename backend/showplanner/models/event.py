"""Event ORM model — a materialized, individually editable instance of a show."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, Integer, Boolean, JSON, ForeignKey, CheckConstraint, Index, text,
    Enum as SAEnum,
)
from sqlalchemy.orm import relationship
from showplanner.database import Base, UTCDateTime, utcnow


class EventStatus(str, enum.Enum):
    scheduled = "scheduled"
    live = "live"
    completed = "completed"
    cancelled = "cancelled"
    postponed = "postponed"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("end_datetime > start_datetime", name="ck_events_valid_timing"),
        CheckConstraint("length_minutes IS NULL OR length_minutes > 0", name="ck_events_valid_length"),
        # One live event per show and instant; cancelled rows are kept and ignored.
        Index(
            "uq_events_show_start_live",
            "show_id",
            "start_datetime",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
        Index("ix_events_show_version", "show_id", "show_version"),
    )

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    show_id = Column(String(36), ForeignKey("shows.show_id"), nullable=False, index=True)

    # Overrides; NULL means "use the show's value"
    event_title = Column(String(500), nullable=True)
    event_description = Column(Text, nullable=True)
    length_minutes = Column(Integer, nullable=True)

    start_datetime = Column(UTCDateTime, nullable=False, index=True)
    end_datetime = Column(UTCDateTime, nullable=False)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.scheduled)
    is_customized = Column(Boolean, nullable=False, default=False)
    custom_fields = Column(JSON, nullable=True)

    generated_at = Column(UTCDateTime, nullable=False, default=utcnow)
    last_synced_at = Column(UTCDateTime, nullable=True)
    show_version = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    show = relationship("Show", back_populates="events")
