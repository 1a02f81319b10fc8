"""Append-only audit of event generation runs."""
import uuid
import enum
from sqlalchemy import Column, String, Integer, ForeignKey, Enum as SAEnum
from showplanner.database import Base, UTCDateTime, utcnow


class TriggerReason(str, enum.Enum):
    new_show = "new_show"
    show_update = "show_update"
    maintenance = "maintenance"


class EventGenerationLog(Base):
    __tablename__ = "event_generation_logs"

    log_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    show_id = Column(String(36), ForeignKey("shows.show_id"), nullable=False, index=True)
    generation_date = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    events_generated = Column(Integer, nullable=False)
    generated_until = Column(UTCDateTime, nullable=False)
    trigger_reason = Column(SAEnum(TriggerReason), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
