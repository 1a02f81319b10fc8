"""Pydantic schema for a maintenance pass summary."""
from pydantic import BaseModel


class MaintenanceReportOut(BaseModel):
    shows_checked: int
    shows_extended: int
    events_created: int
    failures: dict[str, str] = {}

    model_config = {"from_attributes": True}
