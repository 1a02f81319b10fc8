"""Manual trigger for one horizon maintenance pass."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from showplanner.database import get_db
from showplanner.schemas.maintenance import MaintenanceReportOut
from showplanner.services.maintenance import run_maintenance_pass

router = APIRouter()


@router.post("/run", response_model=MaintenanceReportOut)
def run_maintenance(db: Session = Depends(get_db)):
    return run_maintenance_pass(db)
