"""FastAPI application entry point."""
import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from showplanner.config import settings
from showplanner.database import Base, SessionLocal, engine
from showplanner.errors import ConfigValidationError
from showplanner.routers import events, maintenance, shows
from showplanner.services.maintenance import maintenance_loop

# Import all models so Base.metadata knows about them
import showplanner.models  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Show Planner",
    description="Recurring show scheduling — occurrence calculation and event synchronization",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(shows.router, prefix="/api/shows", tags=["Shows"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(maintenance.router, prefix="/api/maintenance", tags=["Maintenance"])


@app.exception_handler(ConfigValidationError)
async def config_validation_exception_handler(request: Request, exc: ConfigValidationError) -> JSONResponse:
    logger.warning("Scheduling config rejected on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Validation Error", **exc.to_dict()},
    )


@app.on_event("startup")
async def on_startup():
    """Create tables (SQLite dev mode) and start the maintenance loop if enabled."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    if settings.MAINTENANCE_ENABLED:
        app.state.maintenance_task = asyncio.create_task(
            maintenance_loop(SessionLocal, settings.MAINTENANCE_INTERVAL_MINUTES)
        )


@app.on_event("shutdown")
async def on_shutdown():
    task = getattr(app.state, "maintenance_task", None)
    if task is not None:
        task.cancel()


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
