"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from survey_fleet.api import analytics, drone, mission, report, simulation, site, weather
from survey_fleet.api.deps import get_simulator
from survey_fleet.api.errors import register_exception_handlers
from survey_fleet.config import get_settings
from survey_fleet.logging_config import setup_logging
from survey_fleet.persistence.db import close_db, get_session_factory
from survey_fleet.simulation.runner import SimulationRunner

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    get_session_factory()

    runner = None
    if settings.simulation_autostart:
        runner = SimulationRunner(
            get_simulator(), settings.simulation_interval_seconds, settings.organization_id)
        runner.start()
    app.state.simulation_runner = runner

    yield

    if runner is not None:
        runner.stop()
    close_db()


app = FastAPI(
    title="Survey Fleet",
    description="Drone fleet and survey mission management",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(drone.router)
app.include_router(mission.router)
app.include_router(report.router)
app.include_router(simulation.router)
app.include_router(analytics.router)
app.include_router(site.router)
app.include_router(weather.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Survey Fleet API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
