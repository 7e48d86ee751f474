"""Shared builders for the test suite."""
from datetime import datetime, timedelta
from typing import List, Optional

from survey_fleet.config import Settings
from survey_fleet.domain.drone import Drone, DroneStatus
from survey_fleet.domain.mission import Mission, MissionParameters
from survey_fleet.domain.mission_status import MissionStatus
from survey_fleet.domain.organization import Organization, OrganizationSettings
from survey_fleet.domain.waypoint import Waypoint
from survey_fleet.persistence.repositories import (
    DroneRepository, MissionRepository, OrganizationRepository,
)
from survey_fleet.simulation.random_source import SimulationRandomSource
from survey_fleet.weather.weather_provider import WeatherConditions, WeatherProvider

_created = [datetime(2024, 1, 1)]


def _next_created_at() -> datetime:
    """Strictly increasing creation times so ordering by created_at is stable."""
    _created[0] += timedelta(seconds=1)
    return _created[0]


class FixedRandomSource(SimulationRandomSource):
    """Deterministic simulator draws."""

    def __init__(self, progress: float = 1.0, drain: float = 0.5,
                 jitter: float = 0.0, altitude_jitter: float = 0.0):
        super().__init__(Settings())
        self.progress = progress
        self.drain = drain
        self.jitter = jitter
        self.alt_jitter = altitude_jitter

    def progress_increment(self) -> float:
        return self.progress

    def battery_drain(self) -> float:
        return self.drain

    def location_jitter(self) -> float:
        return self.jitter

    def altitude_jitter(self) -> float:
        return self.alt_jitter


class CalmWeatherProvider(WeatherProvider):
    """Always flyable weather."""

    def get_weather(self, latitude, longitude, timestamp=None):
        return WeatherConditions(
            latitude=latitude,
            longitude=longitude,
            timestamp=timestamp or datetime.utcnow(),
            temperature=20.0,
            wind_speed=5.0,
            wind_direction=90.0,
            visibility=10.0,
            conditions="Clear",
        )


def create_organization(db, name: str = "Test Org", **settings) -> Organization:
    return OrganizationRepository(db).create(
        Organization(name=name, settings=OrganizationSettings(**settings)))


def create_drone(db, organization_id: str, name: str = "Surveyor-01",
                 status: DroneStatus = DroneStatus.AVAILABLE, battery_level: float = 100.0,
                 location: Optional[Waypoint] = None) -> Drone:
    return DroneRepository(db).create(Drone(
        name=name,
        model="DJI Matrice 300",
        serial_number=f"SN-{name}",
        organization_id=organization_id,
        status=status,
        battery_level=battery_level,
        location=location or Waypoint(37.7749, -122.4194, 0.0),
        created_at=_next_created_at(),
    ))


def create_mission(db, organization_id: str, drone_id: str, name: str = "Site Survey",
                   status: MissionStatus = MissionStatus.PLANNED, progress: float = 0.0,
                   elapsed_time: float = 0.0, estimated_duration: float = 30.0,
                   flight_path: Optional[List[Waypoint]] = None,
                   parameters: Optional[MissionParameters] = None) -> Mission:
    return MissionRepository(db).create(Mission(
        name=name,
        drone_id=drone_id,
        organization_id=organization_id,
        mission_type="mapping",
        flight_pattern="custom",
        flight_path=flight_path or [
            Waypoint(37.7749, -122.4194, 100.0),
            Waypoint(37.7759, -122.4184, 100.0),
        ],
        estimated_duration=estimated_duration,
        parameters=parameters or MissionParameters(),
        status=status,
        progress=progress,
        elapsed_time=elapsed_time,
        created_at=_next_created_at(),
        started_at=datetime.utcnow() if status != MissionStatus.PLANNED else None,
    ))
