"""Demo data for a fresh database.

Usage:
    python -m survey_fleet.persistence.seed
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from survey_fleet.config import get_settings
from survey_fleet.domain.drone import Drone
from survey_fleet.domain.mission import Mission, MissionParameters
from survey_fleet.domain.mission_status import MissionStatus
from survey_fleet.domain.organization import Organization, OrganizationSettings
from survey_fleet.domain.waypoint import Waypoint
from survey_fleet.logging_config import setup_logging
from survey_fleet.persistence.db import init_db, session_scope
from survey_fleet.persistence.repositories import (
    DroneRepository, MissionRepository, OrganizationRepository,
)
from survey_fleet.reports.generator import ReportGenerator
from survey_fleet.reports.metrics_source import RandomMetricsSource

logger = logging.getLogger(__name__)

DEMO_DRONES = [
    ("Surveyor-01", "DJI Matrice 300", "available", 85, (37.7749, -122.4194, 0),
     ["mapping", "inspection", "surveillance"], 45),
    ("Inspector-02", "DJI Phantom 4 Pro", "in_mission", 62, (37.7849, -122.4094, 120),
     ["inspection", "photography"], 30),
    ("Mapper-03", "Autel EVO II Pro", "available", 91, (37.7649, -122.4294, 0),
     ["mapping", "thermal_imaging"], 40),
    ("Guardian-04", "DJI Matrice 30T", "maintenance", 0, (37.7549, -122.4394, 0),
     ["surveillance", "thermal_imaging", "night_vision"], 41),
    ("Scout-05", "Parrot ANAFI USA", "available", 78, (37.7949, -122.3994, 0),
     ["surveillance", "inspection"], 32),
]


def _path(points, altitude):
    return [Waypoint(lat, lng, altitude) for lat, lng in points]


def seed_database(db: Session) -> str:
    """Insert a demo organization with drones, missions and one report.

    Returns:
        The new organization id
    """
    organization = OrganizationRepository(db).create(Organization(
        name="FlytBase Corp",
        settings=OrganizationSettings(max_concurrent_missions=10, default_flight_altitude=100),
    ))

    drones = DroneRepository(db)
    drone_ids = []
    for index, (name, model, status, battery, (lat, lng, alt), capabilities, flight_time) in enumerate(DEMO_DRONES):
        drone = drones.create(Drone(
            name=name,
            model=model,
            serial_number=f"SN-{index + 1:04d}",
            organization_id=organization.id,
            status=status,
            battery_level=battery,
            location=Waypoint(lat, lng, alt),
            capabilities=capabilities,
            max_flight_time=flight_time,
        ))
        drone_ids.append(drone.id)

    now = datetime.utcnow()
    missions = MissionRepository(db)
    missions.create(Mission(
        name="Facility Perimeter Inspection",
        drone_id=drone_ids[1],
        organization_id=organization.id,
        status=MissionStatus.IN_PROGRESS,
        mission_type="inspection",
        flight_pattern="perimeter",
        parameters=MissionParameters(altitude=80, speed=5, overlap_percentage=70, sensor_frequency=2),
        flight_path=_path([(37.7849, -122.4094), (37.7859, -122.4084),
                           (37.7869, -122.4094), (37.7859, -122.4104)], 80),
        progress=65,
        estimated_duration=25,
        elapsed_time=16,
        created_at=now - timedelta(minutes=16),
        started_at=now - timedelta(minutes=16),
    ))
    completed = missions.create(Mission(
        name="Site Mapping Survey",
        drone_id=drone_ids[0],
        organization_id=organization.id,
        status=MissionStatus.COMPLETED,
        mission_type="mapping",
        flight_pattern="crosshatch",
        parameters=MissionParameters(altitude=120, speed=8, overlap_percentage=80, sensor_frequency=1),
        flight_path=_path([(37.7749, -122.4194), (37.7759, -122.4184), (37.7769, -122.4194)], 120),
        progress=100,
        estimated_duration=35,
        elapsed_time=33,
        created_at=now - timedelta(hours=2),
        started_at=now - timedelta(hours=2),
        completed_at=now - timedelta(minutes=90),
    ))
    ReportGenerator(RandomMetricsSource(seed=42)).generate(db, completed.id)

    logger.info("Seeded organization %s with %d drones and 2 missions", organization.id, len(drone_ids))
    return organization.id


def main():
    settings = get_settings()
    setup_logging(settings.log_level)
    init_db(settings.database_url)
    with session_scope() as db:
        organization_id = seed_database(db)
    print(f"Organization ID: {organization_id}")
    print("Set ORGANIZATION_ID or send X-Organization-ID to use it.")


if __name__ == '__main__':
    main()
