"""Organization-level fleet and mission statistics."""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_fleet.domain.drone import DroneStatus
from survey_fleet.domain.mission_status import MissionStatus
from survey_fleet.persistence.repositories import DroneRepository, MissionRepository

logger = logging.getLogger(__name__)


def empty_stats() -> dict:
    return {
        "total_drones": 0,
        "active_missions": 0,
        "completed_missions": 0,
        "total_flight_time": 0.0,
        "missions_by_type": {},
        "drones_by_status": {},
        "success_rate": 0.0,
        "average_mission_duration": 0.0,
        "average_battery_level": 0.0,
        "drones_needing_maintenance": 0,
    }


def organization_stats(db: Session, organization_id: Optional[str] = None) -> dict:
    """Dashboard statistics. Returns zeroed values if the store is unreachable."""
    try:
        drones = DroneRepository(db)
        missions = MissionRepository(db)

        by_status = missions.count_by_status(organization_id)
        drones_by_status = drones.count_by_status(organization_id)
        all_missions = missions.list_all(organization_id)
        all_drones = drones.list_all(organization_id)

        total_missions = len(all_missions)
        completed = by_status.get(MissionStatus.COMPLETED.value, 0)
        return {
            "total_drones": len(all_drones),
            "active_missions": by_status.get(MissionStatus.IN_PROGRESS.value, 0)
            + by_status.get(MissionStatus.PLANNED.value, 0),
            "completed_missions": completed,
            "total_flight_time": missions.total_elapsed_time(MissionStatus.COMPLETED, organization_id),
            "missions_by_type": missions.count_by_type(organization_id),
            "drones_by_status": drones_by_status,
            "success_rate": round(completed / total_missions * 100, 1) if total_missions else 0.0,
            "average_mission_duration": round(
                sum(m.elapsed_time for m in all_missions) / total_missions, 1) if total_missions else 0.0,
            "average_battery_level": round(
                sum(d.battery_level for d in all_drones) / len(all_drones), 1) if all_drones else 0.0,
            "drones_needing_maintenance": drones_by_status.get(DroneStatus.MAINTENANCE.value, 0),
        }
    except SQLAlchemyError:
        logger.exception("Error fetching organization stats")
        return empty_stats()
