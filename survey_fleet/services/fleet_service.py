"""Drone registration and operator-driven drone updates."""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_fleet.domain.drone import Drone, DroneStatus
from survey_fleet.errors import NotFoundError, PersistenceError, PreconditionError, ValidationError
from survey_fleet.persistence.repositories import DroneRepository

logger = logging.getLogger(__name__)

# in_mission is set and cleared by mission status transitions only
OPERATOR_STATUSES = (DroneStatus.AVAILABLE, DroneStatus.MAINTENANCE, DroneStatus.CHARGING)


class FleetService:
    """Operations on the drone fleet of an organization."""

    def __init__(self, db: Session):
        self.db = db
        self.drones = DroneRepository(db)

    def register_drone(self, organization_id: str, data: dict) -> Drone:
        """Add a drone to the fleet. New drones always start available."""
        drone = Drone.from_dict({
            **data,
            "organization_id": organization_id,
            "status": DroneStatus.AVAILABLE,
        })
        try:
            self.drones.create(drone)
        except SQLAlchemyError as e:
            logger.exception("Error adding drone")
            raise PersistenceError("Failed to add drone") from e
        logger.info("Drone %s (%s) registered", drone.id, drone.name)
        return drone

    def list_drones(self, organization_id: Optional[str] = None) -> List[Drone]:
        try:
            return self.drones.list_all(organization_id)
        except SQLAlchemyError:
            logger.exception("Error fetching drones")
            return []

    def list_available(self, organization_id: Optional[str] = None) -> List[Drone]:
        try:
            return self.drones.list_by_status(DroneStatus.AVAILABLE, organization_id)
        except SQLAlchemyError:
            logger.exception("Error fetching available drones")
            return []

    def get_drone(self, drone_id: str, organization_id: Optional[str] = None) -> Drone:
        drone = self.drones.get(drone_id)
        if drone is None or (organization_id and drone.organization_id != organization_id):
            raise NotFoundError(f"Drone {drone_id} not found")
        return drone

    def set_status(self, drone_id: str, status: DroneStatus,
                   organization_id: Optional[str] = None) -> Drone:
        """Operator status change: available, maintenance or charging."""
        try:
            status = DroneStatus(status)
        except ValueError as e:
            raise ValidationError(f"Unknown drone status: {status}") from e
        if status not in OPERATOR_STATUSES:
            raise PreconditionError("in_mission is assigned by starting a mission")

        drone = self.get_drone(drone_id, organization_id)
        if drone.status == DroneStatus.IN_MISSION:
            raise PreconditionError(f"Drone {drone.name} is flying a mission")

        try:
            self.drones.update_status(drone_id, status)
        except SQLAlchemyError as e:
            logger.exception("Error updating drone status")
            raise PersistenceError("Failed to update drone status") from e
        logger.info("Drone %s: %s -> %s", drone_id, drone.status.value, status.value)
        return self.drones.get(drone_id)

    def recharge(self, drone_id: str, battery_level: float = 100.0,
                 organization_id: Optional[str] = None) -> Drone:
        """Set the battery after charging and return the drone to service."""
        if not 0 <= battery_level <= 100:
            raise ValidationError(f"battery_level must be between 0 and 100, got {battery_level}")
        drone = self.get_drone(drone_id, organization_id)
        if drone.status == DroneStatus.IN_MISSION:
            raise PreconditionError(f"Drone {drone.name} is flying a mission")
        try:
            self.drones.update_status(drone_id, DroneStatus.AVAILABLE, battery_level=battery_level)
        except SQLAlchemyError as e:
            logger.exception("Error recharging drone")
            raise PersistenceError("Failed to update drone status") from e
        return self.drones.get(drone_id)
