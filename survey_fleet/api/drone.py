"""Drone fleet API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from survey_fleet.api.deps import get_organization_id
from survey_fleet.persistence.db import get_db
from survey_fleet.services.fleet_service import FleetService

router = APIRouter(prefix="/api/drones", tags=["drones"])


class LocationDTO(BaseModel):
    lat: float
    lng: float
    altitude: float = 0.0


class DroneDTO(BaseModel):
    name: str
    model: str
    serial_number: str
    battery_level: float = Field(100.0, ge=0, le=100)
    location: Optional[LocationDTO] = None
    capabilities: List[str] = []
    sensors: List[str] = []
    max_flight_time: float = Field(30.0, gt=0)
    firmware_version: Optional[str] = None


class DroneStatusDTO(BaseModel):
    status: str
    battery_level: Optional[float] = Field(None, ge=0, le=100)


@router.get("", response_model=List[dict])
def list_drones(available: bool = False, organization_id: str = Depends(get_organization_id),
                db: Session = Depends(get_db)):
    """List the organization's drones, optionally only available ones."""
    service = FleetService(db)
    drones = service.list_available(organization_id) if available else service.list_drones(organization_id)
    return [d.to_dict() for d in drones]


@router.post("", response_model=dict, status_code=201)
def register_drone(drone_dto: DroneDTO, organization_id: str = Depends(get_organization_id),
                   db: Session = Depends(get_db)):
    """Register a new drone."""
    drone = FleetService(db).register_drone(organization_id, drone_dto.model_dump(exclude_none=True))
    return drone.to_dict()


@router.get("/{drone_id}", response_model=dict)
def get_drone(drone_id: str, organization_id: str = Depends(get_organization_id),
              db: Session = Depends(get_db)):
    return FleetService(db).get_drone(drone_id, organization_id).to_dict()


@router.patch("/{drone_id}/status", response_model=dict)
def update_drone_status(drone_id: str, status_dto: DroneStatusDTO,
                        organization_id: str = Depends(get_organization_id),
                        db: Session = Depends(get_db)):
    """Operator status change (available, maintenance, charging).

    A battery level sent with status "available" records a completed recharge.
    """
    service = FleetService(db)
    if status_dto.status == "available" and status_dto.battery_level is not None:
        drone = service.recharge(drone_id, status_dto.battery_level, organization_id)
    else:
        drone = service.set_status(drone_id, status_dto.status, organization_id)
    return drone.to_dict()
