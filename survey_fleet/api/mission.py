"""Mission API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from survey_fleet.api.deps import get_organization_id, get_weather
from survey_fleet.persistence.db import get_db
from survey_fleet.services.mission_service import MissionService
from survey_fleet.weather.weather_provider import WeatherProvider

router = APIRouter(prefix="/api/missions", tags=["missions"])


class WaypointDTO(BaseModel):
    lat: float
    lng: float
    altitude: float = 0.0


class MissionParametersDTO(BaseModel):
    altitude: Optional[float] = None
    speed: float = 5.0
    overlap_percentage: float = 70.0
    sensor_frequency: float = 2.0
    sensors_enabled: List[str] = []


class MissionDTO(BaseModel):
    name: str
    drone_id: str
    mission_type: str
    flight_pattern: str
    parameters: Optional[MissionParametersDTO] = None
    flight_path: Optional[List[WaypointDTO]] = None
    flight_path_text: Optional[str] = None
    survey_area: Optional[List[List[float]]] = None
    site_id: Optional[str] = None
    estimated_duration: float = Field(30.0, gt=0)


class MissionStatusDTO(BaseModel):
    status: str


def _service(db: Session, weather: WeatherProvider) -> MissionService:
    return MissionService(db, weather_provider=weather)


@router.post("", response_model=dict, status_code=201)
def create_mission(mission_dto: MissionDTO, organization_id: str = Depends(get_organization_id),
                   db: Session = Depends(get_db), weather: WeatherProvider = Depends(get_weather)):
    """Plan a new mission."""
    mission = _service(db, weather).create_mission(organization_id, mission_dto.model_dump(exclude_none=True))
    return mission.to_dict()


@router.get("", response_model=List[dict])
def list_missions(organization_id: str = Depends(get_organization_id), db: Session = Depends(get_db),
                  weather: WeatherProvider = Depends(get_weather)):
    """List missions newest first, each with its drone."""
    return _service(db, weather).list_missions(organization_id)


@router.get("/{mission_id}", response_model=dict)
def get_mission(mission_id: str, organization_id: str = Depends(get_organization_id),
                db: Session = Depends(get_db), weather: WeatherProvider = Depends(get_weather)):
    return _service(db, weather).get_mission(mission_id, organization_id).to_dict()


@router.post("/{mission_id}/status", response_model=dict)
def update_mission_status(mission_id: str, status_dto: MissionStatusDTO,
                          organization_id: str = Depends(get_organization_id),
                          db: Session = Depends(get_db), weather: WeatherProvider = Depends(get_weather)):
    """Move a mission along the status lifecycle."""
    mission = _service(db, weather).transition(mission_id, status_dto.status, organization_id)
    return mission.to_dict()
