"""Survey site API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from survey_fleet.api.deps import get_organization_id
from survey_fleet.persistence.db import get_db
from survey_fleet.services.organization_service import OrganizationService

router = APIRouter(prefix="/api/sites", tags=["sites"])


class PointDTO(BaseModel):
    lat: float
    lng: float


class NoFlyZoneDTO(BaseModel):
    name: str
    coordinates: List[PointDTO]
    type: str = "restricted"
    altitude_limit: Optional[float] = None
    active: bool = True
    description: Optional[str] = None


class SiteDTO(BaseModel):
    name: str
    location: PointDTO
    boundaries: List[PointDTO] = []
    no_fly_zones: List[NoFlyZoneDTO] = []


@router.get("", response_model=List[dict])
def list_sites(organization_id: str = Depends(get_organization_id), db: Session = Depends(get_db)):
    return [s.to_dict() for s in OrganizationService(db).list_sites(organization_id)]


@router.post("", response_model=dict, status_code=201)
def create_site(site_dto: SiteDTO, organization_id: str = Depends(get_organization_id),
                db: Session = Depends(get_db)):
    """Add a survey site with its local no-fly zones."""
    return OrganizationService(db).create_site(organization_id, site_dto.model_dump()).to_dict()
