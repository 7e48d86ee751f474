"""Shared FastAPI dependencies: sessions, organization context, simulator."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from survey_fleet.config import get_settings
from survey_fleet.errors import NotFoundError, ValidationError
from survey_fleet.persistence.db import get_db
from survey_fleet.services.organization_service import OrganizationService
from survey_fleet.simulation.progress_simulator import ProgressSimulator
from survey_fleet.weather.weather_provider import WeatherProvider, get_weather_provider


def get_organization_id(
    x_organization_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> str:
    """Organization from the X-Organization-ID header, else ORGANIZATION_ID."""
    organization_id = x_organization_id or get_settings().organization_id
    try:
        organization = OrganizationService(db).resolve(organization_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return organization.id


def get_optional_organization_id(x_organization_id: Optional[str] = Header(None)) -> Optional[str]:
    return x_organization_id or get_settings().organization_id


@lru_cache
def get_simulator() -> ProgressSimulator:
    """Process-wide simulator; the HTTP trigger and the background runner share its tick guard."""
    return ProgressSimulator(settings=get_settings())


@lru_cache
def get_weather() -> WeatherProvider:
    return get_weather_provider(get_settings())
