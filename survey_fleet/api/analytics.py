"""Fleet analytics API endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from survey_fleet.api.deps import get_organization_id
from survey_fleet.persistence.db import get_db
from survey_fleet.services.analytics_service import organization_stats

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/stats", response_model=dict)
def get_stats(organization_id: str = Depends(get_organization_id), db: Session = Depends(get_db)):
    return organization_stats(db, organization_id)
