"""Survey report API endpoints."""
import os
import tempfile

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from survey_fleet.api.deps import get_organization_id
from survey_fleet.export.json_exporter import JSONExporter
from survey_fleet.persistence.db import get_db
from survey_fleet.persistence.repositories import DroneRepository, MissionRepository
from survey_fleet.services.mission_service import MissionService
from survey_fleet.services.report_service import ReportService

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=dict)
def list_reports(organization_id: str = Depends(get_organization_id), db: Session = Depends(get_db)):
    """Reports newest first with their missions and drones, plus totals."""
    reports = ReportService(db).list_reports(organization_id)
    return {"reports": reports, "totals": ReportService.totals(reports)}


@router.get("/{report_id}", response_model=dict)
def get_report(report_id: str, organization_id: str = Depends(get_organization_id),
               db: Session = Depends(get_db)):
    return ReportService(db).get_report(report_id, organization_id).to_dict()


@router.post("/generate/{mission_id}", response_model=dict)
def generate_report(mission_id: str, organization_id: str = Depends(get_organization_id),
                    db: Session = Depends(get_db)):
    """Generate the report of a finished mission; returns the existing one if present."""
    # Scope check: raises NotFoundError for missions of other organizations
    MissionService(db).get_mission(mission_id, organization_id)
    report_id = ReportService(db).generate(mission_id)
    return {"report_id": report_id}


@router.get("/{report_id}/export")
def export_report(report_id: str, background_tasks: BackgroundTasks,
                  organization_id: str = Depends(get_organization_id), db: Session = Depends(get_db)):
    """Export report, with its mission and drone, as JSON file.

    The temporary file is removed once the response has been sent.
    """
    report = ReportService(db).get_report(report_id, organization_id)
    mission = MissionRepository(db).get(report.mission_id)
    drone = DroneRepository(db).get(mission.drone_id) if mission else None

    # Create temporary file
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False, encoding='utf-8') as f:
        temp_path = f.name
    JSONExporter.export_report(
        report, temp_path,
        mission=mission.to_dict() if mission else None,
        drone=drone.to_dict() if drone else None,
    )
    background_tasks.add_task(os.unlink, temp_path)

    return FileResponse(
        temp_path,
        media_type='application/json',
        filename=f"survey_report_{report_id}.json"
    )
