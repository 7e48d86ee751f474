"""Survey report queries."""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_fleet.domain.report import SurveyReport
from survey_fleet.errors import NotFoundError, PersistenceError
from survey_fleet.persistence.repositories import (
    DroneRepository, MissionRepository, SurveyReportRepository,
)
from survey_fleet.reports.generator import ReportGenerator

logger = logging.getLogger(__name__)


class ReportService:
    """Lists, fetches and generates survey reports."""

    def __init__(self, db: Session, generator: Optional[ReportGenerator] = None):
        self.db = db
        self.generator = generator or ReportGenerator()
        self.reports = SurveyReportRepository(db)

    def list_reports(self, organization_id: Optional[str] = None) -> List[dict]:
        """Reports newest first, each joined with its mission and drone."""
        try:
            reports = self.reports.list_all(organization_id)
            missions = MissionRepository(self.db)
            drones = DroneRepository(self.db)
            result = []
            for report in reports:
                mission = missions.get(report.mission_id)
                if mission is None:
                    continue
                drone = drones.get(mission.drone_id)
                if drone is None:
                    continue
                data = report.to_dict()
                data["mission"] = mission.to_dict()
                data["drone"] = drone.to_dict()
                result.append(data)
            return result
        except SQLAlchemyError:
            logger.exception("Error fetching survey reports")
            return []

    def get_report(self, report_id: str, organization_id: Optional[str] = None) -> SurveyReport:
        report = self.reports.get(report_id)
        if report is None or (organization_id and report.organization_id != organization_id):
            raise NotFoundError(f"Report {report_id} not found")
        return report

    def generate(self, mission_id: str) -> str:
        try:
            return self.generator.generate(self.db, mission_id)
        except SQLAlchemyError as e:
            logger.exception("Error creating survey report")
            raise PersistenceError("Failed to create survey report") from e

    @staticmethod
    def totals(reports: List[dict]) -> dict:
        """Aggregate figures shown above the report list."""
        return {
            "total_reports": len(reports),
            "total_images": sum(r["summary"]["images_captured"] for r in reports),
            "total_area": round(sum(r["summary"]["area_covered"] for r in reports), 2),
            "total_distance": round(sum(r["summary"]["total_distance"] for r in reports), 2),
        }
