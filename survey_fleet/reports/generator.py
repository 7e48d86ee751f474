"""Survey report generation for finished missions."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from survey_fleet.domain.mission import Mission
from survey_fleet.domain.report import DataQuality, ReportStatistics, ReportSummary, SurveyReport
from survey_fleet.errors import NotFoundError, PreconditionError
from survey_fleet.persistence.repositories import MissionRepository, SurveyReportRepository
from survey_fleet.reports.metrics_source import RandomMetricsSource

logger = logging.getLogger(__name__)

MAX_SPEED_FACTOR = 1.2


class ReportGenerator:
    """Creates exactly one survey report per terminal mission."""

    def __init__(self, metrics_source=None):
        """Initialize generator.

        Args:
            metrics_source: Object providing the sampled metrics
                (defaults to RandomMetricsSource)
        """
        self.metrics = metrics_source or RandomMetricsSource()

    def build_report(self, mission: Mission) -> SurveyReport:
        """Derive report fields from the mission and the metrics source."""
        return SurveyReport(
            mission_id=mission.id,
            organization_id=mission.organization_id,
            summary=ReportSummary(
                total_distance=self.metrics.total_distance(),
                area_covered=self.metrics.area_covered(),
                images_captured=self.metrics.images_captured(),
                flight_duration=mission.elapsed_time,
                battery_consumed=self.metrics.battery_consumed(),
            ),
            statistics=ReportStatistics(
                average_altitude=mission.parameters.altitude,
                max_speed=round(mission.parameters.speed * MAX_SPEED_FACTOR, 2),
                waypoints_completed=len(mission.flight_path),
            ),
            data_quality=DataQuality(
                image_overlap_percentage=self.metrics.image_overlap_percentage(),
                gps_accuracy=self.metrics.gps_accuracy(),
                sensor_data_points=self.metrics.sensor_data_points(),
            ),
        )

    def generate(self, db: Session, mission_id: str) -> str:
        """Create the survey report for a mission, or return the existing one.

        Args:
            db: Database session
            mission_id: Mission identity

        Returns:
            Report identity

        Raises:
            NotFoundError: if the mission does not exist
            PreconditionError: if the mission is not completed or aborted
        """
        mission = MissionRepository(db).get(mission_id)
        if mission is None:
            raise NotFoundError(f"Mission {mission_id} not found")
        if not mission.is_terminal:
            raise PreconditionError(
                f"Mission {mission_id} is {mission.status.value}; reports need a completed or aborted mission")

        reports = SurveyReportRepository(db)
        existing = reports.get_by_mission(mission_id)
        if existing is not None:
            return existing.id

        try:
            report = reports.create(self.build_report(mission))
        except IntegrityError:
            # Another writer inserted the report first
            existing: Optional[SurveyReport] = reports.get_by_mission(mission_id)
            if existing is None:
                raise
            return existing.id

        logger.info("Survey report %s created for mission %s", report.id, mission_id)
        return report.id
