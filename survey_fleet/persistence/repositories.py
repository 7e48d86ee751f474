"""Repository pattern for database operations."""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from survey_fleet.domain.constraints import NoFlyZone, Site
from survey_fleet.domain.drone import Drone, DroneStatus
from survey_fleet.domain.mission import Mission, MissionParameters, SafetyChecks
from survey_fleet.domain.mission_status import ACTIVE_STATUSES, MissionStatus
from survey_fleet.domain.organization import Organization, OrganizationSettings
from survey_fleet.domain.report import DataQuality, ReportStatistics, ReportSummary, SurveyReport
from survey_fleet.domain.waypoint import Waypoint
from survey_fleet.persistence.models import (
    DroneModel, MissionModel, OrganizationModel, SiteModel, SurveyReportModel, new_id,
)


class BaseRepository:
    """Shared session handling for repositories."""

    def __init__(self, db: Session):
        """Initialize repository.

        Args:
            db: Database session
        """
        self.db = db

    def _commit(self):
        """Commit the pending write, rolling the session back if it fails."""
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class OrganizationRepository(BaseRepository):
    """Repository for organization operations."""

    def create(self, organization: Organization) -> Organization:
        model = OrganizationModel(
            id=organization.id or new_id(),
            name=organization.name,
            settings=organization.settings.to_dict(),
            created_at=organization.created_at,
        )
        self.db.add(model)
        self._commit()
        organization.id = model.id
        return organization

    def get(self, organization_id: str) -> Optional[Organization]:
        model = self.db.get(OrganizationModel, organization_id)
        return self.to_domain(model) if model else None

    def list_all(self) -> List[Organization]:
        return [self.to_domain(m) for m in self.db.query(OrganizationModel).order_by(OrganizationModel.created_at)]

    @staticmethod
    def to_domain(model: OrganizationModel) -> Organization:
        return Organization(
            id=model.id,
            name=model.name,
            settings=OrganizationSettings.from_dict(model.settings),
            created_at=model.created_at,
        )


class DroneRepository(BaseRepository):
    """Repository for drone operations."""

    def create(self, drone: Drone) -> Drone:
        """Insert a drone and return it with its new id."""
        model = DroneModel(
            id=drone.id or new_id(),
            organization_id=drone.organization_id,
            name=drone.name,
            model=drone.model,
            serial_number=drone.serial_number,
            firmware_version=drone.firmware_version,
            status=drone.status.value,
            battery_level=drone.battery_level,
            location=drone.location.to_dict(),
            capabilities=list(drone.capabilities),
            sensors=list(drone.sensors),
            max_flight_time=drone.max_flight_time,
            created_at=drone.created_at,
        )
        self.db.add(model)
        self._commit()
        drone.id = model.id
        return drone

    def get_by_id(self, drone_id: str) -> Optional[DroneModel]:
        return self.db.get(DroneModel, drone_id)

    def get(self, drone_id: str) -> Optional[Drone]:
        model = self.get_by_id(drone_id)
        return self.to_domain(model) if model else None

    def list_all(self, organization_id: Optional[str] = None) -> List[Drone]:
        query = self.db.query(DroneModel)
        if organization_id:
            query = query.filter(DroneModel.organization_id == organization_id)
        return [self.to_domain(m) for m in query.order_by(DroneModel.created_at)]

    def list_by_status(self, status: DroneStatus,
                       organization_id: Optional[str] = None) -> List[Drone]:
        query = self.db.query(DroneModel).filter(DroneModel.status == DroneStatus(status).value)
        if organization_id:
            query = query.filter(DroneModel.organization_id == organization_id)
        return [self.to_domain(m) for m in query.order_by(DroneModel.created_at)]

    def update_status(self, drone_id: str, status: DroneStatus,
                      battery_level: Optional[float] = None) -> bool:
        """Set drone status (and optionally battery). Returns False if the drone is missing."""
        model = self.get_by_id(drone_id)
        if model is None:
            return False
        model.status = DroneStatus(status).value
        if battery_level is not None:
            model.battery_level = battery_level
        model.updated_at = datetime.utcnow()
        self._commit()
        return True

    def update_battery(self, drone_id: str, battery_level: float) -> bool:
        model = self.get_by_id(drone_id)
        if model is None:
            return False
        model.battery_level = battery_level
        model.updated_at = datetime.utcnow()
        self._commit()
        return True

    def update_location(self, drone_id: str, location: Waypoint) -> bool:
        model = self.get_by_id(drone_id)
        if model is None:
            return False
        model.location = location.to_dict()
        model.updated_at = datetime.utcnow()
        self._commit()
        return True

    def count(self, organization_id: Optional[str] = None) -> int:
        query = self.db.query(func.count(DroneModel.id))
        if organization_id:
            query = query.filter(DroneModel.organization_id == organization_id)
        return query.scalar() or 0

    def count_by_status(self, organization_id: Optional[str] = None) -> Dict[str, int]:
        query = self.db.query(DroneModel.status, func.count(DroneModel.id))
        if organization_id:
            query = query.filter(DroneModel.organization_id == organization_id)
        return {status: count for status, count in query.group_by(DroneModel.status)}

    @staticmethod
    def to_domain(model: DroneModel) -> Drone:
        """Convert database model to domain object."""
        return Drone(
            id=model.id,
            organization_id=model.organization_id,
            name=model.name,
            model=model.model,
            serial_number=model.serial_number,
            firmware_version=model.firmware_version,
            status=DroneStatus(model.status),
            battery_level=model.battery_level,
            location=Waypoint.from_dict(model.location),
            capabilities=list(model.capabilities or []),
            sensors=list(model.sensors or []),
            max_flight_time=model.max_flight_time,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


class MissionRepository(BaseRepository):
    """Repository for mission operations."""

    def create(self, mission: Mission) -> Mission:
        """Insert a mission and return it with its new id."""
        model = MissionModel(
            id=mission.id or new_id(),
            organization_id=mission.organization_id,
            drone_id=mission.drone_id,
            site_id=mission.site_id,
            name=mission.name,
            status=mission.status.value,
            mission_type=mission.mission_type.value,
            flight_pattern=mission.flight_pattern.value,
            parameters=mission.parameters.to_dict(),
            flight_path=[wp.to_dict() for wp in mission.flight_path],
            survey_area=mission.survey_area,
            progress=mission.progress,
            estimated_duration=mission.estimated_duration,
            elapsed_time=mission.elapsed_time,
            weather_conditions=mission.weather_conditions,
            safety_checks=mission.safety_checks.to_dict(),
            created_at=mission.created_at,
            started_at=mission.started_at,
            completed_at=mission.completed_at,
        )
        self.db.add(model)
        self._commit()
        mission.id = model.id
        return mission

    def get_by_id(self, mission_id: str) -> Optional[MissionModel]:
        return self.db.get(MissionModel, mission_id)

    def get(self, mission_id: str) -> Optional[Mission]:
        model = self.get_by_id(mission_id)
        return self.to_domain(model) if model else None

    def list_all(self, organization_id: Optional[str] = None) -> List[Mission]:
        """List missions, newest first."""
        query = self.db.query(MissionModel)
        if organization_id:
            query = query.filter(MissionModel.organization_id == organization_id)
        return [self.to_domain(m) for m in query.order_by(MissionModel.created_at.desc())]

    def list_by_status(self, statuses: Iterable[MissionStatus],
                       organization_id: Optional[str] = None) -> List[Mission]:
        values = [MissionStatus(s).value for s in statuses]
        query = self.db.query(MissionModel).filter(MissionModel.status.in_(values))
        if organization_id:
            query = query.filter(MissionModel.organization_id == organization_id)
        return [self.to_domain(m) for m in query.order_by(MissionModel.created_at)]

    def find_for_drone(self, drone_id: str,
                       statuses: Iterable[MissionStatus] = ACTIVE_STATUSES) -> Optional[Mission]:
        """Most recent mission of the drone in one of the given statuses."""
        values = [MissionStatus(s).value for s in statuses]
        model = (
            self.db.query(MissionModel)
            .filter(MissionModel.drone_id == drone_id, MissionModel.status.in_(values))
            .order_by(MissionModel.created_at.desc())
            .first()
        )
        return self.to_domain(model) if model else None

    def update_progress(self, mission_id: str, progress: float, elapsed_time: float) -> bool:
        model = self.get_by_id(mission_id)
        if model is None:
            return False
        model.progress = progress
        model.elapsed_time = elapsed_time
        model.updated_at = datetime.utcnow()
        self._commit()
        return True

    def update_status(self, mission_id: str, status: MissionStatus,
                      started_at: Optional[datetime] = None,
                      completed_at: Optional[datetime] = None) -> bool:
        """Write status and timestamps. Only the mission service should call this."""
        model = self.get_by_id(mission_id)
        if model is None:
            return False
        model.status = MissionStatus(status).value
        if started_at is not None:
            model.started_at = started_at
        if completed_at is not None:
            model.completed_at = completed_at
        model.updated_at = datetime.utcnow()
        self._commit()
        return True

    def count_by_status(self, organization_id: Optional[str] = None) -> Dict[str, int]:
        query = self.db.query(MissionModel.status, func.count(MissionModel.id))
        if organization_id:
            query = query.filter(MissionModel.organization_id == organization_id)
        return {status: count for status, count in query.group_by(MissionModel.status)}

    def count_by_type(self, organization_id: Optional[str] = None) -> Dict[str, int]:
        query = self.db.query(MissionModel.mission_type, func.count(MissionModel.id))
        if organization_id:
            query = query.filter(MissionModel.organization_id == organization_id)
        return {mission_type: count for mission_type, count in query.group_by(MissionModel.mission_type)}

    def total_elapsed_time(self, status: MissionStatus,
                           organization_id: Optional[str] = None) -> float:
        query = self.db.query(func.coalesce(func.sum(MissionModel.elapsed_time), 0.0)).filter(
            MissionModel.status == MissionStatus(status).value)
        if organization_id:
            query = query.filter(MissionModel.organization_id == organization_id)
        return float(query.scalar() or 0.0)

    @staticmethod
    def to_domain(model: MissionModel) -> Mission:
        """Convert database model to domain object."""
        return Mission(
            id=model.id,
            name=model.name,
            drone_id=model.drone_id,
            organization_id=model.organization_id,
            site_id=model.site_id,
            status=MissionStatus(model.status),
            mission_type=model.mission_type,
            flight_pattern=model.flight_pattern,
            parameters=MissionParameters.from_dict(model.parameters),
            flight_path=[Waypoint.from_dict(wp) for wp in model.flight_path],
            survey_area=model.survey_area,
            progress=model.progress,
            estimated_duration=model.estimated_duration,
            elapsed_time=model.elapsed_time,
            weather_conditions=model.weather_conditions,
            safety_checks=SafetyChecks.from_dict(model.safety_checks),
            created_at=model.created_at,
            started_at=model.started_at,
            completed_at=model.completed_at,
            updated_at=model.updated_at,
        )


class SurveyReportRepository(BaseRepository):
    """Repository for survey report operations."""

    def create(self, report: SurveyReport) -> SurveyReport:
        model = SurveyReportModel(
            id=report.id or new_id(),
            mission_id=report.mission_id,
            organization_id=report.organization_id,
            summary=report.summary.to_dict(),
            statistics=report.statistics.to_dict(),
            data_quality=report.data_quality.to_dict() if report.data_quality else None,
            created_at=report.created_at,
        )
        self.db.add(model)
        self._commit()
        report.id = model.id
        return report

    def get(self, report_id: str) -> Optional[SurveyReport]:
        model = self.db.get(SurveyReportModel, report_id)
        return self.to_domain(model) if model else None

    def get_by_mission(self, mission_id: str) -> Optional[SurveyReport]:
        model = self.db.query(SurveyReportModel).filter(SurveyReportModel.mission_id == mission_id).first()
        return self.to_domain(model) if model else None

    def count_for_mission(self, mission_id: str) -> int:
        return self.db.query(func.count(SurveyReportModel.id)).filter(
            SurveyReportModel.mission_id == mission_id).scalar() or 0

    def list_all(self, organization_id: Optional[str] = None) -> List[SurveyReport]:
        """List reports, newest first."""
        query = self.db.query(SurveyReportModel)
        if organization_id:
            query = query.filter(SurveyReportModel.organization_id == organization_id)
        return [self.to_domain(m) for m in query.order_by(SurveyReportModel.created_at.desc())]

    @staticmethod
    def to_domain(model: SurveyReportModel) -> SurveyReport:
        return SurveyReport(
            id=model.id,
            mission_id=model.mission_id,
            organization_id=model.organization_id,
            summary=ReportSummary(**model.summary),
            statistics=ReportStatistics(**model.statistics),
            data_quality=DataQuality(**model.data_quality) if model.data_quality else None,
            created_at=model.created_at,
        )


class SiteRepository(BaseRepository):
    """Repository for survey site operations."""

    def create(self, site: Site) -> Site:
        model = SiteModel(
            id=site.id or new_id(),
            organization_id=site.organization_id,
            name=site.name,
            location=dict(site.location),
            boundaries=[dict(b) for b in site.boundaries],
            no_fly_zones=[z.to_dict() for z in site.no_fly_zones],
            created_at=site.created_at,
        )
        self.db.add(model)
        self._commit()
        site.id = model.id
        return site

    def get(self, site_id: str) -> Optional[Site]:
        model = self.db.get(SiteModel, site_id)
        return self.to_domain(model) if model else None

    def list_all(self, organization_id: Optional[str] = None) -> List[Site]:
        query = self.db.query(SiteModel)
        if organization_id:
            query = query.filter(SiteModel.organization_id == organization_id)
        return [self.to_domain(m) for m in query.order_by(SiteModel.created_at)]

    @staticmethod
    def to_domain(model: SiteModel) -> Site:
        return Site(
            id=model.id,
            name=model.name,
            organization_id=model.organization_id,
            location=dict(model.location),
            boundaries=list(model.boundaries or []),
            no_fly_zones=[NoFlyZone.from_dict(z) for z in model.no_fly_zones or []],
            created_at=model.created_at,
        )
