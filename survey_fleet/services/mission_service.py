"""Mission planning and the mission status lifecycle."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_fleet.config import Settings, get_settings
from survey_fleet.domain.constraints import default_no_fly_zones
from survey_fleet.domain.drone import DroneStatus
from survey_fleet.domain.mission import Mission, MissionParameters
from survey_fleet.domain.mission_status import (
    ACTIVE_STATUSES, TERMINAL_STATUSES, MissionStatus, validate_transition,
)
from survey_fleet.domain.waypoint import Waypoint
from survey_fleet.errors import NotFoundError, PersistenceError, PreconditionError, ValidationError
from survey_fleet.persistence.repositories import (
    DroneRepository, MissionRepository, OrganizationRepository, SiteRepository,
)
from survey_fleet.planning.flight_patterns import generate_flight_path, parse_flight_path
from survey_fleet.reports.generator import ReportGenerator
from survey_fleet.services.safety_service import run_safety_checks
from survey_fleet.weather.weather_provider import WeatherProvider, get_weather_provider

logger = logging.getLogger(__name__)

REQUIRED_MISSION_FIELDS = ("name", "drone_id", "mission_type", "flight_pattern")
FLYING_STATUSES = (MissionStatus.IN_PROGRESS, MissionStatus.PAUSED)


class MissionService:
    """Creates missions and owns every change of mission status."""

    def __init__(self, db: Session, report_generator: Optional[ReportGenerator] = None,
                 settings: Optional[Settings] = None,
                 weather_provider: Optional[WeatherProvider] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.report_generator = report_generator or ReportGenerator()
        self.weather_provider = weather_provider or get_weather_provider(self.settings)
        self.missions = MissionRepository(db)
        self.drones = DroneRepository(db)

    # ---- queries ----

    def get_mission(self, mission_id: str, organization_id: Optional[str] = None) -> Mission:
        mission = self.missions.get(mission_id)
        if mission is None or (organization_id and mission.organization_id != organization_id):
            raise NotFoundError(f"Mission {mission_id} not found")
        return mission

    def list_missions(self, organization_id: Optional[str] = None) -> List[dict]:
        """Missions newest first, each with its drone attached."""
        try:
            missions = self.missions.list_all(organization_id)
            drones = {d.id: d for d in self.drones.list_all(organization_id)}
        except SQLAlchemyError:
            logger.exception("Error fetching missions")
            return []
        result = []
        for mission in missions:
            data = mission.to_dict()
            drone = drones.get(mission.drone_id)
            data["drone"] = drone.to_dict() if drone else None
            result.append(data)
        return result

    def list_active_missions(self, organization_id: Optional[str] = None) -> List[Mission]:
        try:
            return self.missions.list_by_status(ACTIVE_STATUSES, organization_id)
        except SQLAlchemyError:
            logger.exception("Error fetching active missions")
            return []

    # ---- planning ----

    def create_mission(self, organization_id: str, data: dict) -> Mission:
        """Plan a new mission for an available drone.

        Args:
            organization_id: Owning organization
            data: Mission fields: name, drone_id, mission_type, flight_pattern and
                optionally parameters, flight_path (list of {lat, lng, altitude}),
                flight_path_text ("lat, lng" per line), survey_area, site_id,
                estimated_duration

        Returns:
            The persisted mission in "planned" status
        """
        missing = [name for name in REQUIRED_MISSION_FIELDS if not data.get(name)]
        if not organization_id:
            missing.insert(0, "organization_id")
        if missing:
            raise ValidationError(f"Missing required mission fields: {', '.join(missing)}")

        drone = self.drones.get(data["drone_id"])
        if drone is None or drone.organization_id != organization_id:
            raise NotFoundError(f"Drone {data['drone_id']} not found")
        if drone.status != DroneStatus.AVAILABLE:
            raise PreconditionError(f"Drone {drone.name} is {drone.status.value}, not available")

        organization = OrganizationRepository(self.db).get(organization_id)
        params = dict(data.get("parameters") or {})
        if organization and "altitude" not in params:
            params["altitude"] = organization.settings.default_flight_altitude
        parameters = MissionParameters.from_dict(params)

        site = None
        if data.get("site_id"):
            site = SiteRepository(self.db).get(data["site_id"])
            if site is None or site.organization_id != organization_id:
                raise NotFoundError(f"Site {data['site_id']} not found")

        flight_path = self._build_flight_path(data, parameters, site)
        zones = site.no_fly_zones if site else default_no_fly_zones()
        weather = self.weather_provider.get_weather(flight_path[0].lat, flight_path[0].lng)
        safety = run_safety_checks(drone, flight_path, zones, weather, self.settings)

        mission = Mission(
            name=data["name"],
            drone_id=drone.id,
            organization_id=organization_id,
            site_id=site.id if site else None,
            mission_type=data["mission_type"],
            flight_pattern=data["flight_pattern"],
            parameters=parameters,
            flight_path=flight_path,
            survey_area=data.get("survey_area"),
            estimated_duration=float(data.get("estimated_duration", 30)),
            weather_conditions=weather.to_dict(
                self.settings.max_wind_speed_kmh, self.settings.min_visibility_km) if weather else None,
            safety_checks=safety,
        )

        try:
            self.missions.create(mission)
        except SQLAlchemyError as e:
            logger.exception("Error creating mission")
            raise PersistenceError("Failed to create mission") from e

        logger.info("Mission %s (%s) planned for drone %s", mission.id, mission.name, drone.id)
        return mission

    def _build_flight_path(self, data: dict, parameters: MissionParameters, site) -> List[Waypoint]:
        if data.get("flight_path"):
            return [Waypoint.from_dict(wp) for wp in data["flight_path"]]
        text = (data.get("flight_path_text") or "").strip()
        if text:
            return parse_flight_path(text, parameters.altitude)
        base = (site.location["lat"], site.location["lng"]) if site else None
        return generate_flight_path(
            data["flight_pattern"], parameters.altitude, base=base, survey_area=data.get("survey_area"))

    # ---- lifecycle ----

    def transition(self, mission_id: str, target: MissionStatus,
                   organization_id: Optional[str] = None) -> Mission:
        """Change a mission's status along an allowed edge.

        Entering in_progress claims the drone and stamps started_at once;
        entering completed or aborted stamps completed_at, releases the drone
        and generates the survey report.

        Raises:
            ValidationError: unknown target status
            NotFoundError: unknown mission
            InvalidTransitionError: edge not in the transition table
            PreconditionError: drone busy or concurrent mission limit reached
            PersistenceError: storage failure
        """
        try:
            target = MissionStatus(target)
        except ValueError as e:
            raise ValidationError(f"Unknown mission status: {target}") from e

        mission = self.get_mission(mission_id, organization_id)
        validate_transition(mission.status, target)

        now = datetime.utcnow()
        started_at = None
        completed_at = None
        if target == MissionStatus.IN_PROGRESS:
            if mission.status == MissionStatus.PLANNED:
                self._check_drone_available(mission)
            self._check_concurrency_limit(mission)
            if mission.started_at is None:
                started_at = now
        elif target in TERMINAL_STATUSES:
            completed_at = now

        try:
            self.missions.update_status(mission.id, target, started_at=started_at, completed_at=completed_at)
            if target == MissionStatus.IN_PROGRESS:
                self.drones.update_status(mission.drone_id, DroneStatus.IN_MISSION)
            elif target in TERMINAL_STATUSES:
                self._release_drone(mission.drone_id)
                self.report_generator.generate(self.db, mission.id)
        except SQLAlchemyError as e:
            logger.exception("Error updating mission status")
            raise PersistenceError("Failed to update mission status") from e

        logger.info("Mission %s: %s -> %s", mission.id, mission.status.value, target.value)
        return self.missions.get(mission.id)

    def _check_drone_available(self, mission: Mission):
        drone = self.drones.get(mission.drone_id)
        if drone is None:
            raise NotFoundError(f"Drone {mission.drone_id} not found")
        if drone.status != DroneStatus.AVAILABLE:
            raise PreconditionError(f"Drone {drone.name} is {drone.status.value}, not available")

    def _check_concurrency_limit(self, mission: Mission):
        """Entering in_progress, from planned or paused, must stay within the organization limit."""
        organization = OrganizationRepository(self.db).get(mission.organization_id)
        if organization is None:
            return
        flying = self.missions.list_by_status([MissionStatus.IN_PROGRESS], mission.organization_id)
        if len(flying) >= organization.settings.max_concurrent_missions:
            raise PreconditionError(
                f"Organization already has {len(flying)} missions in progress "
                f"(limit {organization.settings.max_concurrent_missions})")

    def _release_drone(self, drone_id: str):
        """Return the drone to the available pool unless another mission still flies it."""
        drone = self.drones.get(drone_id)
        if drone is None or drone.status != DroneStatus.IN_MISSION:
            return
        other = self.missions.find_for_drone(drone_id, FLYING_STATUSES)
        if other is not None:
            logger.debug("Drone %s still assigned to mission %s", drone_id, other.id)
            return
        self.drones.update_status(drone_id, DroneStatus.AVAILABLE)
