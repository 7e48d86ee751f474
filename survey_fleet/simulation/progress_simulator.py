"""Periodic mission progress simulation.

Each tick advances every in-progress mission along its flight path, moves the
drone to the matching waypoint with a little positional noise, drains the
battery of flying drones and triggers the completion and low-battery abort
transitions. Entities are written one by one; a failure on one mission or
drone is logged and does not stop the others.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from survey_fleet.config import Settings, get_settings
from survey_fleet.domain.drone import Drone, DroneStatus
from survey_fleet.domain.mission import Mission
from survey_fleet.domain.mission_status import MissionStatus
from survey_fleet.domain.waypoint import Waypoint
from survey_fleet.persistence.db import get_session_factory
from survey_fleet.persistence.repositories import DroneRepository, MissionRepository
from survey_fleet.reports.generator import ReportGenerator
from survey_fleet.services.mission_service import FLYING_STATUSES, MissionService
from survey_fleet.simulation.random_source import SimulationRandomSource

logger = logging.getLogger(__name__)

TICK_MINUTES = 1.0


@dataclass
class TickResult:
    """Outcome of one simulator invocation."""
    missions_advanced: int = 0
    missions_completed: List[str] = field(default_factory=list)
    missions_aborted: List[str] = field(default_factory=list)
    drones_drained: int = 0
    errors: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def success(self) -> bool:
        return not self.skipped and not self.errors

    def to_dict(self) -> dict:
        return {
            "skipped": self.skipped,
            "missions_advanced": self.missions_advanced,
            "missions_completed": list(self.missions_completed),
            "missions_aborted": list(self.missions_aborted),
            "drones_drained": self.drones_drained,
            "errors": list(self.errors),
        }


class ProgressSimulator:
    """Advances in-progress missions once per tick."""

    def __init__(self, session_factory=None,
                 random_source: Optional[SimulationRandomSource] = None,
                 report_generator: Optional[ReportGenerator] = None,
                 settings: Optional[Settings] = None):
        """Initialize simulator.

        Args:
            session_factory: Callable returning a new Session (default: the app's factory)
            random_source: Source of progress/battery/jitter draws
            report_generator: Used when a tick ends a mission
            settings: Thresholds and bounds (default: environment settings)
        """
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.random = random_source or SimulationRandomSource(self.settings)
        self.report_generator = report_generator or ReportGenerator()
        self._lock = threading.Lock()

    def tick(self, organization_id: Optional[str] = None) -> TickResult:
        """Run one simulation step.

        Overlapping calls are not queued: if a tick is still running the new
        one returns immediately with skipped=True.

        Args:
            organization_id: Limit the tick to one organization (default: all)
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("Previous simulation tick still running; skipping")
            return TickResult(skipped=True)

        try:
            factory = self.session_factory or get_session_factory()
            db = factory()
            try:
                result = TickResult()
                self._advance_missions(db, result, organization_id)
                self._drain_batteries(db, result, organization_id)
            finally:
                db.close()
        finally:
            self._lock.release()

        logger.debug(
            "Tick: %d advanced, %d completed, %d aborted, %d drones drained, %d errors",
            result.missions_advanced, len(result.missions_completed),
            len(result.missions_aborted), result.drones_drained, len(result.errors),
        )
        return result

    def _service(self, db: Session) -> MissionService:
        return MissionService(db, report_generator=self.report_generator, settings=self.settings)

    # ---- phase 1: missions ----

    def _advance_missions(self, db: Session, result: TickResult, organization_id: Optional[str]):
        missions = MissionRepository(db).list_by_status([MissionStatus.IN_PROGRESS], organization_id)
        service = self._service(db)

        for mission in missions:
            try:
                self._advance_mission(db, service, mission, result)
            except Exception as e:
                db.rollback()
                logger.exception("Error simulating mission %s", mission.id)
                result.errors.append(f"mission {mission.id}: {e}")

    def _advance_mission(self, db: Session, service: MissionService, mission: Mission, result: TickResult):
        new_progress = min(mission.progress + self.random.progress_increment(), 100.0)
        new_elapsed = mission.elapsed_time + TICK_MINUTES

        MissionRepository(db).update_progress(mission.id, new_progress, new_elapsed)
        result.missions_advanced += 1

        target = mission.target_waypoint(new_progress)
        try:
            DroneRepository(db).update_location(mission.drone_id, self._jitter(target))
        except Exception as e:
            db.rollback()
            logger.exception("Error updating location of drone %s", mission.drone_id)
            result.errors.append(f"drone {mission.drone_id}: {e}")

        if mission.should_complete(new_progress, new_elapsed):
            service.transition(mission.id, MissionStatus.COMPLETED)
            result.missions_completed.append(mission.id)

    def _jitter(self, target: Waypoint) -> Waypoint:
        """Target position plus bounded motion noise, kept within valid ranges."""
        return Waypoint(
            lat=max(-90.0, min(90.0, target.lat + self.random.location_jitter())),
            lng=max(-180.0, min(180.0, target.lng + self.random.location_jitter())),
            altitude=max(0.0, target.altitude + self.random.altitude_jitter()),
        )

    # ---- phase 2: batteries ----

    def _drain_batteries(self, db: Session, result: TickResult, organization_id: Optional[str]):
        drones = DroneRepository(db).list_by_status(DroneStatus.IN_MISSION, organization_id)
        service = self._service(db)

        for drone in drones:
            try:
                self._drain_battery(db, service, drone, result)
            except Exception as e:
                db.rollback()
                logger.exception("Error simulating battery of drone %s", drone.id)
                result.errors.append(f"drone {drone.id}: {e}")

    def _drain_battery(self, db: Session, service: MissionService, drone: Drone, result: TickResult):
        mission = MissionRepository(db).find_for_drone(drone.id, FLYING_STATUSES)
        if mission is not None and mission.status == MissionStatus.PAUSED:
            # Paused flights are held; nothing moves and nothing drains
            return

        level = drone.drain_battery(self.random.battery_drain())
        DroneRepository(db).update_battery(drone.id, level)
        result.drones_drained += 1

        if drone.is_battery_critical(self.settings.low_battery_threshold) and mission is not None:
            logger.warning(
                "Drone %s battery at %.1f%%; aborting mission %s", drone.id, level, mission.id)
            service.transition(mission.id, MissionStatus.ABORTED)
            result.missions_aborted.append(mission.id)
