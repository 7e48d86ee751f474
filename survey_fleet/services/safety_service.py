"""Pre-flight safety checks recorded on new missions."""
import logging
from typing import List, Optional

from survey_fleet.config import Settings
from survey_fleet.domain.constraints import NoFlyZone
from survey_fleet.domain.drone import Drone
from survey_fleet.domain.mission import SafetyChecks
from survey_fleet.domain.waypoint import Waypoint
from survey_fleet.validation.zone_checker import ZoneChecker
from survey_fleet.weather.weather_provider import WeatherConditions

logger = logging.getLogger(__name__)


def run_safety_checks(drone: Drone, flight_path: List[Waypoint], zones: List[NoFlyZone],
                      weather: Optional[WeatherConditions], settings: Settings) -> SafetyChecks:
    """Evaluate airspace, weather and battery for a planned flight."""
    violations = ZoneChecker().check_flight_path(flight_path, zones)
    for violation in violations:
        logger.info("Safety check: %s", violation["message"])

    weather_ok = False
    if weather is not None:
        weather_ok, reason = weather.is_safe_for_flight(
            max_wind_speed=settings.max_wind_speed_kmh,
            min_visibility=settings.min_visibility_km,
        )
        if not weather_ok:
            logger.info("Safety check: %s", reason)

    return SafetyChecks(
        no_fly_zone_clear=not violations,
        weather_acceptable=weather_ok,
        battery_sufficient=drone.battery_level >= settings.min_launch_battery,
    )
