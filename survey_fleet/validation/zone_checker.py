"""No-fly zone checker."""
from typing import Dict, List

from shapely.geometry import LineString

from survey_fleet.domain.constraints import NoFlyZone
from survey_fleet.domain.waypoint import Waypoint


class ZoneChecker:
    """Checks flight paths against no-fly zones."""

    def check_flight_path(self, flight_path: List[Waypoint], zones: List[NoFlyZone]) -> List[Dict]:
        """Check if a flight path enters or crosses no-fly zones.

        Args:
            flight_path: Ordered waypoints
            zones: Zones to check against (inactive zones are ignored)

        Returns:
            List of violation dictionaries
        """
        violations = []
        active_zones = [zone for zone in zones if zone.active]

        if not flight_path or not active_zones:
            return violations

        for idx, waypoint in enumerate(flight_path):
            for zone in active_zones:
                if zone.contains(waypoint.lat, waypoint.lng, waypoint.altitude):
                    violations.append({
                        "message": f"Waypoint {idx} is in no-fly zone: {zone.name}",
                        "waypoint_index": idx,
                        "zone": zone.name,
                    })

        for idx in range(len(flight_path) - 1):
            wp1 = flight_path[idx]
            wp2 = flight_path[idx + 1]
            # 2D segment; the altitude band is compared separately
            segment = LineString([(wp1.lng, wp1.lat), (wp2.lng, wp2.lat)])

            for zone in active_zones:
                if not zone.geometry.intersects(segment):
                    continue
                if zone.applies_at(min(wp1.altitude, wp2.altitude)):
                    violations.append({
                        "message": f"Flight segment {idx}-{idx + 1} crosses no-fly zone: {zone.name}",
                        "waypoint_index": idx,
                        "zone": zone.name,
                    })

        return violations

    def is_clear(self, flight_path: List[Waypoint], zones: List[NoFlyZone]) -> bool:
        return not self.check_flight_path(flight_path, zones)
