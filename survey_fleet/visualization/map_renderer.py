"""Map renderer for the fleet, missions and airspace."""
from typing import Dict, List, Optional, Sequence

import folium
from folium.plugins import AntPath
from shapely.geometry import mapping

from survey_fleet.domain.constraints import NoFlyZone
from survey_fleet.domain.drone import DEFAULT_LOCATION, Drone, DroneStatus
from survey_fleet.domain.mission import Mission

STATUS_COLORS = {
    DroneStatus.AVAILABLE: "green",
    DroneStatus.IN_MISSION: "blue",
    DroneStatus.MAINTENANCE: "orange",
    DroneStatus.CHARGING: "purple",
}

ROUTE_COLORS = ["blue", "red", "green", "purple", "orange", "darkred", "cadetblue", "darkgreen"]


class MapRenderer:
    """Renders drones, flight paths and no-fly zones on interactive maps."""

    def __init__(self, center_lat: float = DEFAULT_LOCATION[0], center_lon: float = DEFAULT_LOCATION[1],
                 zoom_start: int = 12):
        """Initialize map renderer.

        Args:
            center_lat: Center latitude used when there is nothing to show
            center_lon: Center longitude used when there is nothing to show
            zoom_start: Initial zoom level
        """
        self.center_lat = center_lat
        self.center_lon = center_lon
        self.zoom_start = zoom_start

    def _base_map(self, points: Sequence[Sequence[float]]) -> folium.Map:
        if not points:
            return folium.Map(location=[self.center_lat, self.center_lon], zoom_start=self.zoom_start)
        center_lat = sum(p[0] for p in points) / len(points)
        center_lon = sum(p[1] for p in points) / len(points)
        m = folium.Map(location=[center_lat, center_lon], zoom_start=self.zoom_start)
        if len(points) > 1:
            m.fit_bounds([
                [min(p[0] for p in points), min(p[1] for p in points)],
                [max(p[0] for p in points), max(p[1] for p in points)],
            ])
        return m

    def render_fleet(self, drones: List[Drone], zones: Optional[List[NoFlyZone]] = None) -> folium.Map:
        """Render current drone positions colored by status."""
        m = self._base_map([[d.location.lat, d.location.lng] for d in drones])
        for zone in zones or []:
            self._add_no_fly_zone(m, zone)
        for drone in drones:
            self._add_drone(m, drone)
        return m

    def render_mission(self, mission: Mission, drone: Optional[Drone] = None,
                       zones: Optional[List[NoFlyZone]] = None, color: str = "blue") -> folium.Map:
        """Render one mission's flight path, survey area and drone position.

        Args:
            mission: Mission to render
            drone: Assigned drone; its current position is marked when given
            zones: No-fly zones to overlay
            color: Color for the flight path
        """
        points = [[wp.lat, wp.lng] for wp in mission.flight_path]
        if drone is not None:
            points.append([drone.location.lat, drone.location.lng])
        m = self._base_map(points)

        for zone in zones or []:
            self._add_no_fly_zone(m, zone)
        self._add_survey_area(m, mission)
        self._add_mission_to_map(m, mission, color)
        if drone is not None:
            self._add_drone(m, drone)
        return m

    def render_monitoring(self, missions: List[Mission], drones: Dict[str, Drone],
                          zones: Optional[List[NoFlyZone]] = None) -> folium.Map:
        """Render all given missions with their drones on one map.

        Args:
            missions: Missions to show, usually the active ones
            drones: Drones by id
            zones: No-fly zones to overlay
        """
        points = [[wp.lat, wp.lng] for mission in missions for wp in mission.flight_path]
        m = self._base_map(points)

        for zone in zones or []:
            self._add_no_fly_zone(m, zone)
        for idx, mission in enumerate(missions):
            self._add_mission_to_map(m, mission, ROUTE_COLORS[idx % len(ROUTE_COLORS)])
            drone = drones.get(mission.drone_id)
            if drone is not None:
                self._add_drone(m, drone, mission)
        return m

    def _add_mission_to_map(self, m: folium.Map, mission: Mission, color: str):
        path = mission.flight_path
        if len(path) > 1:
            AntPath(
                [[wp.lat, wp.lng] for wp in path],
                color=color,
                weight=4,
                opacity=0.8,
                dash_array=[10, 20],
                delay=1000,
                popup=f"{mission.name} ({mission.progress:.0f}%)",
            ).add_to(m)

        start, finish = path[0], path[-1]
        folium.Marker(
            location=[start.lat, start.lng],
            popup=folium.Popup(
                f"<b>START</b><br>{mission.name}<br>Alt: {start.altitude:.0f}m", max_width=200),
            icon=folium.Icon(color="green", icon="play", prefix="glyphicon"),
            tooltip=f"START - {mission.name}",
        ).add_to(m)
        if len(path) > 1:
            folium.Marker(
                location=[finish.lat, finish.lng],
                popup=folium.Popup(
                    f"<b>FINISH</b><br>{mission.name}<br>Alt: {finish.altitude:.0f}m", max_width=200),
                icon=folium.Icon(color="red", icon="stop", prefix="glyphicon"),
                tooltip=f"FINISH - {mission.name}",
            ).add_to(m)

        target = mission.target_waypoint(mission.progress)
        folium.CircleMarker(
            location=[target.lat, target.lng],
            radius=8,
            popup=f"Target waypoint {mission.waypoint_index(mission.progress) + 1}/{len(path)}",
            color=color,
            fill=True,
            fillColor=color,
            fillOpacity=0.5,
            weight=2,
        ).add_to(m)

    def _add_drone(self, m: folium.Map, drone: Drone, mission: Optional[Mission] = None):
        color = STATUS_COLORS.get(drone.status, "gray")
        popup_text = (
            f"<b>{drone.name}</b><br>{drone.model}<br>"
            f"Status: {drone.status.value}<br>"
            f"Battery: {drone.battery_level:.0f}%<br>"
            f"Alt: {drone.location.altitude:.0f}m"
        )
        if mission is not None:
            popup_text += f"<br>Mission: {mission.name} ({mission.progress:.0f}%)"
        folium.Marker(
            location=[drone.location.lat, drone.location.lng],
            popup=folium.Popup(popup_text, max_width=220),
            icon=folium.Icon(color=color, icon="plane", prefix="glyphicon"),
            tooltip=f"{drone.name}: {drone.battery_level:.0f}%",
        ).add_to(m)

    def _add_survey_area(self, m: folium.Map, mission: Mission):
        if not mission.survey_area:
            return
        folium.Polygon(
            locations=[[lat, lng] for lng, lat in mission.survey_area],
            color="darkgreen",
            weight=2,
            fill=True,
            fill_opacity=0.1,
            tooltip="Survey area",
        ).add_to(m)

    def _add_no_fly_zone(self, m: folium.Map, zone: NoFlyZone):
        """Add no-fly zone to map."""
        limit = f"below {zone.altitude_limit:.0f}m" if zone.altitude_limit is not None else "all altitudes"
        geojson = {
            "type": "Feature",
            "geometry": mapping(zone.geometry),
            "properties": {
                "name": zone.name,
                "type": zone.zone_type.value,
                "active": zone.active,
            },
        }
        fill = "red" if zone.active else "gray"

        folium.GeoJson(
            geojson,
            style_function=lambda feature, fill=fill: {
                "fillColor": fill,
                "color": fill,
                "weight": 2,
                "fillOpacity": 0.3,
            },
            popup=folium.Popup(
                f"<b>{zone.name}</b><br>Type: {zone.zone_type.value}<br>Restricted {limit}",
                max_width=200,
            ),
            tooltip=zone.name,
        ).add_to(m)
