"""Flight path generation for survey patterns."""
import math
from typing import List, Optional, Sequence, Tuple

from shapely.geometry import Polygon

from survey_fleet.domain.drone import DEFAULT_LOCATION
from survey_fleet.domain.mission import FlightPattern
from survey_fleet.domain.waypoint import Waypoint
from survey_fleet.errors import ValidationError

PATTERN_STEP = 0.001  # degrees
CROSSHATCH_PASSES = 5
METERS_PER_DEGREE = 111320.0


def _offset_path(base: Tuple[float, float], offsets: Sequence[Tuple[float, float]],
                 altitude: float) -> List[Waypoint]:
    lat, lng = base
    return [Waypoint(lat=lat + d_lat, lng=lng + d_lng, altitude=altitude) for d_lat, d_lng in offsets]


def _survey_crosshatch(survey_area: Sequence[Sequence[float]], altitude: float) -> List[Waypoint]:
    """Parallel east-west passes across the survey area's bounding box."""
    lngs = [point[0] for point in survey_area]
    lats = [point[1] for point in survey_area]
    min_lat, max_lat = min(lats), max(lats)
    min_lng, max_lng = min(lngs), max(lngs)

    path = []
    for i in range(CROSSHATCH_PASSES + 1):
        lat = min_lat + (i / CROSSHATCH_PASSES) * (max_lat - min_lat)
        path.append(Waypoint(lat=lat, lng=min_lng, altitude=altitude))
        path.append(Waypoint(lat=lat, lng=max_lng, altitude=altitude))
    return path


def generate_flight_path(pattern: FlightPattern, altitude: float,
                         base: Optional[Tuple[float, float]] = None,
                         survey_area: Optional[Sequence[Sequence[float]]] = None) -> List[Waypoint]:
    """Generate a default flight path for a pattern.

    Args:
        pattern: Flight pattern
        altitude: Flight altitude for every waypoint (meters)
        base: (lat, lng) starting corner, defaults to the fleet home location
        survey_area: Optional polygon as [lng, lat] pairs

    Returns:
        Ordered list of waypoints
    """
    try:
        pattern = FlightPattern(pattern)
    except ValueError as e:
        raise ValidationError(f"Unknown flight pattern: {pattern}") from e
    base = base or DEFAULT_LOCATION
    step = PATTERN_STEP

    if survey_area and len(survey_area) >= 3 and pattern == FlightPattern.CROSSHATCH:
        return _survey_crosshatch(survey_area, altitude)

    if pattern == FlightPattern.PERIMETER:
        offsets = [(0, 0), (step, 0), (step, step), (0, step), (0, 0)]
    elif pattern == FlightPattern.CROSSHATCH:
        offsets = [
            (0, 0), (2 * step, 0), (2 * step, step / 2),
            (0, step / 2), (0, step), (2 * step, step),
        ]
    else:
        offsets = [(0, 0), (step, step)]
    return _offset_path(base, offsets, altitude)


def parse_flight_path(text: str, altitude: float) -> List[Waypoint]:
    """Parse one "lat, lng" pair per line into waypoints at a fixed altitude.

    Raises:
        ValidationError: if a line is not a valid coordinate pair
    """
    path = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        parts = [part.strip() for part in line.split(",")]
        if len(parts) != 2:
            raise ValidationError(f'Line {line_no}: expected "lat, lng", got {line!r}')
        try:
            lat, lng = float(parts[0]), float(parts[1])
        except ValueError as e:
            raise ValidationError(f"Line {line_no}: invalid coordinates {line!r}") from e
        if math.isnan(lat) or math.isnan(lng):
            raise ValidationError(f"Line {line_no}: invalid coordinates {line!r}")
        path.append(Waypoint(lat=lat, lng=lng, altitude=altitude))
    return path


def survey_area_km2(survey_area: Sequence[Sequence[float]]) -> float:
    """Approximate area of a [lng, lat] polygon in square kilometers."""
    if not survey_area or len(survey_area) < 3:
        return 0.0
    mean_lat = sum(point[1] for point in survey_area) / len(survey_area)
    lng_scale = METERS_PER_DEGREE * math.cos(math.radians(mean_lat))
    projected = Polygon([(p[0] * lng_scale, p[1] * METERS_PER_DEGREE) for p in survey_area])
    return projected.area / 1_000_000.0


def path_length_km(flight_path: Sequence[Waypoint]) -> float:
    """Planar length of a flight path in kilometers."""
    total = 0.0
    for wp1, wp2 in zip(flight_path, flight_path[1:]):
        d_lat = (wp2.lat - wp1.lat) * METERS_PER_DEGREE
        d_lng = (wp2.lng - wp1.lng) * METERS_PER_DEGREE * math.cos(math.radians((wp1.lat + wp2.lat) / 2))
        total += math.hypot(d_lat, d_lng)
    return total / 1000.0
