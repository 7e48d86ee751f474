"""No-fly zone and site domain models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from shapely.geometry import Point, Polygon

from survey_fleet.errors import ValidationError


class ZoneType(str, Enum):
    AIRPORT = "airport"
    MILITARY = "military"
    RESTRICTED = "restricted"
    TEMPORARY = "temporary"


def _polygon(coordinates: List[dict]) -> Polygon:
    """Build a shapely polygon from {lat, lng} points (x = lng, y = lat)."""
    return Polygon([(c["lng"], c["lat"]) for c in coordinates])


@dataclass
class NoFlyZone:
    """Represents a restricted airspace polygon."""
    name: str
    coordinates: List[dict]  # [{lat, lng}, ...]
    zone_type: ZoneType = ZoneType.RESTRICTED
    altitude_limit: Optional[float] = None  # meters; zone spans ground to this altitude
    active: bool = True
    description: Optional[str] = None

    def __post_init__(self):
        if len(self.coordinates) < 3:
            raise ValidationError(f"No-fly zone '{self.name}' needs at least 3 points")
        try:
            self.zone_type = ZoneType(self.zone_type)
        except ValueError as e:
            raise ValidationError(f"Unknown zone type: {self.zone_type}") from e
        self.geometry = _polygon(self.coordinates)

    def applies_at(self, altitude: float) -> bool:
        return self.altitude_limit is None or altitude <= self.altitude_limit

    def contains(self, lat: float, lng: float, altitude: float) -> bool:
        """Check if a point at given altitude is within the zone."""
        if not self.active or not self.applies_at(altitude):
            return False
        point = Point(lng, lat)
        return self.geometry.contains(point) or self.geometry.touches(point)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.zone_type.value,
            "coordinates": [dict(c) for c in self.coordinates],
            "altitude_limit": self.altitude_limit,
            "active": self.active,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NoFlyZone":
        return cls(
            name=data.get("name", "unnamed"),
            coordinates=[{"lat": float(c["lat"]), "lng": float(c["lng"])} for c in data.get("coordinates", [])],
            zone_type=data.get("type", ZoneType.RESTRICTED),
            altitude_limit=data.get("altitude_limit"),
            active=data.get("active", True),
            description=data.get("description"),
        )


DEFAULT_NO_FLY_ZONES: List[dict] = [
    {
        "name": "San Francisco International Airport",
        "type": "airport",
        "coordinates": [
            {"lat": 37.6213, "lng": -122.379},
            {"lat": 37.6213, "lng": -122.365},
            {"lat": 37.605, "lng": -122.365},
            {"lat": 37.605, "lng": -122.379},
        ],
        "altitude_limit": 150,
        "active": True,
        "description": "Major international airport - strict no-fly zone",
    },
    {
        "name": "Military Installation",
        "type": "military",
        "coordinates": [
            {"lat": 37.79, "lng": -122.45},
            {"lat": 37.79, "lng": -122.44},
            {"lat": 37.78, "lng": -122.44},
            {"lat": 37.78, "lng": -122.45},
        ],
        "active": True,
        "description": "Restricted military airspace",
    },
    {
        "name": "Temporary Event Restriction",
        "type": "temporary",
        "coordinates": [
            {"lat": 37.77, "lng": -122.41},
            {"lat": 37.77, "lng": -122.4},
            {"lat": 37.76, "lng": -122.4},
            {"lat": 37.76, "lng": -122.41},
        ],
        "active": True,
        "description": "Special event - temporary flight restriction",
    },
]


def default_no_fly_zones() -> List[NoFlyZone]:
    return [NoFlyZone.from_dict(z) for z in DEFAULT_NO_FLY_ZONES]


@dataclass
class Site:
    """A survey site with its boundary and local no-fly zones."""
    name: str
    organization_id: str
    location: dict  # {lat, lng}
    boundaries: List[dict] = field(default_factory=list)
    no_fly_zones: List[NoFlyZone] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.name or not self.organization_id:
            raise ValidationError("Site name and organization_id are required")
        if "lat" not in self.location or "lng" not in self.location:
            raise ValidationError("Site location needs lat and lng")
        if self.created_at is None:
            self.created_at = datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "organization_id": self.organization_id,
            "location": dict(self.location),
            "boundaries": [dict(b) for b in self.boundaries],
            "no_fly_zones": [z.to_dict() for z in self.no_fly_zones],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
