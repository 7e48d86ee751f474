"""Waypoint domain model."""
from dataclasses import dataclass

from survey_fleet.errors import ValidationError


@dataclass
class Waypoint:
    """A point in 3D space: flight path entry or drone location."""
    lat: float
    lng: float
    altitude: float = 0.0  # meters

    def __post_init__(self):
        """Validate waypoint coordinates."""
        if not -90 <= self.lat <= 90:
            raise ValidationError(f"Latitude must be between -90 and 90, got {self.lat}")
        if not -180 <= self.lng <= 180:
            raise ValidationError(f"Longitude must be between -180 and 180, got {self.lng}")
        if self.altitude < 0:
            raise ValidationError(f"Altitude must be non-negative, got {self.altitude}")

    def to_dict(self) -> dict:
        """Convert waypoint to dictionary."""
        return {
            "lat": self.lat,
            "lng": self.lng,
            "altitude": self.altitude,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Waypoint":
        """Create waypoint from dictionary."""
        try:
            return cls(
                lat=float(data["lat"]),
                lng=float(data["lng"]),
                altitude=float(data.get("altitude", 0.0)),
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Invalid waypoint: {data!r}") from e
