"""Organization domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from survey_fleet.errors import ValidationError


@dataclass
class OrganizationSettings:
    max_concurrent_missions: int = 10
    default_flight_altitude: float = 100.0  # meters
    safety_buffer_distance: float = 50.0  # meters
    max_wind_speed: float = 20.0  # km/h

    def to_dict(self) -> dict:
        return {
            "max_concurrent_missions": self.max_concurrent_missions,
            "default_flight_altitude": self.default_flight_altitude,
            "safety_buffer_distance": self.safety_buffer_distance,
            "max_wind_speed": self.max_wind_speed,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "OrganizationSettings":
        defaults = cls()
        data = data or {}
        return cls(
            max_concurrent_missions=int(data.get("max_concurrent_missions", defaults.max_concurrent_missions)),
            default_flight_altitude=float(data.get("default_flight_altitude", defaults.default_flight_altitude)),
            safety_buffer_distance=float(data.get("safety_buffer_distance", defaults.safety_buffer_distance)),
            max_wind_speed=float(data.get("max_wind_speed", defaults.max_wind_speed)),
        )


@dataclass
class Organization:
    """Operator organization owning drones, missions and sites."""
    name: str
    settings: OrganizationSettings = field(default_factory=OrganizationSettings)
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.name:
            raise ValidationError("Organization name is required")
        if self.created_at is None:
            self.created_at = datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "settings": self.settings.to_dict(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
