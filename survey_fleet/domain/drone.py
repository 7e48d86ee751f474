"""Drone domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from survey_fleet.errors import ValidationError
from .waypoint import Waypoint

DEFAULT_LOCATION = (37.7749, -122.4194)


class DroneStatus(str, Enum):
    AVAILABLE = "available"
    IN_MISSION = "in_mission"
    MAINTENANCE = "maintenance"
    CHARGING = "charging"


def _default_location() -> Waypoint:
    return Waypoint(lat=DEFAULT_LOCATION[0], lng=DEFAULT_LOCATION[1], altitude=0.0)


@dataclass
class Drone:
    """Represents a survey drone registered with an organization."""
    name: str
    model: str
    serial_number: str
    organization_id: str
    status: DroneStatus = DroneStatus.AVAILABLE
    battery_level: float = 100.0  # percent
    location: Waypoint = field(default_factory=_default_location)
    capabilities: List[str] = field(default_factory=list)
    sensors: List[str] = field(default_factory=list)
    max_flight_time: float = 30.0  # minutes
    firmware_version: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate required fields and ranges."""
        missing = [
            name for name in ("name", "model", "serial_number", "organization_id")
            if not getattr(self, name)
        ]
        if missing:
            raise ValidationError(f"Missing required drone fields: {', '.join(missing)}")
        try:
            self.status = DroneStatus(self.status)
        except ValueError as e:
            raise ValidationError(f"Unknown drone status: {self.status}") from e
        if not 0 <= self.battery_level <= 100:
            raise ValidationError(f"battery_level must be between 0 and 100, got {self.battery_level}")
        if self.max_flight_time <= 0:
            raise ValidationError(f"max_flight_time must be positive, got {self.max_flight_time}")
        if self.created_at is None:
            self.created_at = datetime.utcnow()

    @property
    def is_available(self) -> bool:
        return self.status == DroneStatus.AVAILABLE

    def drain_battery(self, amount: float) -> float:
        """Reduce battery level by amount, floored at zero. Returns the new level."""
        self.battery_level = max(self.battery_level - max(amount, 0.0), 0.0)
        return self.battery_level

    def is_battery_critical(self, threshold: float) -> bool:
        return self.battery_level < threshold

    def to_dict(self) -> dict:
        """Convert drone to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "model": self.model,
            "serial_number": self.serial_number,
            "organization_id": self.organization_id,
            "status": self.status.value,
            "battery_level": self.battery_level,
            "location": self.location.to_dict(),
            "capabilities": list(self.capabilities),
            "sensors": list(self.sensors),
            "max_flight_time": self.max_flight_time,
            "firmware_version": self.firmware_version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Drone":
        """Create drone from dictionary."""
        location = data.get("location")
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            model=data.get("model", ""),
            serial_number=data.get("serial_number", ""),
            organization_id=data.get("organization_id", ""),
            status=data.get("status", DroneStatus.AVAILABLE),
            battery_level=float(data.get("battery_level", 100.0)),
            location=Waypoint.from_dict(location) if location else _default_location(),
            capabilities=list(data.get("capabilities", [])),
            sensors=list(data.get("sensors", [])),
            max_flight_time=float(data.get("max_flight_time", 30.0)),
            firmware_version=data.get("firmware_version"),
        )
