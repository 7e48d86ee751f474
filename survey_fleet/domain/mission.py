"""Mission domain model."""
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from survey_fleet.errors import ValidationError
from .mission_status import MissionStatus, TERMINAL_STATUSES
from .waypoint import Waypoint


class MissionType(str, Enum):
    INSPECTION = "inspection"
    MAPPING = "mapping"
    SURVEILLANCE = "surveillance"


class FlightPattern(str, Enum):
    PERIMETER = "perimeter"
    CROSSHATCH = "crosshatch"
    CUSTOM = "custom"


@dataclass
class MissionParameters:
    """Flight and sensor parameters chosen at planning time."""
    altitude: float = 100.0  # meters
    speed: float = 5.0  # m/s
    overlap_percentage: float = 70.0
    sensor_frequency: float = 2.0  # Hz
    sensors_enabled: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.altitude < 0:
            raise ValidationError(f"altitude must be non-negative, got {self.altitude}")
        if self.speed <= 0:
            raise ValidationError(f"speed must be positive, got {self.speed}")
        if not 0 <= self.overlap_percentage <= 100:
            raise ValidationError(f"overlap_percentage must be between 0 and 100, got {self.overlap_percentage}")

    def to_dict(self) -> dict:
        return {
            "altitude": self.altitude,
            "speed": self.speed,
            "overlap_percentage": self.overlap_percentage,
            "sensor_frequency": self.sensor_frequency,
            "sensors_enabled": list(self.sensors_enabled),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "MissionParameters":
        data = data or {}
        return cls(
            altitude=float(data.get("altitude", 100.0)),
            speed=float(data.get("speed", 5.0)),
            overlap_percentage=float(data.get("overlap_percentage", 70.0)),
            sensor_frequency=float(data.get("sensor_frequency", 2.0)),
            sensors_enabled=list(data.get("sensors_enabled", [])),
        )


@dataclass
class SafetyChecks:
    """Pre-flight safety check outcomes recorded on the mission."""
    no_fly_zone_clear: bool = False
    weather_acceptable: bool = False
    battery_sufficient: bool = False

    @property
    def all_clear(self) -> bool:
        return self.no_fly_zone_clear and self.weather_acceptable and self.battery_sufficient

    def to_dict(self) -> dict:
        return {
            "no_fly_zone_clear": self.no_fly_zone_clear,
            "weather_acceptable": self.weather_acceptable,
            "battery_sufficient": self.battery_sufficient,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SafetyChecks":
        data = data or {}
        return cls(
            no_fly_zone_clear=bool(data.get("no_fly_zone_clear", False)),
            weather_acceptable=bool(data.get("weather_acceptable", False)),
            battery_sufficient=bool(data.get("battery_sufficient", False)),
        )


@dataclass
class Mission:
    """A planned or executing survey flight."""
    name: str
    drone_id: str
    organization_id: str
    mission_type: MissionType
    flight_pattern: FlightPattern
    flight_path: List[Waypoint]
    estimated_duration: float  # minutes
    parameters: MissionParameters = field(default_factory=MissionParameters)
    status: MissionStatus = MissionStatus.PLANNED
    progress: float = 0.0  # percent
    elapsed_time: float = 0.0  # minutes
    site_id: Optional[str] = None
    survey_area: Optional[List[List[float]]] = None  # [lng, lat] pairs
    weather_conditions: Optional[dict] = None
    safety_checks: SafetyChecks = field(default_factory=SafetyChecks)
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate required fields, enums and ranges."""
        missing = [
            name for name in ("name", "drone_id", "organization_id", "mission_type", "flight_pattern")
            if not getattr(self, name)
        ]
        if missing:
            raise ValidationError(f"Missing required mission fields: {', '.join(missing)}")
        try:
            self.mission_type = MissionType(self.mission_type)
            self.flight_pattern = FlightPattern(self.flight_pattern)
            self.status = MissionStatus(self.status)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not self.flight_path:
            raise ValidationError("flight_path must contain at least one waypoint")
        if self.estimated_duration <= 0:
            raise ValidationError(f"estimated_duration must be positive, got {self.estimated_duration}")
        if not 0 <= self.progress <= 100:
            raise ValidationError(f"progress must be between 0 and 100, got {self.progress}")
        if self.elapsed_time < 0:
            raise ValidationError(f"elapsed_time must be non-negative, got {self.elapsed_time}")
        if self.created_at is None:
            self.created_at = datetime.utcnow()

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def waypoint_index(self, progress: float) -> int:
        """Index of the flight path point reached at the given percent complete."""
        index = math.floor((progress / 100.0) * len(self.flight_path))
        return max(0, min(index, len(self.flight_path) - 1))

    def target_waypoint(self, progress: float) -> Waypoint:
        return self.flight_path[self.waypoint_index(progress)]

    def should_complete(self, progress: float, elapsed_time: float) -> bool:
        """Completion rule: full progress or estimated duration used up."""
        return progress >= 100 or elapsed_time >= self.estimated_duration

    def to_dict(self) -> dict:
        """Convert mission to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "drone_id": self.drone_id,
            "organization_id": self.organization_id,
            "site_id": self.site_id,
            "status": self.status.value,
            "mission_type": self.mission_type.value,
            "flight_pattern": self.flight_pattern.value,
            "parameters": self.parameters.to_dict(),
            "flight_path": [wp.to_dict() for wp in self.flight_path],
            "survey_area": self.survey_area,
            "progress": self.progress,
            "estimated_duration": self.estimated_duration,
            "elapsed_time": self.elapsed_time,
            "weather_conditions": self.weather_conditions,
            "safety_checks": self.safety_checks.to_dict(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
