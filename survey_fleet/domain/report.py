"""Survey report domain model."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ReportSummary:
    total_distance: float  # km
    area_covered: float  # km^2
    images_captured: int
    flight_duration: float  # minutes
    battery_consumed: float  # percent

    def to_dict(self) -> dict:
        return {
            "total_distance": self.total_distance,
            "area_covered": self.area_covered,
            "images_captured": self.images_captured,
            "flight_duration": self.flight_duration,
            "battery_consumed": self.battery_consumed,
        }


@dataclass
class ReportStatistics:
    average_altitude: float  # meters
    max_speed: float  # m/s
    waypoints_completed: int

    def to_dict(self) -> dict:
        return {
            "average_altitude": self.average_altitude,
            "max_speed": self.max_speed,
            "waypoints_completed": self.waypoints_completed,
        }


@dataclass
class DataQuality:
    image_overlap_percentage: float
    gps_accuracy: float  # meters
    sensor_data_points: int

    def to_dict(self) -> dict:
        return {
            "image_overlap_percentage": self.image_overlap_percentage,
            "gps_accuracy": self.gps_accuracy,
            "sensor_data_points": self.sensor_data_points,
        }


@dataclass
class SurveyReport:
    """Summary of a finished mission. At most one exists per mission."""
    mission_id: str
    organization_id: str
    summary: ReportSummary
    statistics: ReportStatistics
    data_quality: Optional[DataQuality] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.utcnow()

    def to_dict(self) -> dict:
        """Convert report to dictionary."""
        return {
            "id": self.id,
            "mission_id": self.mission_id,
            "organization_id": self.organization_id,
            "summary": self.summary.to_dict(),
            "statistics": self.statistics.to_dict(),
            "data_quality": self.data_quality.to_dict() if self.data_quality else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SurveyReport":
        """Create report from dictionary."""
        quality = data.get("data_quality")
        return cls(
            id=data.get("id"),
            mission_id=data["mission_id"],
            organization_id=data["organization_id"],
            summary=ReportSummary(**data["summary"]),
            statistics=ReportStatistics(**data["statistics"]),
            data_quality=DataQuality(**quality) if quality else None,
        )
