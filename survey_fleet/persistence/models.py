"""SQLAlchemy models for database persistence."""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Float, DateTime, ForeignKey, JSON, Index

from survey_fleet.persistence.db import Base


def new_id() -> str:
    return uuid.uuid4().hex


class OrganizationModel(Base):
    """Organization database model."""
    __tablename__ = "organizations"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    settings = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)


class DroneModel(Base):
    """Drone database model."""
    __tablename__ = "drones"
    __table_args__ = (Index("ix_drones_org_status", "organization_id", "status"),)

    id = Column(String(32), primary_key=True, default=new_id)
    organization_id = Column(String(32), ForeignKey("organizations.id"), nullable=False)
    name = Column(String(255), nullable=False)
    model = Column(String(255), nullable=False)
    serial_number = Column(String(255), nullable=False)
    firmware_version = Column(String(64), nullable=True)
    status = Column(String(32), nullable=False, default="available")
    battery_level = Column(Float, nullable=False, default=100.0)
    location = Column(JSON, nullable=False)  # {lat, lng, altitude}
    capabilities = Column(JSON, nullable=False, default=list)
    sensors = Column(JSON, nullable=False, default=list)
    max_flight_time = Column(Float, nullable=False, default=30.0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)


class MissionModel(Base):
    """Mission database model."""
    __tablename__ = "missions"
    __table_args__ = (Index("ix_missions_drone_status", "drone_id", "status", "created_at"),)

    id = Column(String(32), primary_key=True, default=new_id)
    organization_id = Column(String(32), ForeignKey("organizations.id"), nullable=False)
    drone_id = Column(String(32), ForeignKey("drones.id"), nullable=False)
    site_id = Column(String(32), ForeignKey("sites.id"), nullable=True)
    name = Column(String(255), nullable=False)
    status = Column(String(32), nullable=False, default="planned")
    mission_type = Column(String(32), nullable=False)
    flight_pattern = Column(String(32), nullable=False)
    parameters = Column(JSON, nullable=False)
    flight_path = Column(JSON, nullable=False)  # [{lat, lng, altitude}, ...]
    survey_area = Column(JSON, nullable=True)
    progress = Column(Float, nullable=False, default=0.0)
    estimated_duration = Column(Float, nullable=False)
    elapsed_time = Column(Float, nullable=False, default=0.0)
    weather_conditions = Column(JSON, nullable=True)
    safety_checks = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)


class SurveyReportModel(Base):
    """Survey report database model."""
    __tablename__ = "survey_reports"

    id = Column(String(32), primary_key=True, default=new_id)
    mission_id = Column(String(32), ForeignKey("missions.id"), nullable=False, unique=True, index=True)
    organization_id = Column(String(32), ForeignKey("organizations.id"), nullable=False)
    summary = Column(JSON, nullable=False)
    statistics = Column(JSON, nullable=False)
    data_quality = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class SiteModel(Base):
    """Survey site database model."""
    __tablename__ = "sites"

    id = Column(String(32), primary_key=True, default=new_id)
    organization_id = Column(String(32), ForeignKey("organizations.id"), nullable=False)
    name = Column(String(255), nullable=False)
    location = Column(JSON, nullable=False)  # {lat, lng}
    boundaries = Column(JSON, nullable=False, default=list)
    no_fly_zones = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
