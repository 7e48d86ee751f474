"""Application configuration loaded from environment variables."""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PATH = Path(__file__).parent.parent / ".env"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings for the fleet service."""
    database_url: str = "sqlite:///./survey_fleet.db"
    organization_id: Optional[str] = None  # explicit tenant context
    log_level: str = "INFO"

    # Progress simulation
    simulation_interval_seconds: float = 5.0
    simulation_autostart: bool = False
    low_battery_threshold: float = 15.0  # percent
    max_progress_increment: float = 5.0  # percent per tick
    max_battery_drain: float = 2.0  # percent per tick
    location_jitter_degrees: float = 0.0001
    altitude_jitter_meters: float = 5.0

    # Safety checks
    min_launch_battery: float = 25.0  # percent
    weather_provider: str = "mock"  # mock, open-meteo
    max_wind_speed_kmh: float = 20.0
    min_visibility_km: float = 5.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment, reading .env first if present."""
        if ENV_PATH.exists():
            load_dotenv(dotenv_path=ENV_PATH)

        defaults = cls()
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            organization_id=os.getenv("ORGANIZATION_ID") or None,
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            simulation_interval_seconds=_env_float(
                "SIMULATION_INTERVAL_SECONDS", defaults.simulation_interval_seconds),
            simulation_autostart=_env_bool("SIMULATION_AUTOSTART", defaults.simulation_autostart),
            low_battery_threshold=_env_float("LOW_BATTERY_THRESHOLD", defaults.low_battery_threshold),
            max_progress_increment=_env_float("MAX_PROGRESS_INCREMENT", defaults.max_progress_increment),
            max_battery_drain=_env_float("MAX_BATTERY_DRAIN", defaults.max_battery_drain),
            location_jitter_degrees=_env_float("LOCATION_JITTER_DEGREES", defaults.location_jitter_degrees),
            altitude_jitter_meters=_env_float("ALTITUDE_JITTER_METERS", defaults.altitude_jitter_meters),
            min_launch_battery=_env_float("MIN_LAUNCH_BATTERY", defaults.min_launch_battery),
            weather_provider=os.getenv("WEATHER_PROVIDER", defaults.weather_provider).lower(),
            max_wind_speed_kmh=_env_float("MAX_WIND_SPEED_KMH", defaults.max_wind_speed_kmh),
            min_visibility_km=_env_float("MIN_VISIBILITY_KM", defaults.min_visibility_km),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get process-wide settings."""
    return Settings.from_env()
