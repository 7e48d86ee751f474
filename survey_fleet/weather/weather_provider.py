"""Weather providers: mock conditions and the Open Meteo API."""
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import requests

from survey_fleet.config import Settings

logger = logging.getLogger(__name__)

UNSAFE_CONDITIONS = ("Heavy Rain", "Thunderstorm", "Snow")
MOCK_CONDITIONS = ("Clear", "Partly Cloudy", "Cloudy", "Light Rain", "Overcast")
COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


@dataclass
class WeatherConditions:
    """Weather conditions at a specific location and time."""
    latitude: float
    longitude: float
    timestamp: datetime
    temperature: float  # Celsius
    wind_speed: float  # km/h
    wind_direction: float  # degrees (0-360)
    visibility: float  # km
    conditions: str
    humidity: float = 0.0  # percentage
    pressure: float = 1013.0  # hPa

    def is_safe_for_flight(self, max_wind_speed: float = 20.0,
                           min_visibility: float = 5.0) -> tuple[bool, Optional[str]]:
        """Check if weather conditions are safe for flight.

        Args:
            max_wind_speed: Maximum acceptable wind speed (km/h)
            min_visibility: Minimum acceptable visibility (km)

        Returns:
            (is_safe, error_message)
        """
        if self.wind_speed > max_wind_speed:
            return False, f"Wind speed {self.wind_speed:.1f} km/h exceeds maximum {max_wind_speed} km/h"
        if self.visibility < min_visibility:
            return False, f"Visibility {self.visibility:.1f} km is below minimum {min_visibility} km"
        if self.conditions in UNSAFE_CONDITIONS:
            return False, f"Conditions '{self.conditions}' are not flyable"
        return True, None

    def wind_direction_label(self) -> str:
        """16-point compass label for the wind direction."""
        index = round((self.wind_direction % 360) / 22.5) % 16
        return COMPASS_POINTS[index]

    def to_dict(self, max_wind_speed: float = 20.0, min_visibility: float = 5.0) -> dict:
        """Snapshot stored on missions, including the flight-safe verdict."""
        safe, reason = self.is_safe_for_flight(max_wind_speed, min_visibility)
        return {
            "temperature": self.temperature,
            "wind_speed": self.wind_speed,
            "wind_direction": self.wind_direction,
            "visibility": self.visibility,
            "conditions": self.conditions,
            "humidity": self.humidity,
            "pressure": self.pressure,
            "flight_safe": safe,
            "reason": reason,
            "timestamp": self.timestamp.isoformat(),
        }


class WeatherProvider:
    """Interface for weather sources."""

    def get_weather(self, latitude: float, longitude: float,
                    timestamp: Optional[datetime] = None) -> Optional[WeatherConditions]:
        raise NotImplementedError


class MockWeatherProvider(WeatherProvider):
    """Random but plausible weather, for demos and tests."""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def get_weather(self, latitude: float, longitude: float,
                    timestamp: Optional[datetime] = None) -> Optional[WeatherConditions]:
        return WeatherConditions(
            latitude=latitude,
            longitude=longitude,
            timestamp=timestamp or datetime.utcnow(),
            temperature=round(15 + self.rng.random() * 20),
            wind_speed=round(self.rng.random() * 25),
            wind_direction=round(self.rng.random() * 360),
            visibility=round(8 + self.rng.random() * 7),
            conditions=self.rng.choice(MOCK_CONDITIONS),
            humidity=round(40 + self.rng.random() * 40),
            pressure=round(1000 + self.rng.random() * 50),
        )


class OpenMeteoWeatherProvider(WeatherProvider):
    """Provider for weather data from Open Meteo API."""

    BASE_URL = "https://api.open-meteo.com/v1/forecast"

    # WMO weather interpretation codes
    WEATHER_CODES = {
        0: "Clear", 1: "Partly Cloudy", 2: "Partly Cloudy", 3: "Overcast",
        45: "Fog", 48: "Fog", 51: "Light Rain", 53: "Light Rain", 55: "Light Rain",
        61: "Light Rain", 63: "Rain", 65: "Heavy Rain", 71: "Snow", 73: "Snow", 75: "Snow",
        80: "Light Rain", 81: "Rain", 82: "Heavy Rain", 95: "Thunderstorm", 96: "Thunderstorm",
        99: "Thunderstorm",
    }

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10.0):
        """Initialize weather provider.

        Args:
            base_url: Base URL for Open Meteo API (default: public API)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout

    def get_weather(self, latitude: float, longitude: float,
                    timestamp: Optional[datetime] = None) -> Optional[WeatherConditions]:
        """Get weather conditions for a location.

        Returns:
            WeatherConditions object, or None if request fails
        """
        if timestamp is None:
            timestamp = datetime.utcnow()

        params = {
            "latitude": latitude,
            "longitude": longitude,
            "hourly": "temperature_2m,relativehumidity_2m,surface_pressure,windspeed_10m,"
                      "winddirection_10m,visibility,weathercode",
            "windspeed_unit": "kmh",
            "timezone": "UTC",
            "forecast_days": 1,
        }

        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            hourly = response.json().get("hourly", {})
        except (requests.RequestException, ValueError) as e:
            logger.error("Error fetching weather data: %s", e)
            return None

        times = hourly.get("time", [])
        target_time_str = timestamp.strftime("%Y-%m-%dT%H:00")
        time_index = times.index(target_time_str) if target_time_str in times else 0

        def value(key: str, default):
            series = hourly.get(key, [])
            if time_index < len(series) and series[time_index] is not None:
                return series[time_index]
            return default

        return WeatherConditions(
            latitude=latitude,
            longitude=longitude,
            timestamp=timestamp,
            temperature=value("temperature_2m", 15.0),
            wind_speed=value("windspeed_10m", 0.0),
            wind_direction=value("winddirection_10m", 0.0),
            visibility=value("visibility", 10000.0) / 1000.0,  # API reports meters
            conditions=self.WEATHER_CODES.get(value("weathercode", 0), "Cloudy"),
            humidity=value("relativehumidity_2m", 0.0),
            pressure=value("surface_pressure", 1013.0),
        )


def get_weather_provider(settings: Settings) -> WeatherProvider:
    """Pick the configured weather provider."""
    if settings.weather_provider == "open-meteo":
        return OpenMeteoWeatherProvider()
    if settings.weather_provider != "mock":
        logger.warning("Unknown WEATHER_PROVIDER %r, using mock weather", settings.weather_provider)
    return MockWeatherProvider()
