"""Tests for weather providers and flight-safety verdicts."""
import unittest
from datetime import datetime
from unittest.mock import MagicMock, patch

import requests

from survey_fleet.config import Settings
from survey_fleet.weather.weather_provider import (
    MockWeatherProvider, OpenMeteoWeatherProvider, WeatherConditions, get_weather_provider,
)


def conditions(**overrides) -> WeatherConditions:
    values = dict(
        latitude=37.77, longitude=-122.42, timestamp=datetime(2024, 6, 1, 12),
        temperature=18.0, wind_speed=10.0, wind_direction=225.0, visibility=12.0, conditions="Clear",
    )
    values.update(overrides)
    return WeatherConditions(**values)


class TestWeatherConditions(unittest.TestCase):
    """Test the flight-safety verdict."""

    def test_safe(self):
        self.assertEqual(conditions().is_safe_for_flight(), (True, None))

    def test_wind_limit(self):
        safe, reason = conditions(wind_speed=21.0).is_safe_for_flight(max_wind_speed=20.0)
        self.assertFalse(safe)
        self.assertIn("Wind speed", reason)
        self.assertTrue(conditions(wind_speed=20.0).is_safe_for_flight(max_wind_speed=20.0)[0])

    def test_visibility_limit(self):
        safe, reason = conditions(visibility=3.0).is_safe_for_flight(min_visibility=5.0)
        self.assertFalse(safe)
        self.assertIn("Visibility", reason)

    def test_unflyable_conditions(self):
        self.assertFalse(conditions(conditions="Thunderstorm").is_safe_for_flight()[0])

    def test_wind_direction_label(self):
        self.assertEqual(conditions(wind_direction=225.0).wind_direction_label(), "SW")
        self.assertEqual(conditions(wind_direction=359.0).wind_direction_label(), "N")

    def test_to_dict(self):
        data = conditions(wind_speed=30.0).to_dict(max_wind_speed=20.0)
        self.assertFalse(data["flight_safe"])
        self.assertEqual(data["timestamp"], "2024-06-01T12:00:00")


class TestProviders(unittest.TestCase):
    """Test weather sources."""

    def test_mock_is_seeded(self):
        first = MockWeatherProvider(seed=4).get_weather(37.7, -122.4, datetime(2024, 1, 1))
        second = MockWeatherProvider(seed=4).get_weather(37.7, -122.4, datetime(2024, 1, 1))
        self.assertEqual(first, second)
        self.assertTrue(0 <= first.wind_speed <= 25)
        self.assertTrue(8 <= first.visibility <= 15)

    @patch("survey_fleet.weather.weather_provider.requests.get")
    def test_open_meteo(self, mock_get):
        response = MagicMock()
        response.json.return_value = {
            "hourly": {
                "time": ["2024-06-01T11:00", "2024-06-01T12:00"],
                "temperature_2m": [16.0, 17.5],
                "windspeed_10m": [8.0, 12.0],
                "winddirection_10m": [180.0, 200.0],
                "visibility": [20000.0, 15000.0],
                "weathercode": [0, 2],
                "relativehumidity_2m": [60.0, 65.0],
                "surface_pressure": [1012.0, 1011.0],
            }
        }
        mock_get.return_value = response

        weather = OpenMeteoWeatherProvider().get_weather(37.7, -122.4, datetime(2024, 6, 1, 12, 30))

        self.assertEqual(weather.temperature, 17.5)
        self.assertEqual(weather.wind_speed, 12.0)
        self.assertEqual(weather.visibility, 15.0)
        self.assertEqual(weather.pressure, 1011.0)
        params = mock_get.call_args.kwargs["params"]
        self.assertEqual(params["latitude"], 37.7)
        self.assertEqual(params["windspeed_unit"], "kmh")

    @patch("survey_fleet.weather.weather_provider.requests.get")
    def test_open_meteo_failure(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        self.assertIsNone(OpenMeteoWeatherProvider().get_weather(37.7, -122.4))

    def test_provider_selection(self):
        self.assertIsInstance(get_weather_provider(Settings(weather_provider="open-meteo")),
                              OpenMeteoWeatherProvider)
        self.assertIsInstance(get_weather_provider(Settings()), MockWeatherProvider)
        self.assertIsInstance(get_weather_provider(Settings(weather_provider="bogus")), MockWeatherProvider)


if __name__ == '__main__':
    unittest.main()
