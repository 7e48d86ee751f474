"""Tests for flight path generation and parsing."""
import unittest

from survey_fleet.domain.drone import DEFAULT_LOCATION
from survey_fleet.domain.mission import FlightPattern
from survey_fleet.domain.waypoint import Waypoint
from survey_fleet.errors import ValidationError
from survey_fleet.planning.flight_patterns import (
    generate_flight_path, parse_flight_path, path_length_km, survey_area_km2,
)


class TestFlightPatterns(unittest.TestCase):
    """Test default paths per pattern."""

    def test_perimeter_is_closed_loop(self):
        path = generate_flight_path(FlightPattern.PERIMETER, 100.0)
        self.assertEqual(len(path), 5)
        self.assertEqual(path[0], path[-1])
        self.assertEqual((path[0].lat, path[0].lng), DEFAULT_LOCATION)

    def test_crosshatch(self):
        path = generate_flight_path("crosshatch", 120.0, base=(37.6, -122.2))
        self.assertEqual(len(path), 6)
        self.assertTrue(all(wp.altitude == 120.0 for wp in path))
        self.assertEqual((path[0].lat, path[0].lng), (37.6, -122.2))

    def test_custom_defaults_to_segment(self):
        path = generate_flight_path(FlightPattern.CUSTOM, 50.0)
        self.assertEqual(len(path), 2)

    def test_crosshatch_covers_survey_area(self):
        area = [[-122.42, 37.77], [-122.41, 37.77], [-122.41, 37.78], [-122.42, 37.78]]
        path = generate_flight_path(FlightPattern.CROSSHATCH, 80.0, survey_area=area)

        self.assertEqual(len(path), 12)
        for wp in path:
            self.assertTrue(37.77 - 1e-9 <= wp.lat <= 37.78 + 1e-9)
            self.assertIn(wp.lng, (-122.42, -122.41))
        self.assertAlmostEqual(path[0].lat, 37.77)
        self.assertAlmostEqual(path[-1].lat, 37.78)

    def test_unknown_pattern(self):
        with self.assertRaises(ValidationError):
            generate_flight_path("spiral", 100.0)


class TestFlightPathText(unittest.TestCase):
    """Test "lat, lng" per line parsing."""

    def test_parse(self):
        path = parse_flight_path(" 37.7749, -122.4194 \n\n37.7759,-122.4184\n", 90.0)
        self.assertEqual(path, [Waypoint(37.7749, -122.4194, 90.0), Waypoint(37.7759, -122.4184, 90.0)])

    def test_wrong_arity(self):
        with self.assertRaises(ValidationError):
            parse_flight_path("37.7749, -122.4194, 100", 90.0)

    def test_not_numeric(self):
        with self.assertRaises(ValidationError):
            parse_flight_path("lat, lng", 90.0)

    def test_out_of_range(self):
        with self.assertRaises(ValidationError):
            parse_flight_path("95.0, 10.0", 90.0)


class TestGeometry(unittest.TestCase):

    def test_survey_area_km2(self):
        # 0.01 x 0.01 degrees at the equator is about 1.11 x 1.11 km
        area = [[0.0, 0.0], [0.01, 0.0], [0.01, 0.01], [0.0, 0.01]]
        self.assertAlmostEqual(survey_area_km2(area), 1.2392, places=3)
        self.assertEqual(survey_area_km2([[0.0, 0.0], [1.0, 1.0]]), 0.0)

    def test_path_length_km(self):
        path = [Waypoint(0.0, 0.0), Waypoint(0.01, 0.0), Waypoint(0.01, 0.0)]
        self.assertAlmostEqual(path_length_km(path), 1.1132, places=4)
        self.assertEqual(path_length_km(path[:1]), 0.0)


if __name__ == '__main__':
    unittest.main()
