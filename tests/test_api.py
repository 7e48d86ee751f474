"""Tests for the HTTP API."""
import os
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from survey_fleet.api.deps import get_simulator, get_weather
from survey_fleet.config import get_settings
from survey_fleet.domain.drone import DroneStatus
from survey_fleet.domain.mission_status import MissionStatus
from survey_fleet.main import app
from survey_fleet.persistence.db import close_db, init_db
from survey_fleet.simulation.progress_simulator import ProgressSimulator
from fixtures import (
    CalmWeatherProvider, FixedRandomSource, create_drone, create_mission, create_organization,
)


class BrokenSimulator:
    def tick(self, organization_id=None):
        raise RuntimeError("database unavailable")


class StoreFailureSource(FixedRandomSource):
    def progress_increment(self) -> float:
        raise RuntimeError("store write failed")


class APITestCase(unittest.TestCase):

    def setUp(self):
        self.session_factory = init_db("sqlite://")
        self.db = self.session_factory()
        self.org = create_organization(self.db)
        self.headers = {"X-Organization-ID": self.org.id}
        self.simulator = ProgressSimulator(
            session_factory=self.session_factory, random_source=FixedRandomSource(progress=2.0))
        app.dependency_overrides[get_simulator] = lambda: self.simulator
        app.dependency_overrides[get_weather] = CalmWeatherProvider
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.db.close()
        close_db()

    def refresh(self):
        self.db.expire_all()


class TestSimulationAPI(APITestCase):
    """Test the simulate-progress trigger."""

    def test_simulate_progress(self):
        drone = create_drone(self.db, self.org.id, status=DroneStatus.IN_MISSION)
        mission = create_mission(self.db, self.org.id, drone.id, status=MissionStatus.IN_PROGRESS)

        response = self.client.post("/api/simulate-progress")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["missions_advanced"], 1)
        mission_response = self.client.get(f"/api/missions/{mission.id}", headers=self.headers)
        self.assertEqual(mission_response.json()["progress"], 2.0)

    def test_simulate_progress_without_missions(self):
        response = self.client.post("/api/simulate-progress", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

    def test_simulate_progress_failure(self):
        app.dependency_overrides[get_simulator] = BrokenSimulator

        response = self.client.post("/api/simulate-progress")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to simulate progress"})

    def test_simulate_progress_with_mission_error(self):
        drone = create_drone(self.db, self.org.id, status=DroneStatus.IN_MISSION)
        mission = create_mission(self.db, self.org.id, drone.id, status=MissionStatus.IN_PROGRESS)
        self.simulator.random = StoreFailureSource()

        response = self.client.post("/api/simulate-progress", headers=self.headers)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertFalse(body["skipped"])
        self.assertEqual(len(body["errors"]), 1)
        self.assertIn(mission.id, body["errors"][0])

    def test_simulate_progress_while_tick_running(self):
        self.simulator._lock.acquire()
        try:
            response = self.client.post("/api/simulate-progress", headers=self.headers)
        finally:
            self.simulator._lock.release()

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertTrue(body["skipped"])


class TestOrganizationContext(APITestCase):
    """Test tenant resolution."""

    def setUp(self):
        super().setUp()
        get_settings.cache_clear()

    def tearDown(self):
        get_settings.cache_clear()
        super().tearDown()

    def test_missing_organization(self):
        with patch.dict(os.environ, {"ORGANIZATION_ID": ""}):
            get_settings.cache_clear()
            response = self.client.get("/api/drones")
        self.assertEqual(response.status_code, 400)

    def test_unknown_organization(self):
        response = self.client.get("/api/drones", headers={"X-Organization-ID": "missing"})
        self.assertEqual(response.status_code, 404)

    def test_organization_from_settings(self):
        create_drone(self.db, self.org.id)
        with patch.dict(os.environ, {"ORGANIZATION_ID": self.org.id}):
            get_settings.cache_clear()
            response = self.client.get("/api/drones")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 1)


class TestFleetAPI(APITestCase):
    """Test drone endpoints."""

    def test_register_and_list(self):
        response = self.client.post("/api/drones", headers=self.headers, json={
            "name": "Scout-05",
            "model": "Parrot ANAFI USA",
            "serial_number": "PAR-0005",
            "battery_level": 78,
            "capabilities": ["surveillance"],
        })
        self.assertEqual(response.status_code, 201)
        drone_id = response.json()["id"]
        self.assertEqual(response.json()["status"], "available")

        drones = self.client.get("/api/drones", headers=self.headers).json()
        self.assertEqual([d["id"] for d in drones], [drone_id])
        self.assertEqual(self.client.get(f"/api/drones/{drone_id}", headers=self.headers).status_code, 200)

    def test_invalid_body(self):
        response = self.client.post("/api/drones", headers=self.headers, json={"name": "Incomplete"})
        self.assertEqual(response.status_code, 422)

    def test_unknown_drone(self):
        response = self.client.get("/api/drones/missing", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())

    def test_status_update(self):
        drone = create_drone(self.db, self.org.id, status=DroneStatus.CHARGING, battery_level=20.0)

        response = self.client.patch(f"/api/drones/{drone.id}/status", headers=self.headers,
                                     json={"status": "available", "battery_level": 100})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["battery_level"], 100.0)

        response = self.client.patch(f"/api/drones/{drone.id}/status", headers=self.headers,
                                     json={"status": "in_mission"})
        self.assertEqual(response.status_code, 409)

        available = self.client.get("/api/drones?available=true", headers=self.headers).json()
        self.assertEqual(len(available), 1)


class TestMissionAPI(APITestCase):
    """Test mission planning and lifecycle endpoints."""

    def setUp(self):
        super().setUp()
        self.drone = create_drone(self.db, self.org.id)

    def create(self, **overrides):
        payload = {
            "name": "Facility Perimeter Inspection",
            "drone_id": self.drone.id,
            "mission_type": "inspection",
            "flight_pattern": "perimeter",
            "parameters": {"altitude": 80, "speed": 5},
            "estimated_duration": 25,
        }
        payload.update(overrides)
        return self.client.post("/api/missions", headers=self.headers, json=payload)

    def test_create_and_get(self):
        response = self.create()
        self.assertEqual(response.status_code, 201)
        mission = response.json()
        self.assertEqual(mission["status"], "planned")
        self.assertEqual(len(mission["flight_path"]), 5)
        self.assertEqual(mission["parameters"]["altitude"], 80.0)

        missions = self.client.get("/api/missions", headers=self.headers).json()
        self.assertEqual(missions[0]["drone"]["id"], self.drone.id)

    def test_lifecycle(self):
        mission_id = self.create().json()["id"]
        url = f"/api/missions/{mission_id}/status"

        self.assertEqual(self.client.post(url, headers=self.headers, json={"status": "in_progress"}).status_code, 200)
        self.assertEqual(self.client.get(f"/api/drones/{self.drone.id}", headers=self.headers).json()["status"],
                         "in_mission")
        self.assertEqual(self.client.post(url, headers=self.headers, json={"status": "paused"}).status_code, 200)
        response = self.client.post(url, headers=self.headers, json={"status": "aborted"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "aborted")

        response = self.client.post(url, headers=self.headers, json={"status": "in_progress"})
        self.assertEqual(response.status_code, 409)

        reports = self.client.get("/api/reports", headers=self.headers).json()
        self.assertEqual(reports["totals"]["total_reports"], 1)
        self.assertEqual(reports["reports"][0]["mission_id"], mission_id)

    def test_unknown_status_value(self):
        mission_id = self.create().json()["id"]
        response = self.client.post(f"/api/missions/{mission_id}/status", headers=self.headers,
                                    json={"status": "landed"})
        self.assertEqual(response.status_code, 422)

    def test_busy_drone(self):
        self.client.patch(f"/api/drones/{self.drone.id}/status", headers=self.headers,
                          json={"status": "maintenance"})
        self.assertEqual(self.create().status_code, 409)

    def test_unknown_mission(self):
        response = self.client.get("/api/missions/missing", headers=self.headers)
        self.assertEqual(response.status_code, 404)


class TestReportAPI(APITestCase):
    """Test report endpoints."""

    def setUp(self):
        super().setUp()
        self.drone = create_drone(self.db, self.org.id)

    def test_generate_and_export(self):
        mission = create_mission(self.db, self.org.id, self.drone.id, status=MissionStatus.COMPLETED,
                                 progress=100.0, elapsed_time=20.0)

        first = self.client.post(f"/api/reports/generate/{mission.id}", headers=self.headers)
        second = self.client.post(f"/api/reports/generate/{mission.id}", headers=self.headers)
        self.assertEqual(first.status_code, 200)
        report_id = first.json()["report_id"]
        self.assertEqual(second.json()["report_id"], report_id)

        report = self.client.get(f"/api/reports/{report_id}", headers=self.headers).json()
        self.assertEqual(report["summary"]["flight_duration"], 20.0)

        export = self.client.get(f"/api/reports/{report_id}/export", headers=self.headers)
        self.assertEqual(export.status_code, 200)
        document = export.json()
        self.assertEqual(document["id"], report_id)
        self.assertEqual(document["mission"]["id"], mission.id)
        self.assertEqual(document["drone"]["id"], self.drone.id)

    def test_export_removes_temporary_file(self):
        mission = create_mission(self.db, self.org.id, self.drone.id, status=MissionStatus.COMPLETED,
                                 progress=100.0, elapsed_time=20.0)
        report_id = self.client.post(f"/api/reports/generate/{mission.id}", headers=self.headers).json()["report_id"]

        with patch("os.unlink", wraps=os.unlink) as unlink:
            export = self.client.get(f"/api/reports/{report_id}/export", headers=self.headers)

        self.assertEqual(export.status_code, 200)
        self.assertEqual(export.json()["id"], report_id)
        removed = [c.args[0] for c in unlink.call_args_list if str(c.args[0]).endswith(".json")]
        self.assertEqual(len(removed), 1)
        self.assertFalse(os.path.exists(removed[0]))

    def test_generate_for_active_mission(self):
        mission = create_mission(self.db, self.org.id, self.drone.id)
        response = self.client.post(f"/api/reports/generate/{mission.id}", headers=self.headers)
        self.assertEqual(response.status_code, 409)

    def test_unknown_report(self):
        self.assertEqual(self.client.get("/api/reports/missing", headers=self.headers).status_code, 404)


class TestMiscAPI(APITestCase):
    """Test analytics, sites, weather and service endpoints."""

    def test_stats(self):
        create_drone(self.db, self.org.id, battery_level=50.0)
        stats = self.client.get("/api/analytics/stats", headers=self.headers).json()
        self.assertEqual(stats["total_drones"], 1)
        self.assertEqual(stats["average_battery_level"], 50.0)

    def test_sites(self):
        response = self.client.post("/api/sites", headers=self.headers, json={
            "name": "Quarry",
            "location": {"lat": 37.6, "lng": -122.2},
            "no_fly_zones": [{
                "name": "Blast Area",
                "coordinates": [{"lat": 37.60, "lng": -122.21}, {"lat": 37.61, "lng": -122.21},
                                {"lat": 37.61, "lng": -122.20}],
            }],
        })
        self.assertEqual(response.status_code, 201)
        sites = self.client.get("/api/sites", headers=self.headers).json()
        self.assertEqual(sites[0]["no_fly_zones"][0]["type"], "restricted")

    def test_weather(self):
        response = self.client.get("/api/weather", params={"lat": 37.7, "lng": -122.4})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["flight_safe"])
        self.assertEqual(self.client.get("/api/weather", params={"lat": 137.7, "lng": 0}).status_code, 422)

    def test_root_and_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "healthy"})
        self.assertEqual(self.client.get("/").status_code, 200)


if __name__ == '__main__':
    unittest.main()
