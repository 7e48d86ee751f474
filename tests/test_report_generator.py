"""Tests for survey report generation."""
import unittest

from survey_fleet.domain.drone import DroneStatus
from survey_fleet.domain.mission import MissionParameters
from survey_fleet.domain.mission_status import MissionStatus
from survey_fleet.errors import NotFoundError, PreconditionError
from survey_fleet.persistence.db import close_db, init_db
from survey_fleet.persistence.repositories import SurveyReportRepository
from survey_fleet.reports.generator import ReportGenerator
from survey_fleet.reports.metrics_source import RandomMetricsSource
from survey_fleet.services.report_service import ReportService
from survey_fleet.export.json_exporter import JSONExporter, export_report_json
from fixtures import create_drone, create_mission, create_organization


class TestReportGenerator(unittest.TestCase):
    """Test report derivation and idempotence."""

    def setUp(self):
        self.db = init_db("sqlite://")()
        self.org = create_organization(self.db)
        self.drone = create_drone(self.db, self.org.id, status=DroneStatus.AVAILABLE)
        self.generator = ReportGenerator(RandomMetricsSource(seed=1))

    def tearDown(self):
        self.db.close()
        close_db()

    def _finished_mission(self, status=MissionStatus.COMPLETED):
        return create_mission(
            self.db, self.org.id, self.drone.id, status=status, progress=100.0, elapsed_time=33.0,
            parameters=MissionParameters(altitude=120.0, speed=8.0),
        )

    def test_report_fields_from_mission(self):
        mission = self._finished_mission()

        report_id = self.generator.generate(self.db, mission.id)
        report = SurveyReportRepository(self.db).get(report_id)

        self.assertEqual(report.mission_id, mission.id)
        self.assertEqual(report.organization_id, self.org.id)
        self.assertEqual(report.summary.flight_duration, 33.0)
        self.assertEqual(report.statistics.average_altitude, 120.0)
        self.assertEqual(report.statistics.max_speed, 9.6)
        self.assertEqual(report.statistics.waypoints_completed, 2)

    def test_metrics_within_bounds(self):
        for seed in range(25):
            report = ReportGenerator(RandomMetricsSource(seed=seed)).build_report(self._finished_mission())
            self.assertTrue(1 <= report.summary.total_distance < 6)
            self.assertTrue(5 <= report.summary.area_covered < 25)
            self.assertTrue(50 <= report.summary.images_captured < 350)
            self.assertTrue(20 <= report.summary.battery_consumed < 60)
            self.assertTrue(80 <= report.data_quality.image_overlap_percentage <= 100)
            self.assertTrue(1.0 <= report.data_quality.gps_accuracy <= 3.0)
            self.assertTrue(500 <= report.data_quality.sensor_data_points < 1500)

    def test_generate_is_idempotent(self):
        mission = self._finished_mission(MissionStatus.ABORTED)

        first = self.generator.generate(self.db, mission.id)
        second = self.generator.generate(self.db, mission.id)

        self.assertEqual(first, second)
        self.assertEqual(SurveyReportRepository(self.db).count_for_mission(mission.id), 1)

    def test_requires_terminal_mission(self):
        for status in (MissionStatus.PLANNED, MissionStatus.IN_PROGRESS, MissionStatus.PAUSED):
            mission = create_mission(self.db, self.org.id, self.drone.id, status=status)
            with self.assertRaises(PreconditionError):
                self.generator.generate(self.db, mission.id)
            self.assertEqual(SurveyReportRepository(self.db).count_for_mission(mission.id), 0)

    def test_unknown_mission(self):
        with self.assertRaises(NotFoundError):
            self.generator.generate(self.db, "missing")

    def test_custom_metrics_source(self):
        class MeasuredMetrics(RandomMetricsSource):
            def images_captured(self):
                return 512

        report = ReportGenerator(MeasuredMetrics(seed=2)).build_report(self._finished_mission())
        self.assertEqual(report.summary.images_captured, 512)

    def test_export_report_json(self):
        import json
        import os
        import tempfile

        mission = self._finished_mission()
        report = SurveyReportRepository(self.db).get(self.generator.generate(self.db, mission.id))

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "report.json")
            export_report_json(report, path)
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        self.assertEqual(data["id"], report.id)
        self.assertEqual(data["summary"]["flight_duration"], 33.0)

        document = JSONExporter.report_document(report, mission=mission.to_dict())
        self.assertEqual(document["mission"]["id"], mission.id)
        self.assertNotIn("drone", document)

    def test_export_reports(self):
        import json
        import os
        import tempfile

        mission = self._finished_mission()
        self.generator.generate(self.db, mission.id)
        rows = ReportService(self.db, self.generator).list_reports(self.org.id)

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "reports.json")
            JSONExporter.export_reports(rows, path)
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        self.assertEqual(data["count"], 1)
        self.assertEqual(data["reports"][0]["mission"]["id"], mission.id)
        self.assertEqual(data["reports"][0]["drone"]["id"], self.drone.id)


if __name__ == '__main__':
    unittest.main()
