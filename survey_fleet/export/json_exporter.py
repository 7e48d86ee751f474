"""JSON exporter for survey reports."""
import json
from typing import List, Optional

from survey_fleet.domain.report import SurveyReport


class JSONExporter:
    """Exports survey reports to JSON format."""

    @staticmethod
    def report_document(report: SurveyReport, mission: Optional[dict] = None,
                        drone: Optional[dict] = None) -> dict:
        """Report as a standalone document, optionally with mission and drone attached."""
        document = report.to_dict()
        if mission is not None:
            document["mission"] = mission
        if drone is not None:
            document["drone"] = drone
        return document

    @staticmethod
    def export_report(report: SurveyReport, file_path: str,
                      mission: Optional[dict] = None, drone: Optional[dict] = None):
        """Export report to JSON file.

        Args:
            report: Report to export
            file_path: Output file path
            mission: Mission dict to embed
            drone: Drone dict to embed
        """
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(JSONExporter.report_document(report, mission, drone), f, indent=2, ensure_ascii=False)

    @staticmethod
    def export_reports(reports: List[dict], file_path: str):
        """Export a list of joined report dicts (as returned by ReportService) to one file."""
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump({"reports": reports, "count": len(reports)}, f, indent=2, ensure_ascii=False)


def export_report_json(report: SurveyReport, file_path: str):
    JSONExporter.export_report(report, file_path)
