# src/cachet_gating/gates/reporter.py
"""
Report generators for gating results.

Produces:
- JSON reports under .cachet/reports/<timestamp>.json (plus latest.json)
- HTML report at .cachet/reports/latest.html
"""

import json
from html import escape
from pathlib import Path
from typing import Any, Optional

from cachet_gating.gates.models import GatingReport, GatingStatus

DEFAULT_REPORT_DIR = Path(".cachet/reports")


class ReportGenerator:
    """Writes a GatingReport as build artifacts."""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = output_dir or DEFAULT_REPORT_DIR

    def ensure_output_dir(self) -> None:
        """Create output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def save_json(self, report: GatingReport) -> Path:
        """
        Save report as JSON.

        Returns path to the saved file.
        """
        self.ensure_output_dir()

        ts = report.timestamp.strftime("%Y%m%d_%H%M%S")
        filepath = self.output_dir / f"{ts}.json"
        data = report.to_dict()

        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)

        latest = self.output_dir / "latest.json"
        with open(latest, "w") as f:
            json.dump(data, f, indent=2)

        return filepath

    def save_html(self, report: GatingReport) -> Path:
        """Generate latest.html and return its path."""
        self.ensure_output_dir()
        filepath = self.output_dir / "latest.html"
        with open(filepath, "w") as f:
            f.write(self._generate_html(report))
        return filepath

    def load_latest(self) -> Optional[dict[str, Any]]:
        """Load latest.json, or None if no report has been written."""
        latest = self.output_dir / "latest.json"
        if not latest.exists():
            return None
        with open(latest) as f:
            return json.load(f)

    def _status_color(self, status: GatingStatus) -> str:
        return {
            GatingStatus.SATISFIED: "#22c55e",
            GatingStatus.NOT_GATED: "#6b7280",
            GatingStatus.TIMED_OUT: "#ef4444",
            GatingStatus.CANCELLED: "#eab308",
            GatingStatus.PENDING: "#f97316",
        }.get(status, "#6b7280")

    def _generate_html(self, report: GatingReport) -> str:
        """Generate HTML report content."""
        rows = ""
        for name, metric in report.metrics.items():
            color = self._status_color(metric.gating_status)
            rows += f"""
                <tr>
                    <td style="padding: 8px; border-bottom: 1px solid #e5e7eb;">{escape(name)}</td>
                    <td style="padding: 8px; border-bottom: 1px solid #e5e7eb; color: {color};">
                        {metric.gating_status.value.upper()}
                    </td>
                    <td style="padding: 8px; border-bottom: 1px solid #e5e7eb;">{metric.initial_status or '-'}</td>
                    <td style="padding: 8px; border-bottom: 1px solid #e5e7eb;">{metric.final_status or '-'}</td>
                    <td style="padding: 8px; border-bottom: 1px solid #e5e7eb; text-align: right;">
                        {metric.gated_time_elapsed_ms / 1000:.1f}s
                    </td>
                </tr>
                """

        overall_color = self._status_color(report.status)
        when = report.timestamp.strftime('%Y-%m-%d %H:%M:%S')
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Cachet Gating Report - {when}</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: #f3f4f6; color: #1f2937; }}
        .container {{ max-width: 960px; margin: 0 auto; padding: 24px; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>Cachet Gating Report</h1>
        <p style="color: #6b7280;">{when}</p>
        <p style="font-size: 1.5rem; font-weight: 700; color: {overall_color};">
            {report.status.value.upper()}
        </p>
        <p>{len(report.satisfied_names)} satisfied, {len(report.timed_out_names)} timed out,
           {report.total_duration_ms / 1000:.1f}s total</p>
        <table style="width: 100%; border-collapse: collapse; background: white;">
            <thead>
                <tr style="background: #f3f4f6;">
                    <th style="padding: 8px; text-align: left;">Resource</th>
                    <th style="padding: 8px; text-align: left;">Gate</th>
                    <th style="padding: 8px; text-align: left;">Initial</th>
                    <th style="padding: 8px; text-align: left;">Final</th>
                    <th style="padding: 8px; text-align: right;">Gated</th>
                </tr>
            </thead>
            <tbody>
                {rows}
            </tbody>
        </table>
    </div>
</body>
</html>
"""

    def save_all(self, report: GatingReport) -> tuple[Path, Path]:
        """
        Save both JSON and HTML reports.

        Returns tuple of (json_path, html_path).
        """
        return self.save_json(report), self.save_html(report)
