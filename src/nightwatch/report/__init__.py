"""Report assembly and rendering."""

from nightwatch.report.models import BusFactorSeverity, RiskLevel, RiskReport, status_label
from nightwatch.report.renderer import REPORT_MARKER, domain_summary, render_report

__all__ = [
    "REPORT_MARKER",
    "BusFactorSeverity",
    "RiskLevel",
    "RiskReport",
    "domain_summary",
    "render_report",
    "status_label",
]
