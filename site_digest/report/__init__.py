"""site_digest.report: JSON and HTML report writers used by the CLI."""

from site_digest.report.html_report import render_html
from site_digest.report.json_report import render_json

__all__ = ["render_json", "render_html"]
