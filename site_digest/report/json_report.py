"""
JSON report for SiteDigest.

Serializes a CrawlReport to a file.
"""
from pathlib import Path

from site_digest.aggregator import CrawlReport


def render_json(report: CrawlReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Save *report* as JSON at *output_path*.

    :param report: CrawlReport with the crawled pages
    :param output_path: path of the JSON file
    :param pretty: indent the output by 2 spaces
    :return: Path of the saved file

    Example:
    ```python
    from site_digest.report.json_report import render_json
    report_path = render_json(report, 'reports/report.json', pretty=False)
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.json(pretty=pretty), encoding='utf-8')
    return output
