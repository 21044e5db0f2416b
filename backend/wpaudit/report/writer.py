"""
Report format dispatch and output file handling.
"""

from pathlib import Path
from typing import Callable, Dict, Optional

from wpaudit.core.exceptions import ReportError
from wpaudit.core.logging import get_logger
from wpaudit.crawler.urls import host_of
from wpaudit.report.html import render_html
from wpaudit.report.json_report import render_json
from wpaudit.report.markdown import render_markdown

logger = get_logger(__name__)

RENDERERS: Dict[str, Callable] = {
    "md": render_markdown,
    "html": render_html,
    "json": render_json,
}

REPORT_BASENAME = "wp-modernization-report"


def default_output_path(url: str, fmt: str) -> Path:
    """./wp-modernization-report-<host>.<ext>, host without www and dots as dashes."""
    host = host_of(url)
    if host.startswith("www."):
        host = host[len("www."):]
    if not host:
        return Path(f"./{REPORT_BASENAME}.{fmt}")
    return Path(f"./{REPORT_BASENAME}-{host.replace('.', '-')}.{fmt}")


def render_report(report, fmt: str) -> str:
    renderer = RENDERERS.get(fmt)
    if renderer is None:
        raise ReportError(f"Unsupported report format: {fmt}", detail={"supported": sorted(RENDERERS)})
    return renderer(report)


def write_report(report, fmt: str, out: Optional[str] = None) -> Path:
    """Render and write the report; returns the path written."""
    path = Path(out) if out else default_output_path(report.url, fmt)
    content = render_report(report, fmt)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ReportError(f"Could not write report to {path}", detail=str(e))
    logger.info("Report written", path=str(path), format=fmt, bytes=len(content.encode("utf-8")))
    return path
