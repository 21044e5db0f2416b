"""
HTML report rendered from a Jinja2 template.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from wpaudit.core.config import settings
from wpaudit.report.common import (
    PROJECT_NAME,
    RATING_COLORS,
    RATING_EMOJI,
    RATING_LABELS,
    REPORT_TITLE,
    category_rows,
    performance_assessment,
    plugin_summary,
    seo_assessment,
    vitals_rows,
)
from wpaudit.report.markdown import format_timestamp

TEMPLATE_DIR = Path(__file__).parent / "templates"


def get_jinja_env() -> Environment:
    """Get configured Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html", "xml", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["timestamp"] = format_timestamp
    env.filters["plugins"] = plugin_summary
    return env


def render_html(report) -> str:
    """Render an AuditReport as a standalone HTML page."""
    rating = report.result.scores.rating
    rows = category_rows(report.result)
    assessments = {
        "performance": performance_assessment(report.result.analyses.performance),
        "seo": seo_assessment(report.result.analyses.seo),
        "security": f"Security posture: {report.result.analyses.security.overall_posture.value.upper()}",
        "modernization": f"Headless readiness: {report.result.analyses.modernization.headless_readiness.value.upper()}",
    }

    template = get_jinja_env().get_template("report.html.j2")
    return template.render(
        title=REPORT_TITLE,
        project_name=PROJECT_NAME,
        version=settings.APP_VERSION,
        report=report,
        scores=report.result.scores,
        rating_label=RATING_LABELS[rating],
        rating_emoji=RATING_EMOJI[rating],
        rating_color=RATING_COLORS[rating],
        categories=rows,
        assessments=assessments,
        vitals=vitals_rows(report.result, report.field_performance),
        top_issues=report.result.top_issues,
        next_steps=report.result.next_steps.splitlines(),
    )
