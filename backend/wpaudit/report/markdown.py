"""
Markdown report.
"""

from datetime import datetime
from typing import List

from wpaudit.report.common import (
    PROJECT_NAME,
    RATING_EMOJI,
    RATING_LABELS,
    REPORT_TITLE,
    category_rows,
    performance_assessment,
    plugin_summary,
    seo_assessment,
    vitals_rows,
)


def format_timestamp(value: str) -> str:
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    except ValueError:
        return value


def _assessment_line(key: str, analysis) -> str:
    if key == "performance":
        return f"**Assessment:** {performance_assessment(analysis)}"
    if key == "seo":
        return f"**Assessment:** {seo_assessment(analysis)}"
    if key == "security":
        return f"**Security Posture:** {analysis.overall_posture.value.upper()}"
    return f"**Headless Readiness:** {analysis.headless_readiness.value.upper()}"


def _wordpress_lines(report) -> List[str]:
    wp = report.wordpress
    if not wp.is_wordpress:
        return ["⚠️ **Warning:** Could not confirm this is a WordPress site"]

    detected = "✅ WordPress site detected"
    if wp.wp_version:
        detected += f" (Version: {wp.wp_version})"
    lines = [detected]
    if wp.theme_name:
        lines.append(f"**Theme:** {wp.theme_name}")
    if wp.plugins:
        lines.append(f"**Plugins detected:** {plugin_summary(wp.plugins)}")
    return lines


def render_markdown(report) -> str:
    """Render an AuditReport as a Markdown document."""
    scores = report.result.scores
    rating = scores.rating
    rows = category_rows(report.result)

    lines: List[str] = [
        f"# {REPORT_TITLE} Report",
        "",
        f"**Site:** {report.url}",
        f"**Generated:** {format_timestamp(report.generated_at)}",
        f"**Pages Audited:** {len(report.pages)}",
        "",
        "---",
        "",
        "## Executive Summary",
        "",
        f"### Overall Modernization Score: {scores.overall}/100",
        "",
        f"{RATING_EMOJI[rating]} **{RATING_LABELS[rating]}**",
        "",
    ]
    lines.extend(_wordpress_lines(report))
    if report.failed_paths:
        lines.extend(["", f"**Pages skipped (fetch failed):** {', '.join(report.failed_paths)}"])
    lines.append("")

    lines.extend([
        "### Category Breakdown",
        "",
        "| Category | Score | Status |",
        "|----------|-------|--------|",
    ])
    for row in rows:
        lines.append(f"| {row['label']} | {row['score']}/{row['max']} | {row['status']} |")
    lines.append("")

    if report.result.top_issues:
        lines.extend(["### 🚨 Top Issues to Address", ""])
        for index, issue in enumerate(report.result.top_issues, start=1):
            lines.append(f"{index}. {issue.text}")
        lines.append("")

    for number, row in enumerate(rows, start=1):
        analysis = row["analysis"]
        lines.extend([
            "---",
            "",
            f"## {number}. {row['label']} ({row['score']}/{row['max']})",
            "",
            _assessment_line(row["key"], analysis),
            "",
        ])

        if row["key"] == "performance":
            vitals = vitals_rows(report.result, report.field_performance)
            if vitals:
                lines.extend([
                    "**Core Web Vitals:**",
                    "",
                    "| Metric | Value | Status |",
                    "|--------|-------|--------|",
                ])
                lines.extend(f"| {v['metric']} | {v['value']} | {v['status']} |" for v in vitals)
                lines.append("")

        if analysis.issues:
            marker = "🔒" if row["key"] == "security" else "⚠️"
            lines.extend(["**Issues Found:**", ""])
            lines.extend(f"- {marker} {issue}" for issue in analysis.issues)
            lines.append("")

        if analysis.recommendations:
            lines.extend(["**Recommendations:**", ""])
            lines.extend(f"- 💡 {rec}" for rec in analysis.recommendations)
            lines.append("")

    lines.extend([
        "---",
        "",
        "## Next Steps",
        "",
        report.result.next_steps,
        "",
        "---",
        "",
        f"*Generated by {PROJECT_NAME}*",
        "",
    ])
    return "\n".join(lines)
