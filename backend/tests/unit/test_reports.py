"""
Unit tests for the Markdown, HTML and JSON reports and the report writer.
"""
import json
from dataclasses import replace
from pathlib import Path

import pytest

from tests.conftest import make_field
from wpaudit.core.exceptions import ReportError
from wpaudit.models import WordPressDetection
from wpaudit.pipeline.audit import score_observations
from wpaudit.report.common import category_rows, plugin_summary, score_level
from wpaudit.report.html import render_html
from wpaudit.report.json_report import build_document, render_json
from wpaudit.report.markdown import format_timestamp, render_markdown
from wpaudit.report.writer import default_output_path, render_report, write_report


class TestCommonHelpers:
    """Test shared presentation helpers."""

    @pytest.mark.parametrize("score,max_score,expected", [
        (20, 25, "good"),
        (19, 25, "warning"),
        (15, 25, "warning"),
        (14, 25, "critical"),
        (0, 0, "critical"),
    ])
    def test_score_level(self, score, max_score, expected):
        assert score_level(score, max_score) == expected

    def test_plugin_summary_truncates(self):
        plugins = ("a", "b", "c", "d", "e", "f")

        assert plugin_summary(plugins) == "a, b, c, d, e..."
        assert plugin_summary(("a", "b")) == "a, b"

    def test_category_rows_order_and_maxima(self, sample_report):
        rows = category_rows(sample_report.result)

        assert [row["label"] for row in rows] == [
            "Performance", "SEO Foundations", "WordPress Health & Security", "Modernization Readiness",
        ]
        assert [row["max"] for row in rows] == [30, 25, 25, 20]
        assert all(row["level"] == "good" for row in rows)

    def test_format_timestamp(self):
        assert format_timestamp("2024-05-01T12:00:00+00:00") == "2024-05-01 12:00:00 UTC"
        assert format_timestamp("yesterday") == "yesterday"


class TestMarkdownReport:
    """Test the Markdown renderer."""

    def test_sections(self, sample_report):
        md = render_markdown(sample_report)

        assert md.startswith("# WordPress Modernization Audit Report")
        assert "**Site:** https://www.example.com" in md
        assert "**Pages Audited:** 2" in md
        assert "### Overall Modernization Score: 100/100" in md
        assert "Healthy - Room for Targeted Improvements" in md
        assert "✅ WordPress site detected (Version: 6.4.2)" in md
        assert "**Theme:** acme-theme" in md
        assert "**Pages skipped (fetch failed):** /gone/" in md
        assert "| SEO Foundations | 25/25 | ✅ Good |" in md
        assert "## 4. Modernization Readiness (20/20)" in md
        assert "**Headless Readiness:** READY" in md
        assert "## Next Steps" in md
        assert md.rstrip().endswith("*Generated by wp-modernization-audit*")

    def test_not_wordpress_warning(self, sample_report):
        report = replace(sample_report, wordpress=WordPressDetection())

        md = render_markdown(report)

        assert "Could not confirm this is a WordPress site" in md

    def test_core_web_vitals_table(self, sample_report, perfect_page, modern_site):
        field = make_field()
        result = score_observations([perfect_page], modern_site, field=field)
        report = replace(sample_report, result=result, field_performance=field)

        md = render_markdown(report)

        assert "**Core Web Vitals:**" in md
        assert "| LCP (Largest Contentful Paint) | 1800 ms | good |" in md
        assert "## 1. Performance (41/41)" in md


class TestHtmlReport:
    """Test the Jinja2 HTML renderer."""

    def test_renders_scores(self, sample_report):
        html = render_html(sample_report)

        assert html.lstrip().lower().startswith("<!doctype html>")
        assert "https://www.example.com" in html
        assert "100" in html
        assert "WordPress Health &amp; Security" in html

    def test_escapes_site_content(self, sample_report):
        report = replace(
            sample_report,
            wordpress=replace(sample_report.wordpress, theme_name="<script>alert(1)</script>"),
        )

        html = render_html(report)

        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


class TestJsonReport:
    """Test the structured document."""

    def test_document_shape(self, sample_report):
        document = json.loads(render_json(sample_report))

        assert set(document) == {
            "meta", "wordpress", "scores", "findings", "fieldPerformance",
            "topIssues", "nextSteps", "rawData",
        }
        assert document["meta"]["pagesAudited"] == 2
        assert document["meta"]["failedPaths"] == ["/gone/"]
        assert document["wordpress"]["version"] == "6.4.2"
        assert document["scores"]["overall"] == 100
        assert document["scores"]["rating"] == "healthy"
        assert document["findings"]["security"]["maxScore"] == 25
        assert document["findings"]["seo"]["details"]["h1Quality"] == "excellent"
        assert document["fieldPerformance"] is None
        assert [page["path"] for page in document["rawData"]["pages"]] == ["/", "/about/"]

    def test_build_document_is_plain_data(self, sample_report):
        document = build_document(sample_report)

        # Round-trips through json without custom encoders
        assert json.loads(json.dumps(document)) == document


class TestReportWriter:
    """Test format dispatch and output paths."""

    def test_default_output_path(self):
        assert default_output_path("https://www.example.com", "md") == Path("wp-modernization-report-example-com.md")
        assert default_output_path("https://blog.example.co.uk/", "html") == Path(
            "wp-modernization-report-blog-example-co-uk.html"
        )

    def test_unknown_format(self, sample_report):
        with pytest.raises(ReportError):
            render_report(sample_report, "pdf")

    def test_write_report(self, sample_report, tmp_path):
        out = tmp_path / "reports" / "audit.json"

        path = write_report(sample_report, "json", str(out))

        assert path == out
        assert json.loads(out.read_text(encoding="utf-8"))["meta"]["url"] == "https://www.example.com"

    def test_write_failure_is_report_error(self, sample_report, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with pytest.raises(ReportError):
            write_report(sample_report, "md", str(blocker / "report.md"))
