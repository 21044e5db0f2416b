"""
Presentation helpers shared by the Markdown, HTML and JSON reports.
"""

from typing import Any, Dict, List

from wpaudit.models import (
    CachingStatus,
    CoverageQuality,
    H1Quality,
    HtmlSizeCategory,
    ImageOptimization,
    PerformanceAnalysis,
    Rating,
    ScriptLoadCategory,
    SeoAnalysis,
)
from wpaudit.scorer.rules import MODERNIZATION_MAX, SECURITY_MAX, SEO_MAX

REPORT_TITLE = "WordPress Modernization Audit"
PROJECT_NAME = "wp-modernization-audit"

# (key, report label)
CATEGORIES = (
    ("performance", "Performance"),
    ("seo", "SEO Foundations"),
    ("security", "WordPress Health & Security"),
    ("modernization", "Modernization Readiness"),
)

RATING_LABELS = {
    Rating.HEALTHY: "Healthy - Room for Targeted Improvements",
    Rating.NEEDS_OPTIMIZATION: "Needs Optimization",
    Rating.NEEDS_MODERNIZATION: "Modernization Recommended",
    Rating.LEGACY: "Legacy - Modernization Strongly Recommended",
}

RATING_EMOJI = {
    Rating.HEALTHY: "✅",
    Rating.NEEDS_OPTIMIZATION: "⚠️",
    Rating.NEEDS_MODERNIZATION: "🔧",
    Rating.LEGACY: "🚨",
}

RATING_COLORS = {
    Rating.HEALTHY: "#10b981",
    Rating.NEEDS_OPTIMIZATION: "#f59e0b",
    Rating.NEEDS_MODERNIZATION: "#f97316",
    Rating.LEGACY: "#ef4444",
}

MAX_LISTED_PLUGINS = 5


def score_level(score: int, max_score: int) -> str:
    """Band a category score by its share of the maximum (80% / 60%)."""
    percentage = score / max_score * 100 if max_score else 0
    if percentage >= 80:
        return "good"
    if percentage >= 60:
        return "warning"
    return "critical"


STATUS_LABELS = {
    "good": "✅ Good",
    "warning": "⚠️ Needs Work",
    "critical": "🚨 Critical",
}


def score_status(score: int, max_score: int) -> str:
    return STATUS_LABELS[score_level(score, max_score)]


def performance_assessment(analysis: PerformanceAnalysis) -> str:
    assessments: List[str] = []
    if analysis.html_size_category in (HtmlSizeCategory.EXCELLENT, HtmlSizeCategory.GOOD):
        assessments.append("Good HTML size")
    if analysis.script_load_category in (ScriptLoadCategory.EXCELLENT, ScriptLoadCategory.GOOD):
        assessments.append("Reasonable script load")
    if analysis.image_optimization == ImageOptimization.EXCELLENT:
        assessments.append("Modern image formats")
    if analysis.caching == CachingStatus.EXCELLENT:
        assessments.append("Caching enabled")
    return ", ".join(assessments) if assessments else "Performance needs improvement"


def seo_assessment(analysis: SeoAnalysis) -> str:
    good: List[str] = []
    if analysis.title_quality == CoverageQuality.EXCELLENT:
        good.append("titles")
    if analysis.meta_description_quality == CoverageQuality.EXCELLENT:
        good.append("meta descriptions")
    if analysis.h1_quality == H1Quality.EXCELLENT:
        good.append("heading structure")
    if analysis.has_canonical:
        good.append("canonical tags")
    return f"Strong foundation with {', '.join(good)}" if good else "SEO fundamentals need attention"


def plugin_summary(plugins) -> str:
    listed = ", ".join(list(plugins)[:MAX_LISTED_PLUGINS])
    return listed + ("..." if len(plugins) > MAX_LISTED_PLUGINS else "")


def category_rows(result) -> List[Dict[str, Any]]:
    """Score, maximum and status for each category of a ScoredAudit, in report order."""
    scores = result.scores
    analyses = result.analyses
    maxima = {
        "performance": scores.performance_max,
        "seo": SEO_MAX,
        "security": SECURITY_MAX,
        "modernization": MODERNIZATION_MAX,
    }
    rows = []
    for key, label in CATEGORIES:
        score = getattr(scores, key)
        max_score = maxima[key]
        rows.append({
            "key": key,
            "label": label,
            "score": score,
            "max": max_score,
            "percent": min(100, round(score / max_score * 100)) if max_score else 0,
            "level": score_level(score, max_score),
            "status": score_status(score, max_score),
            "analysis": getattr(analyses, key),
        })
    return rows


def vitals_rows(result, field) -> List[Dict[str, Any]]:
    """Measured value and status per Core Web Vital; empty without field data."""
    vitals = result.analyses.performance.core_web_vitals
    if vitals is None or field is None:
        return []
    return [
        {"metric": "LCP (Largest Contentful Paint)", "value": f"{round(field.lcp_ms)} ms", "status": vitals.lcp_status.value},
        {"metric": "CLS (Cumulative Layout Shift)", "value": f"{field.cls_score:.3f}", "status": vitals.cls_status.value},
        {"metric": "INP (Interaction to Next Paint)", "value": f"{round(field.inp_ms)} ms", "status": vitals.inp_status.value},
        {"metric": "TTFB (Time to First Byte)", "value": f"{round(field.ttfb_ms)} ms", "status": vitals.ttfb_status.value},
    ]
