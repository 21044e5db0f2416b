"""
Scoring rules - the fixed point tables behind every report.

Third parties read these numbers from the published rubric, so any change
here is a change of the report format.
"""

from typing import Any, Dict, Mapping, Tuple

from wpaudit.core.exceptions import InvalidClassificationError
from wpaudit.models import (
    CachingStatus,
    CdnUsage,
    CoreWebVitals,
    CoverageQuality,
    H1Quality,
    HeadersCoverage,
    HtmlSizeCategory,
    HttpsStatus,
    ImageOptimization,
    ModernizationAnalysis,
    PerformanceAnalysis,
    PermalinkModernity,
    Rating,
    RestApiStatus,
    ScriptLoadCategory,
    SecurityAnalysis,
    SeoAnalysis,
    VersionExposure,
    VitalStatus,
)

PERFORMANCE_MAX = 30
PERFORMANCE_BONUS_MAX = 11
PERFORMANCE_MAX_WITH_BONUS = PERFORMANCE_MAX + PERFORMANCE_BONUS_MAX
SEO_MAX = 25
SECURITY_MAX = 25
MODERNIZATION_MAX = 20

# Performance (30)
HTML_SIZE_POINTS = {
    HtmlSizeCategory.EXCELLENT: 6,
    HtmlSizeCategory.GOOD: 4,
    HtmlSizeCategory.FAIR: 2,
    HtmlSizeCategory.POOR: 0,
}
SCRIPT_LOAD_POINTS = {
    ScriptLoadCategory.EXCELLENT: 8,
    ScriptLoadCategory.GOOD: 5,
    ScriptLoadCategory.HEAVY: 1,
}
IMAGE_POINTS = {
    ImageOptimization.EXCELLENT: 6,
    ImageOptimization.GOOD: 3,
    ImageOptimization.POOR: 0,
}
CACHING_POINTS = {
    CachingStatus.EXCELLENT: 6,
    CachingStatus.PARTIAL: 3,
    CachingStatus.NONE: 0,
}
# Stylesheets are not classified; every site gets the baseline.
CSS_BASELINE_POINTS = 4

# Core Web Vitals bonus (11)
VITAL_POINTS = {
    VitalStatus.GOOD: 3,
    VitalStatus.NEEDS_IMPROVEMENT: 1,
    VitalStatus.POOR: 0,
}
TTFB_POINTS = {
    VitalStatus.GOOD: 2,
    VitalStatus.NEEDS_IMPROVEMENT: 1,
    VitalStatus.POOR: 0,
}

# SEO (25)
TITLE_POINTS = {
    CoverageQuality.EXCELLENT: 6,
    CoverageQuality.GOOD: 4,
    CoverageQuality.MISSING: 0,
}
META_POINTS = {
    CoverageQuality.EXCELLENT: 6,
    CoverageQuality.GOOD: 4,
    CoverageQuality.MISSING: 0,
}
H1_POINTS = {
    H1Quality.EXCELLENT: 5,
    H1Quality.ISSUES: 2,
    H1Quality.MISSING: 0,
}
CANONICAL_POINTS = 4
ROBOTS_AND_SITEMAP_POINTS = 4
ROBOTS_OR_SITEMAP_POINTS = 2

# Security (25)
HTTPS_POINTS = {
    HttpsStatus.SECURE: 5,
    HttpsStatus.INSECURE: 0,
}
HEADERS_POINTS = {
    HeadersCoverage.EXCELLENT: 10,
    HeadersCoverage.PARTIAL: 5,
    HeadersCoverage.NONE: 0,
}
VERSION_POINTS = {
    VersionExposure.HIDDEN: 5,
    VersionExposure.EXPOSED: 0,
}
# Update posture is not checked against release data yet; flat baseline.
UPDATE_POSTURE_BASELINE_POINTS = 5

# Modernization (20)
REST_API_POINTS = {
    RestApiStatus.FULL: 6,
    RestApiStatus.PARTIAL: 3,
    RestApiStatus.NONE: 0,
}
ENDPOINT_POINTS = {
    RestApiStatus.FULL: 5,
    RestApiStatus.PARTIAL: 2,
    RestApiStatus.NONE: 0,
}
PERMALINK_POINTS = {
    PermalinkModernity.MODERN: 5,
    PermalinkModernity.MIXED: 2,
    PermalinkModernity.LEGACY: 0,
}
CDN_POINTS = {
    CdnUsage.YES: 4,
    CdnUsage.PARTIAL: 2,
    CdnUsage.NO: 0,
}

# Inclusive lower bounds, highest first
RATING_BANDS = (
    (80, Rating.HEALTHY),
    (60, Rating.NEEDS_OPTIMIZATION),
    (40, Rating.NEEDS_MODERNIZATION),
)


def points_for(table: Mapping[Any, int], value: Any, field: str) -> int:
    """Look up a classification; unknown values are a contract violation."""
    try:
        return table[value]
    except (KeyError, TypeError):
        raise InvalidClassificationError(field, value) from None


def clamp(value: int, min_val: int = 0, max_val: int = 100) -> int:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def _entry(points: int, max_points: int, value: Any) -> Dict[str, Any]:
    return {"score": points, "max": max_points, "value": getattr(value, "value", value)}


def score_performance(analysis: PerformanceAnalysis) -> Tuple[int, Dict[str, Any]]:
    """Base performance score (0-30) without the field-performance bonus."""
    breakdown: Dict[str, Any] = {}

    html_pts = points_for(HTML_SIZE_POINTS, analysis.html_size_category, "htmlSizeCategory")
    breakdown["html_size"] = _entry(html_pts, 6, analysis.html_size_category)

    script_pts = points_for(SCRIPT_LOAD_POINTS, analysis.script_load_category, "scriptLoadCategory")
    breakdown["scripts"] = _entry(script_pts, 8, analysis.script_load_category)

    image_pts = points_for(IMAGE_POINTS, analysis.image_optimization, "imageOptimization")
    breakdown["images"] = _entry(image_pts, 6, analysis.image_optimization)

    caching_pts = points_for(CACHING_POINTS, analysis.caching, "caching")
    breakdown["caching"] = _entry(caching_pts, 6, analysis.caching)

    breakdown["stylesheets"] = _entry(CSS_BASELINE_POINTS, 4, "baseline")

    score = html_pts + script_pts + image_pts + caching_pts + CSS_BASELINE_POINTS
    return clamp(score, 0, PERFORMANCE_MAX), breakdown


def score_vitals_bonus(vitals: CoreWebVitals) -> Tuple[int, Dict[str, Any]]:
    """Bonus points (0-11) from Core Web Vitals."""
    breakdown = {
        "lcp": _entry(points_for(VITAL_POINTS, vitals.lcp_status, "lcpStatus"), 3, vitals.lcp_status),
        "cls": _entry(points_for(VITAL_POINTS, vitals.cls_status, "clsStatus"), 3, vitals.cls_status),
        "inp": _entry(points_for(VITAL_POINTS, vitals.inp_status, "inpStatus"), 3, vitals.inp_status),
        "ttfb": _entry(points_for(TTFB_POINTS, vitals.ttfb_status, "ttfbStatus"), 2, vitals.ttfb_status),
    }
    bonus = sum(entry["score"] for entry in breakdown.values())
    return clamp(bonus, 0, PERFORMANCE_BONUS_MAX), breakdown


def score_seo(analysis: SeoAnalysis) -> Tuple[int, Dict[str, Any]]:
    breakdown: Dict[str, Any] = {}

    title_pts = points_for(TITLE_POINTS, analysis.title_quality, "titleQuality")
    breakdown["title"] = _entry(title_pts, 6, analysis.title_quality)

    meta_pts = points_for(META_POINTS, analysis.meta_description_quality, "metaDescriptionQuality")
    breakdown["meta_description"] = _entry(meta_pts, 6, analysis.meta_description_quality)

    h1_pts = points_for(H1_POINTS, analysis.h1_quality, "h1Quality")
    breakdown["h1"] = _entry(h1_pts, 5, analysis.h1_quality)

    canonical_pts = CANONICAL_POINTS if analysis.has_canonical else 0
    breakdown["canonical"] = _entry(canonical_pts, 4, analysis.has_canonical)

    if analysis.has_robots_txt and analysis.has_sitemap:
        crawl_pts = ROBOTS_AND_SITEMAP_POINTS
    elif analysis.has_robots_txt or analysis.has_sitemap:
        crawl_pts = ROBOTS_OR_SITEMAP_POINTS
    else:
        crawl_pts = 0
    breakdown["robots_sitemap"] = {
        "score": crawl_pts, "max": 4,
        "value": {"robots_txt": analysis.has_robots_txt, "sitemap": analysis.has_sitemap},
    }

    score = title_pts + meta_pts + h1_pts + canonical_pts + crawl_pts
    return clamp(score, 0, SEO_MAX), breakdown


def score_security(analysis: SecurityAnalysis) -> Tuple[int, Dict[str, Any]]:
    breakdown: Dict[str, Any] = {}

    https_pts = points_for(HTTPS_POINTS, analysis.https_status, "httpsStatus")
    breakdown["https"] = _entry(https_pts, 5, analysis.https_status)

    headers_pts = points_for(HEADERS_POINTS, analysis.headers_coverage, "headersCoverage")
    breakdown["headers"] = _entry(headers_pts, 10, analysis.headers_coverage)

    version_pts = points_for(VERSION_POINTS, analysis.version_exposure, "versionExposure")
    breakdown["version"] = _entry(version_pts, 5, analysis.version_exposure)

    breakdown["update_posture"] = _entry(UPDATE_POSTURE_BASELINE_POINTS, 5, "baseline")

    score = https_pts + headers_pts + version_pts + UPDATE_POSTURE_BASELINE_POINTS
    return clamp(score, 0, SECURITY_MAX), breakdown


def score_modernization(analysis: ModernizationAnalysis) -> Tuple[int, Dict[str, Any]]:
    breakdown: Dict[str, Any] = {}

    rest_pts = points_for(REST_API_POINTS, analysis.rest_api_status, "restApiStatus")
    breakdown["rest_api"] = _entry(rest_pts, 6, analysis.rest_api_status)

    endpoint_pts = points_for(ENDPOINT_POINTS, analysis.rest_api_status, "restApiStatus")
    breakdown["endpoints"] = _entry(endpoint_pts, 5, analysis.rest_api_status)

    permalink_pts = points_for(PERMALINK_POINTS, analysis.permalink_modernity, "permalinkModernity")
    breakdown["permalinks"] = _entry(permalink_pts, 5, analysis.permalink_modernity)

    cdn_pts = points_for(CDN_POINTS, analysis.cdn_usage, "cdnUsage")
    breakdown["cdn"] = _entry(cdn_pts, 4, analysis.cdn_usage)

    score = rest_pts + endpoint_pts + permalink_pts + cdn_pts
    return clamp(score, 0, MODERNIZATION_MAX), breakdown


def get_rating(overall: int) -> Rating:
    for lower_bound, rating in RATING_BANDS:
        if overall >= lower_bound:
            return rating
    return Rating.LEGACY
