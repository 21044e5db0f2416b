"""
Performance analyzer.
Classifies HTML weight, script load, image formats, caching and, when
field data is available, Core Web Vitals.
"""

from typing import List, Optional, Tuple

from wpaudit.models import (
    CachingStatus,
    CoreWebVitals,
    FieldPerformance,
    HtmlSizeCategory,
    ImageOptimization,
    PerformanceAnalysis,
    PerformanceData,
    ScriptLoadCategory,
    VitalStatus,
)

# (good below, needs-improvement below)
LCP_THRESHOLDS_MS = (2500, 4000)
CLS_THRESHOLDS = (0.1, 0.25)
INP_THRESHOLDS_MS = (200, 500)
TTFB_THRESHOLDS_MS = (800, 1800)


def _kb(size_bytes: int) -> int:
    return (2 * size_bytes + 1024) // 2048


def vital_status(value: float, thresholds: Tuple[float, float]) -> VitalStatus:
    good, needs_improvement = thresholds
    if value < good:
        return VitalStatus.GOOD
    if value < needs_improvement:
        return VitalStatus.NEEDS_IMPROVEMENT
    return VitalStatus.POOR


def classify_html_size(size_bytes: int) -> HtmlSizeCategory:
    if size_bytes < 100_000:
        return HtmlSizeCategory.EXCELLENT
    if size_bytes < 200_000:
        return HtmlSizeCategory.GOOD
    if size_bytes < 300_000:
        return HtmlSizeCategory.FAIR
    return HtmlSizeCategory.POOR


def classify_scripts(num_scripts: int) -> ScriptLoadCategory:
    if num_scripts < 10:
        return ScriptLoadCategory.EXCELLENT
    if num_scripts < 20:
        return ScriptLoadCategory.GOOD
    return ScriptLoadCategory.HEAVY


def classify_images(perf: PerformanceData) -> ImageOptimization:
    total = perf.image_formats.total
    if total == 0:
        return ImageOptimization.EXCELLENT
    ratio = perf.image_formats.modern / total
    if ratio > 0.7:
        return ImageOptimization.EXCELLENT
    if ratio > 0.3:
        return ImageOptimization.GOOD
    return ImageOptimization.POOR


def classify_caching(perf: PerformanceData) -> CachingStatus:
    if perf.has_cache_control and perf.cache_control_value:
        return CachingStatus.EXCELLENT
    if perf.has_cache_control:
        return CachingStatus.PARTIAL
    return CachingStatus.NONE


def _analyze_vitals(
    field: FieldPerformance, issues: List[str], recommendations: List[str]
) -> CoreWebVitals:
    lcp_status = vital_status(field.lcp_ms, LCP_THRESHOLDS_MS)
    if lcp_status == VitalStatus.POOR:
        issues.append(f"Poor LCP: {field.lcp_ms / 1000:.2f}s (target: <2.5s)")
        recommendations.append(
            "Improve Largest Contentful Paint by optimizing images, removing "
            "render-blocking resources, and using CDN"
        )
    elif lcp_status == VitalStatus.NEEDS_IMPROVEMENT:
        recommendations.append(f"LCP could be better: {field.lcp_ms / 1000:.2f}s (target: <2.5s)")

    cls_status = vital_status(field.cls_score, CLS_THRESHOLDS)
    if cls_status == VitalStatus.POOR:
        issues.append(f"Poor CLS: {field.cls_score:.3f} (target: <0.1)")
        recommendations.append(
            "Reduce Cumulative Layout Shift by setting image dimensions, avoiding "
            "injected content, and using CSS transforms"
        )
    elif cls_status == VitalStatus.NEEDS_IMPROVEMENT:
        recommendations.append(f"CLS could be better: {field.cls_score:.3f} (target: <0.1)")

    inp_status = vital_status(field.inp_ms, INP_THRESHOLDS_MS)
    if inp_status == VitalStatus.POOR:
        issues.append(f"Poor INP: {field.inp_ms:.0f}ms (target: <200ms)")
        recommendations.append(
            "Improve Interaction to Next Paint by reducing JavaScript execution "
            "time and optimizing event handlers"
        )
    elif inp_status == VitalStatus.NEEDS_IMPROVEMENT:
        recommendations.append(f"INP could be better: {field.inp_ms:.0f}ms (target: <200ms)")

    ttfb_status = vital_status(field.ttfb_ms, TTFB_THRESHOLDS_MS)
    if ttfb_status == VitalStatus.POOR:
        issues.append(f"Slow TTFB: {field.ttfb_ms:.0f}ms (target: <800ms)")
        recommendations.append(
            "Improve Time to First Byte by optimizing server response time, "
            "using CDN, and enabling caching"
        )
    elif ttfb_status == VitalStatus.NEEDS_IMPROVEMENT:
        recommendations.append(f"TTFB could be faster: {field.ttfb_ms:.0f}ms (target: <800ms)")

    return CoreWebVitals(
        lcp_status=lcp_status,
        cls_status=cls_status,
        inp_status=inp_status,
        ttfb_status=ttfb_status,
    )


def analyze_performance(
    perf: PerformanceData, field: Optional[FieldPerformance] = None
) -> PerformanceAnalysis:
    issues: List[str] = []
    recommendations: List[str] = []

    html_size = classify_html_size(perf.html_size_bytes)
    if html_size == HtmlSizeCategory.FAIR:
        issues.append(f"HTML size is {_kb(perf.html_size_bytes)} KB")
        recommendations.append("Consider reducing HTML size through minification and removing unused code")
    elif html_size == HtmlSizeCategory.POOR:
        issues.append(f"Large HTML size: {_kb(perf.html_size_bytes)} KB")
        recommendations.append("Significantly reduce HTML payload - consider lazy loading content")

    script_load = classify_scripts(perf.num_scripts)
    if script_load == ScriptLoadCategory.HEAVY:
        issues.append(f"{perf.num_scripts} JavaScript files loaded")
        recommendations.append("Consolidate and minify JavaScript files")

    # Independent of the script-count bucket
    if perf.blocking_scripts > 0:
        issues.append(f"{perf.blocking_scripts} blocking scripts in <head>")
        recommendations.append("Add async or defer attributes to scripts, or move them to bottom of page")

    images = classify_images(perf)
    if images == ImageOptimization.GOOD:
        recommendations.append("Increase usage of WebP/AVIF image formats")
    elif images == ImageOptimization.POOR:
        issues.append(f"Most images use legacy formats (JPEG/PNG: {perf.image_formats.legacy})")
        recommendations.append("Convert images to WebP or AVIF for better compression")

    caching = classify_caching(perf)
    if caching == CachingStatus.PARTIAL:
        recommendations.append("Review and optimize cache-control headers")
    elif caching == CachingStatus.NONE:
        issues.append("No caching headers detected")
        recommendations.append("Implement cache-control headers for static assets")

    vitals = None
    if field is not None:
        vitals = _analyze_vitals(field, issues, recommendations)

    return PerformanceAnalysis(
        html_size_category=html_size,
        script_load_category=script_load,
        image_optimization=images,
        caching=caching,
        core_web_vitals=vitals,
        issues=issues,
        recommendations=recommendations,
    )
