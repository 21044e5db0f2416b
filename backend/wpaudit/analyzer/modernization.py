"""
Modernization analyzer - REST API, permalinks, CDN and headless readiness.

Permalink detection and CDN detection are both binary heuristics, so the
"mixed" permalink bucket and the "partial" CDN bucket are never produced
here even though the point tables price them.
"""

from typing import List

from wpaudit.models import (
    CdnUsage,
    HeadlessReadiness,
    ModernizationAnalysis,
    ModernizationData,
    PermalinkModernity,
    RestApiStatus,
)


def analyze_modernization(mod: ModernizationData) -> ModernizationAnalysis:
    issues: List[str] = []
    recommendations: List[str] = []

    if mod.has_rest_api and mod.has_posts_endpoint and mod.has_pages_endpoint:
        rest_api = RestApiStatus.FULL
    elif mod.has_rest_api:
        rest_api = RestApiStatus.PARTIAL
        if not mod.has_posts_endpoint:
            issues.append("Posts endpoint not accessible")
        if not mod.has_pages_endpoint:
            issues.append("Pages endpoint not accessible")
        recommendations.append("Ensure all necessary REST API endpoints are enabled and accessible")
    else:
        rest_api = RestApiStatus.NONE
        issues.append("WordPress REST API is not accessible")
        recommendations.append("Enable WordPress REST API for headless/modern architecture compatibility")

    if mod.has_pretty_permalinks:
        permalinks = PermalinkModernity.MODERN
    else:
        permalinks = PermalinkModernity.LEGACY
        issues.append("Using query-string based URLs instead of pretty permalinks")
        recommendations.append("Enable pretty permalinks for better SEO and modern URL structure")

    if mod.uses_cdn and mod.cdn_domains:
        cdn = CdnUsage.YES
    else:
        cdn = CdnUsage.NO
        issues.append("No CDN detected for static assets")
        recommendations.append("Implement a CDN to improve global performance and reduce origin server load")

    if rest_api == RestApiStatus.FULL and permalinks == PermalinkModernity.MODERN:
        readiness = HeadlessReadiness.READY
        recommendations.append("Site is well-positioned for modern/headless architecture migration")
    elif rest_api == RestApiStatus.NONE or permalinks == PermalinkModernity.LEGACY:
        readiness = HeadlessReadiness.NOT_READY
        recommendations.append("Site requires significant modernization before considering headless architecture")
    else:
        readiness = HeadlessReadiness.NEEDS_WORK
        recommendations.append("Address REST API and permalink issues to improve headless readiness")

    return ModernizationAnalysis(
        rest_api_status=rest_api,
        permalink_modernity=permalinks,
        cdn_usage=cdn,
        headless_readiness=readiness,
        issues=issues,
        recommendations=recommendations,
    )
