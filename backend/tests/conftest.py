"""
Pytest configuration and fixtures for the audit tests.
"""
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from wpaudit.crawler.fetcher import PageFetcher
from wpaudit.models import (
    FieldPerformance,
    ImageFormats,
    ModernizationData,
    PageObservation,
    PerformanceData,
    SecurityData,
    SeoData,
    WordPressDetection,
)
from wpaudit.pipeline.audit import score_observations
from wpaudit.pipeline.runner import AuditReport


# ============================================================================
# Observation Factories
# ============================================================================

def make_seo(**overrides) -> SeoData:
    values = dict(
        title="Acme Widgets - Handmade Widgets Since 1999",
        meta_description=(
            "Acme builds handmade widgets for workshops and studios. Browse the "
            "catalogue, read the build notes and order spare parts online today."
        ),
        canonical_url="https://example.com/",
        h1_tags=("Acme Widgets",),
        has_robots_txt=True,
        has_sitemap=True,
    )
    values.update(overrides)
    return SeoData(**values)


def make_performance(**overrides) -> PerformanceData:
    values = dict(
        html_size_bytes=45_000,
        num_scripts=6,
        num_stylesheets=3,
        blocking_scripts=0,
        blocking_stylesheets=1,
        image_formats=ImageFormats(webp=8, svg=2),
        has_cache_control=True,
        cache_control_value="public, max-age=3600",
    )
    values.update(overrides)
    return PerformanceData(**values)


def make_security(**overrides) -> SecurityData:
    values = dict(
        is_https=True,
        has_x_content_type_options=True,
        has_x_frame_options=True,
        has_content_security_policy=True,
        exposed_wp_version=False,
    )
    values.update(overrides)
    return SecurityData(**values)


def make_page(path: str = "/", seo=None, performance=None, security=None,
              field_performance: Optional[FieldPerformance] = None) -> PageObservation:
    return PageObservation(
        path=path,
        url=f"https://example.com{path}",
        seo=seo or make_seo(),
        performance=performance or make_performance(),
        security=security or make_security(),
        field_performance=field_performance,
    )


def make_field(**overrides) -> FieldPerformance:
    values = dict(lcp_ms=1800.0, cls_score=0.05, inp_ms=150.0, ttfb_ms=400.0, performance_score=92.0)
    values.update(overrides)
    return FieldPerformance(**values)


@pytest.fixture
def perfect_page() -> PageObservation:
    """A page that earns every point in every category."""
    return make_page()


@pytest.fixture
def modern_site() -> ModernizationData:
    return ModernizationData(
        has_rest_api=True,
        has_posts_endpoint=True,
        has_pages_endpoint=True,
        has_pretty_permalinks=True,
        uses_cdn=True,
        cdn_domains=("cdn.example-cdn.com",),
    )


@pytest.fixture
def legacy_site() -> ModernizationData:
    return ModernizationData()


@pytest.fixture
def good_field() -> FieldPerformance:
    return make_field()


# ============================================================================
# HTTP Fixtures
# ============================================================================

Handler = Callable[[httpx.Request], httpx.Response]

# path -> (status, body) or (status, body, headers)
Routes = Dict[str, Tuple]


def route_handler(routes: Routes, default_status: int = 404, calls: Optional[List[str]] = None) -> Handler:
    """MockTransport handler answering by URL path; a fresh response per request."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request.url.raw_path.decode())
        route = routes.get(request.url.raw_path.decode(), routes.get(request.url.path))
        if route is None:
            return httpx.Response(default_status, text="not found")
        status, body, *rest = route
        return httpx.Response(status, text=body, headers=rest[0] if rest else {})

    return handler


def quiet_fetcher(handler: Handler, **kwargs) -> PageFetcher:
    """A fetcher that never sleeps: no rate limit, no retry backoff."""
    options = dict(max_retries=2, rate_limit_rps=0, backoff_min=0, backoff_max=0)
    options.update(kwargs)
    return PageFetcher(transport=httpx.MockTransport(handler), **options)


WORDPRESS_HOME = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Acme Widgets - Handmade Widgets Since 1999</title>
  <meta name="description" content="Acme builds handmade widgets for workshops and studios. Browse the catalogue, read the build notes and order spare parts online today.">
  <meta name="generator" content="WordPress 6.4.2">
  <link rel="canonical" href="https://example.com/">
  <link rel="stylesheet" href="https://example.com/wp-content/themes/acme-theme/style.css">
  <script src="https://example.com/wp-includes/js/jquery/jquery.min.js"></script>
</head>
<body>
  <h1>Acme Widgets</h1>
  <a href="https://example.com/about/">About</a>
  <img src="https://cdn.example-cdn.com/uploads/hero.webp">
  <img src="https://example.com/wp-content/uploads/logo.png">
  <script src="https://example.com/wp-content/plugins/contact-form-7/script.js" defer></script>
</body>
</html>
"""

SECURE_HEADERS = {
    "Content-Type": "text/html; charset=UTF-8",
    "Cache-Control": "public, max-age=600",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Content-Security-Policy": "default-src 'self'",
}


# ============================================================================
# Report Fixtures
# ============================================================================

@pytest.fixture
def sample_report(perfect_page, modern_site):
    """A finished AuditReport for a healthy two-page WordPress site."""
    pages = [perfect_page, make_page("/about/")]
    result = score_observations(pages, modern_site, failed_paths=["/gone/"])
    return AuditReport(
        url="https://www.example.com",
        generated_at="2024-05-01T12:00:00+00:00",
        pages=pages,
        wordpress=WordPressDetection(
            is_wordpress=True,
            wp_version="6.4.2",
            theme_name="acme-theme",
            plugins=("contact-form-7", "yoast-seo"),
            detection_methods=("meta-generator", "wp-paths"),
        ),
        modernization=modern_site,
        result=result,
        failed_paths=["/gone/"],
    )

PSI_RESPONSE = {
    "lighthouseResult": {
        "categories": {"performance": {"score": 0.5}},
        "audits": {
            "largest-contentful-paint": {"numericValue": 2100.5},
            "cumulative-layout-shift": {"numericValue": 0.04},
            "interaction-to-next-paint": {"numericValue": 180},
            "server-response-time": {"numericValue": 320},
        },
    }
}
