"""
Unit tests for the crawler layer.

Tests:
- PageFetcher retries, redirects and batch ordering
- Per-host rate limiting
- robots.txt parsing
- Sitemap discovery and page selection
- URL helpers
"""
import time

import httpx
import pytest
from bs4 import BeautifulSoup

from tests.conftest import quiet_fetcher, route_handler
from wpaudit.core.exceptions import ValidationError
from wpaudit.crawler.fetcher import PageFetcher, flatten_headers
from wpaudit.crawler.rate_limiter import HostRateLimiter
from wpaudit.crawler.robots import RobotsChecker
from wpaudit.crawler.sitemap import (
    SitemapEntry,
    SitemapParser,
    parse_urlset,
    select_top_pages,
)
from wpaudit.crawler.urls import host_of, normalize_base_url, page_url

URLSET = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/</loc><priority>1.0</priority></url>
  <url><loc>https://example.com/about/</loc><priority>0.8</priority><lastmod>2024-01-10</lastmod></url>
  <url><loc>https://example.com/blog/</loc><priority>0.8</priority><lastmod>2024-03-02T10:00:00+00:00</lastmod></url>
  <url><loc>https://example.com/wp-content/uploads/hero.jpg</loc></url>
  <url><loc>https://example.com/contact/</loc></url>
</urlset>
"""

SITEMAP_INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>https://example.com/wp-sitemap-posts-page-1.xml</loc></sitemap>
  <sitemap><loc>https://example.com/wp-sitemap-posts-post-1.xml</loc></sitemap>
</sitemapindex>
"""

PAGES_SITEMAP = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/</loc></url>
  <url><loc>https://example.com/services/</loc></url>
</urlset>
"""

POSTS_SITEMAP = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/hello-world/</loc></url>
</urlset>
"""

ROBOTS_TXT = """User-agent: *
Disallow: /wp-admin/
Allow: /wp-admin/admin-ajax.php

Sitemap: https://example.com/custom-sitemap.xml
"""


class TestPageFetcher:
    """Test the shared HTTP client."""

    async def test_successful_fetch(self):
        handler = route_handler({"/": (200, "<html>ok</html>", {"X-Powered-By": "PHP/8.2"})})

        async with quiet_fetcher(handler) as fetcher:
            result = await fetcher.fetch("https://example.com/")

        assert result.is_success is True
        assert result.status_code == 200
        assert result.body == "<html>ok</html>"
        assert result.headers["x-powered-by"] == "PHP/8.2"
        assert result.error is None

    async def test_http_error_status_is_not_an_error(self):
        async with quiet_fetcher(route_handler({})) as fetcher:
            result = await fetcher.fetch("https://example.com/missing/")

        assert result.status_code == 404
        assert result.is_success is False
        assert result.error is None

    async def test_transport_errors_are_retried(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request.url.path)
            raise httpx.ConnectError("connection refused", request=request)

        async with quiet_fetcher(handler, max_retries=3) as fetcher:
            result = await fetcher.fetch("https://example.com/")

        assert len(attempts) == 3
        assert result.status_code == 0
        assert result.is_success is False
        assert result.error == "connection refused"

    async def test_recovers_after_transient_error(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request.url.path)
            if len(attempts) == 1:
                raise httpx.ReadError("reset", request=request)
            return httpx.Response(200, text="ok")

        async with quiet_fetcher(handler, max_retries=3) as fetcher:
            result = await fetcher.fetch("https://example.com/")

        assert len(attempts) == 2
        assert result.is_success is True

    async def test_follows_redirects(self):
        handler = route_handler({
            "/old/": (301, "", {"Location": "https://example.com/new/"}),
            "/new/": (200, "moved"),
        })

        async with quiet_fetcher(handler) as fetcher:
            result = await fetcher.fetch("https://example.com/old/")

        assert result.is_success is True
        assert result.final_url == "https://example.com/new/"
        assert result.url == "https://example.com/old/"

    async def test_fetch_many_preserves_order(self):
        handler = route_handler({
            "/a/": (200, "a"),
            "/b/": (500, "b"),
            "/c/": (200, "c"),
        })

        async with quiet_fetcher(handler, max_concurrent=2) as fetcher:
            results = await fetcher.fetch_many([
                "https://example.com/a/",
                "https://example.com/b/",
                "https://example.com/c/",
            ])

        assert [r.body for r in results] == ["a", "b", "c"]
        assert [r.is_success for r in results] == [True, False, True]

    async def test_client_requires_context_manager(self):
        fetcher = PageFetcher(rate_limit_rps=0)

        with pytest.raises(RuntimeError):
            await fetcher.fetch("https://example.com/")

    def test_flatten_headers_joins_repeats(self):
        headers = httpx.Headers([("Set-Cookie", "a=1"), ("set-cookie", "b=2"), ("X-Frame-Options", "DENY")])

        assert flatten_headers(headers) == {"set-cookie": "a=1, b=2", "x-frame-options": "DENY"}


class TestHostRateLimiter:
    """Test per-host request spacing."""

    async def test_disabled_limiter_never_waits(self):
        limiter = HostRateLimiter(0)
        start = time.monotonic()

        for _ in range(20):
            await limiter.acquire("https://example.com/")

        assert limiter.min_interval == 0.0
        assert time.monotonic() - start < 0.5

    async def test_same_host_is_spaced(self):
        limiter = HostRateLimiter(20)
        start = time.monotonic()

        for _ in range(3):
            await limiter.acquire("https://example.com/")

        # Two waits of 50ms each
        assert time.monotonic() - start >= 0.08


class TestRobotsChecker:
    """Test robots.txt handling."""

    async def test_parses_rules_and_sitemaps(self):
        async with quiet_fetcher(route_handler({"/robots.txt": (200, ROBOTS_TXT)})) as fetcher:
            robots = RobotsChecker("https://example.com/", fetcher)
            await robots.fetch()

        assert robots.exists is True
        assert robots.get_sitemaps() == ["https://example.com/custom-sitemap.xml"]
        assert robots.is_allowed("https://example.com/about/") is True
        assert robots.is_allowed("https://example.com/wp-admin/options.php") is False

    async def test_missing_robots_allows_everything(self):
        async with quiet_fetcher(route_handler({})) as fetcher:
            robots = RobotsChecker("https://example.com", fetcher)
            await robots.fetch()

        assert robots.exists is False
        assert robots.get_sitemaps() == []
        assert robots.is_allowed("https://example.com/wp-admin/") is True


class TestSitemapSelection:
    """Test sitemap parsing and page selection."""

    def test_parse_urlset_drops_assets(self):
        entries = parse_urlset(BeautifulSoup(URLSET, "xml"))

        assert [entry.path for entry in entries] == ["/", "/about/", "/blog/", "/contact/"]
        assert entries[0].priority == 1.0
        assert entries[3].priority is None

    def test_priority_then_lastmod(self):
        entries = parse_urlset(BeautifulSoup(URLSET, "xml"))

        assert select_top_pages(entries, 4) == ["/", "/blog/", "/about/", "/contact/"]

    def test_max_pages_limit(self):
        entries = parse_urlset(BeautifulSoup(URLSET, "xml"))

        assert select_top_pages(entries, 2) == ["/", "/blog/"]

    def test_homepage_always_first(self):
        entries = [
            SitemapEntry("https://example.com/pricing/", priority=1.0),
            SitemapEntry("https://example.com/", priority=0.1),
        ]

        assert select_top_pages(entries, 2) == ["/", "/pricing/"]

    def test_entry_path_keeps_query(self):
        assert SitemapEntry("https://example.com/?page_id=4").path == "/?page_id=4"
        assert SitemapEntry("https://example.com").path == "/"


class TestSitemapParser:
    """Test sitemap discovery."""

    async def test_first_parseable_sitemap(self):
        async with quiet_fetcher(route_handler({"/sitemap.xml": (200, URLSET)})) as fetcher:
            entries = await SitemapParser("https://example.com", fetcher).fetch_entries()

        assert len(entries) == 4

    async def test_sitemap_index_is_followed(self):
        handler = route_handler({
            "/sitemap_index.xml": (200, SITEMAP_INDEX),
            "/wp-sitemap-posts-page-1.xml": (200, PAGES_SITEMAP),
            "/wp-sitemap-posts-post-1.xml": (200, POSTS_SITEMAP),
        })

        async with quiet_fetcher(handler) as fetcher:
            entries = await SitemapParser("https://example.com", fetcher).fetch_entries()

        assert [entry.path for entry in entries] == ["/", "/services/", "/hello-world/"]

    async def test_nested_sitemaps_are_capped(self):
        handler = route_handler({
            "/sitemap_index.xml": (200, SITEMAP_INDEX),
            "/wp-sitemap-posts-page-1.xml": (200, PAGES_SITEMAP),
            "/wp-sitemap-posts-post-1.xml": (200, POSTS_SITEMAP),
        })

        async with quiet_fetcher(handler) as fetcher:
            entries = await SitemapParser("https://example.com", fetcher, max_nested=1).fetch_entries()

        assert [entry.path for entry in entries] == ["/", "/services/"]

    async def test_robots_hint_is_tried_last(self):
        handler = route_handler({"/custom-sitemap.xml": (200, POSTS_SITEMAP)})

        async with quiet_fetcher(handler) as fetcher:
            parser = SitemapParser(
                "https://example.com", fetcher, extra_locations=["https://example.com/custom-sitemap.xml"]
            )
            entries = await parser.fetch_entries()

        assert parser.candidate_urls()[-1] == "https://example.com/custom-sitemap.xml"
        assert [entry.path for entry in entries] == ["/hello-world/"]

    async def test_no_sitemap(self):
        async with quiet_fetcher(route_handler({"/sitemap.xml": (200, "<html>not xml</html>")})) as fetcher:
            entries = await SitemapParser("https://example.com", fetcher).fetch_entries()

        assert entries == []


class TestUrlHelpers:
    """Test URL normalization."""

    def test_normalize_base_url(self):
        assert normalize_base_url("https://example.com/blog/?x=1") == "https://example.com"
        assert normalize_base_url("  http://example.com:8080/  ") == "http://example.com:8080"

    @pytest.mark.parametrize("url", ["example.com", "ftp://example.com", "", "https://"])
    def test_invalid_urls(self, url):
        with pytest.raises(ValidationError):
            normalize_base_url(url)

    def test_page_url(self):
        assert page_url("https://example.com", "/about/") == "https://example.com/about/"
        assert page_url("https://example.com/", "about/") == "https://example.com/about/"
        assert page_url("https://example.com", "/?p=1") == "https://example.com/?p=1"

    def test_host_of(self):
        assert host_of("https://WWW.Example.com:8443/path") == "www.example.com"
        assert host_of("https://cdn.shop.example.co.uk/a.png") == "cdn.shop.example.co.uk"
        assert host_of("http://localhost:8000/") == "localhost"
