"""
Page collector.
Turns one successfully fetched page into a PageObservation:
- SEO fields (title, meta description, canonical, H1s)
- Performance counts (HTML size, scripts, stylesheets, image formats, caching)
- Security flags (HTTPS, headers, exposed WordPress version)
"""

import re
from typing import Dict, List

from bs4 import BeautifulSoup, Tag

from wpaudit.core.exceptions import CollectorError
from wpaudit.core.logging import get_logger
from wpaudit.crawler.fetcher import FetchResult
from wpaudit.models import (
    ImageFormats,
    PageObservation,
    PerformanceData,
    SecurityData,
    SeoData,
)

logger = get_logger(__name__)

IMAGE_FORMAT_PATTERNS = {
    "jpeg": re.compile(r"\.jpe?g", re.I),
    "png": re.compile(r"\.png", re.I),
    "webp": re.compile(r"\.webp", re.I),
    "avif": re.compile(r"\.avif", re.I),
    "svg": re.compile(r"\.svg", re.I),
    "gif": re.compile(r"\.gif", re.I),
}

SECURITY_HEADER_KEYS = (
    "strict-transport-security",
    "x-content-type-options",
    "x-frame-options",
    "content-security-policy",
    "x-xss-protection",
    "referrer-policy",
    "permissions-policy",
)

WP_VERSION_PATTERN = re.compile(r"WordPress\s+[\d.]+", re.I)


def _in_head(tag: Tag) -> bool:
    return tag.find_parent("head") is not None


def extract_seo(soup: BeautifulSoup, has_robots_txt: bool, has_sitemap: bool) -> SeoData:
    """Extract title, meta description, canonical and H1 headings."""
    title = None
    title_tag = soup.find("title")
    if title_tag is not None:
        title = title_tag.get_text().strip() or None

    meta_description = None
    meta_desc = soup.find("meta", attrs={"name": re.compile("^description$", re.I)})
    if meta_desc is not None and meta_desc.get("content"):
        meta_description = meta_desc["content"].strip() or None

    canonical_url = None
    canonical = soup.find("link", attrs={"rel": "canonical"})
    if canonical is not None and canonical.get("href"):
        canonical_url = canonical["href"].strip() or None

    h1_tags = tuple(
        text for text in (tag.get_text().strip() for tag in soup.find_all("h1")) if text
    )

    return SeoData(
        title=title,
        meta_description=meta_description,
        canonical_url=canonical_url,
        h1_tags=h1_tags,
        has_robots_txt=has_robots_txt,
        has_sitemap=has_sitemap,
    )


def count_image_formats(soup: BeautifulSoup) -> ImageFormats:
    """Count <img> tags per format; one image may count for several formats."""
    counts = dict.fromkeys(ImageFormats.FIELDS, 0)
    for img in soup.find_all("img"):
        sources = f"{img.get('src', '')} {img.get('srcset', '')}"
        for name, pattern in IMAGE_FORMAT_PATTERNS.items():
            if pattern.search(sources):
                counts[name] += 1
    return ImageFormats(**counts)


def extract_performance(soup: BeautifulSoup, html: str, headers: Dict[str, str]) -> PerformanceData:
    scripts = soup.find_all("script")
    blocking_scripts = sum(
        1 for script in scripts
        if _in_head(script)
        and script.get("src")
        and not script.has_attr("async")
        and not script.has_attr("defer")
    )

    stylesheets = soup.find_all("link", rel="stylesheet")
    blocking_stylesheets = sum(1 for link in stylesheets if _in_head(link))

    cache_control = headers.get("cache-control")

    return PerformanceData(
        html_size_bytes=len(html.encode("utf-8")),
        num_scripts=len(scripts),
        num_stylesheets=len(stylesheets),
        blocking_scripts=blocking_scripts,
        blocking_stylesheets=blocking_stylesheets,
        image_formats=count_image_formats(soup),
        has_cache_control=bool(cache_control) and "no-store" not in cache_control,
        cache_control_value=cache_control,
    )


def extract_security(url: str, html: str, headers: Dict[str, str]) -> SecurityData:
    lowered = {key.lower(): value for key, value in headers.items()}

    exposed = ("WordPress" in html and WP_VERSION_PATTERN.search(html) is not None) \
        or "<!-- WordPress" in html

    return SecurityData(
        is_https=url.startswith("https://"),
        has_x_content_type_options="x-content-type-options" in lowered,
        has_x_frame_options="x-frame-options" in lowered,
        has_content_security_policy=(
            "content-security-policy" in lowered
            or "content-security-policy-report-only" in lowered
        ),
        exposed_wp_version=exposed,
        security_headers={key: lowered[key] for key in SECURITY_HEADER_KEYS if lowered.get(key)},
    )


class PageCollector:
    """
    Builds PageObservations from fetch results.
    Site-level robots.txt / sitemap flags are resolved once per run and
    copied onto every page.
    """

    def __init__(self, has_robots_txt: bool = False, has_sitemap: bool = False):
        self.has_robots_txt = has_robots_txt
        self.has_sitemap = has_sitemap

    def collect(self, path: str, result: FetchResult) -> PageObservation:
        if not result.is_success:
            raise CollectorError(
                f"Cannot collect observations from a failed fetch of {result.url}",
                detail=result.error or f"HTTP {result.status_code}",
            )

        soup = BeautifulSoup(result.body, "lxml")
        # HTTPS is judged on the URL reached after redirects
        page_url = result.final_url or result.url

        observation = PageObservation(
            path=path,
            url=page_url,
            status_code=result.status_code,
            seo=extract_seo(soup, self.has_robots_txt, self.has_sitemap),
            performance=extract_performance(soup, result.body, result.headers),
            security=extract_security(page_url, result.body, result.headers),
        )
        logger.debug(
            "Collected page",
            path=path,
            title=bool(observation.seo.title),
            h1s=len(observation.seo.h1_tags),
            scripts=observation.performance.num_scripts,
            html_bytes=observation.performance.html_size_bytes,
        )
        return observation

    def collect_many(self, paths: List[str], results: List[FetchResult]) -> List[PageObservation]:
        """Collect every successful result; failures are logged and skipped."""
        observations: List[PageObservation] = []
        for path, result in zip(paths, results):
            if not result.is_success:
                logger.warning(
                    "Skipping page",
                    path=path,
                    status=result.status_code,
                    error=result.error,
                )
                continue
            observations.append(self.collect(path, result))
        return observations

