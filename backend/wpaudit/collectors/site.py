"""
Site-level collectors.
Run once per audit against the base URL:
- WordPress detection (advisory only, never scored)
- Modernization probe (REST API, permalinks, CDN)
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from wpaudit.core.logging import get_logger
from wpaudit.crawler.fetcher import FetchResult, PageFetcher
from wpaudit.crawler.urls import host_of, page_url
from wpaudit.models import ModernizationData, WordPressDetection

logger = get_logger(__name__)

CDN_MARKERS = ("cdn", "cloudfront", "cloudflare", "fastly", "akamai")

GENERATOR_VERSION = re.compile(r"WordPress\s+([\d.]+)", re.I)
THEME_PATH = re.compile(r"/wp-content/themes/([^/]+)/")
PLUGIN_PATH = re.compile(r"/wp-content/plugins/([^/]+)/")
QUERY_PERMALINK = re.compile(r"\?(p|page_id|cat)=\d+")
PRETTY_LINK = re.compile(r'href="https?://[^"]+/[^"?]+/?"', re.I)
ASSET_URL = re.compile(r'(?:src|href)="(https?://[^"]+)"', re.I)


def parse_rest_root(result: FetchResult) -> Optional[Dict[str, Any]]:
    """The REST index document, when the response is a JSON object."""
    if not result.is_success or not result.body:
        return None
    try:
        data = json.loads(result.body)
    except ValueError:
        logger.debug("REST root is not JSON", url=result.url)
        return None
    return data if isinstance(data, dict) else None


def is_rest_index(data: Optional[Dict[str, Any]]) -> bool:
    return bool(data) and ("namespaces" in data or "routes" in data)


def detect_wordpress(html: str, rest_root: Optional[Dict[str, Any]] = None) -> WordPressDetection:
    """Fingerprint WordPress from the homepage HTML and the REST index."""
    soup = BeautifulSoup(html, "lxml")
    methods: List[str] = []
    version = None
    theme = None
    plugins: List[str] = []

    generator = soup.find("meta", attrs={"name": "generator"})
    content = generator.get("content", "") if generator is not None else ""
    if content and "wordpress" in content.lower():
        methods.append("meta-generator")
        match = GENERATOR_VERSION.search(content)
        if match:
            version = match.group(1)

    if "/wp-content/" in html or "/wp-includes/" in html:
        methods.append("wp-paths")

    for link in soup.find_all("link", rel="stylesheet"):
        match = THEME_PATH.search(link.get("href", ""))
        if match:
            theme = match.group(1)
            methods.append("theme-detection")
            break

    for tag in soup.select("script[src], link[href]"):
        match = PLUGIN_PATH.search(tag.get("src") or tag.get("href") or "")
        if match and match.group(1) not in plugins:
            plugins.append(match.group(1))

    if is_rest_index(rest_root):
        methods.append("rest-api")
        namespaces = rest_root.get("namespaces")
        if isinstance(namespaces, list) and any(str(ns).startswith("wp/v") for ns in namespaces) and not version:
            methods.append("rest-api-namespace")

    return WordPressDetection(
        is_wordpress=bool(methods),
        wp_version=version,
        theme_name=theme,
        plugins=tuple(plugins),
        detection_methods=tuple(methods),
    )


def has_pretty_permalinks(html: str) -> bool:
    """Absolute links with path segments and no ?p= / ?page_id= / ?cat= links."""
    has_query_links = QUERY_PERMALINK.search(html) is not None
    has_pretty_links = PRETTY_LINK.search(html) is not None and "?p=" not in html
    return has_pretty_links and not has_query_links


def find_cdn_domains(html: str, base_url: str) -> Tuple[str, ...]:
    """Asset hosts other than the site host that look like a CDN."""
    site_host = host_of(base_url)
    domains: List[str] = []
    for asset_url in ASSET_URL.findall(html):
        host = host_of(asset_url)
        if not host or host == site_host or host in domains:
            continue
        if any(marker in host for marker in CDN_MARKERS):
            domains.append(host)
    return tuple(domains)


class SiteCollector:
    """
    Probes the site once per run. The REST index is fetched a single time
    and shared between WordPress detection and the modernization probe.
    `api_url` overrides the REST root (e.g. a headless API host).
    """

    def __init__(self, base_url: str, fetcher: PageFetcher, api_url: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.fetcher = fetcher
        self.rest_root_url = (api_url.rstrip("/") + "/") if api_url else page_url(self.base_url, "/wp-json/")
        self._rest_root: Optional[Dict[str, Any]] = None
        self._rest_root_fetched = False

    async def rest_root(self) -> Optional[Dict[str, Any]]:
        if not self._rest_root_fetched:
            self._rest_root = parse_rest_root(await self.fetcher.fetch(self.rest_root_url))
            self._rest_root_fetched = True
        return self._rest_root

    async def check_file(self, path: str) -> bool:
        """True when `path` answers 200 on the site."""
        result = await self.fetcher.fetch(page_url(self.base_url, path))
        return result.is_success

    async def homepage_html(self, fallback: str) -> str:
        """Body of the base URL, or `fallback` when the homepage does not answer."""
        result = await self.fetcher.fetch(page_url(self.base_url, "/"))
        if result.is_success:
            return result.body
        logger.warning("Homepage unreachable; probing an audited page instead", status=result.status_code)
        return fallback

    async def detect_wordpress(self, html: str) -> WordPressDetection:
        detection = detect_wordpress(html, await self.rest_root())
        if detection.is_wordpress:
            logger.info(
                "WordPress detected",
                methods=list(detection.detection_methods),
                version=detection.wp_version,
                theme=detection.theme_name,
                plugins=len(detection.plugins),
            )
        else:
            logger.warning("WordPress not detected; auditing anyway", url=self.base_url)
        return detection

    async def probe_modernization(self, html: str) -> ModernizationData:
        rest_root = await self.rest_root()
        posts, pages = await self.fetcher.fetch_many([
            self.rest_root_url + "wp/v2/posts",
            self.rest_root_url + "wp/v2/pages",
        ])
        cdn_domains = find_cdn_domains(html, self.base_url)

        data = ModernizationData(
            has_rest_api=is_rest_index(rest_root),
            has_posts_endpoint=posts.is_success,
            has_pages_endpoint=pages.is_success,
            has_pretty_permalinks=has_pretty_permalinks(html),
            uses_cdn=bool(cdn_domains),
            cdn_domains=cdn_domains,
        )
        logger.info(
            "Modernization probe",
            rest=data.has_rest_api,
            posts=data.has_posts_endpoint,
            pages=data.has_pages_endpoint,
            pretty_permalinks=data.has_pretty_permalinks,
            cdn=data.uses_cdn,
        )
        return data
