"""
Sitemap.xml discovery and parsing with support for:
- WordPress core, Yoast and generic sitemap locations
- Robots.txt sitemap hints
- Sitemap index files (nested sitemaps, capped)
- Priority / lastmod based page selection for --auto-pages
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import List, Optional, Sequence
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from wpaudit.core.config import settings
from wpaudit.core.logging import get_logger
from wpaudit.crawler.fetcher import PageFetcher

logger = get_logger(__name__)

COMMON_SITEMAP_PATHS = [
    "/sitemap_index.xml",
    "/sitemap.xml",
    "/wp-sitemap.xml",
    "/sitemap-index.xml",
]

DEFAULT_PRIORITY = 0.5

NON_HTML_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|svg|webp|mp4|avi|mov|pdf|zip)$", re.IGNORECASE)


@dataclass(frozen=True)
class SitemapEntry:
    loc: str
    priority: Optional[float] = None
    lastmod: Optional[str] = None
    changefreq: Optional[str] = None

    @property
    def path(self) -> str:
        parsed = urlparse(self.loc)
        path = parsed.path or "/"
        return f"{path}?{parsed.query}" if parsed.query else path


def _child_text(tag, name: str) -> Optional[str]:
    child = tag.find(name)
    if child is None or not child.text:
        return None
    return child.text.strip() or None


def _parse_priority(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _lastmod_timestamp(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def parse_urlset(soup: BeautifulSoup) -> List[SitemapEntry]:
    """Extract page entries from a <urlset>, dropping non-HTML assets."""
    entries: List[SitemapEntry] = []
    for tag in soup.find_all("url"):
        loc = _child_text(tag, "loc")
        if not loc or NON_HTML_PATTERN.search(loc):
            continue
        entries.append(SitemapEntry(
            loc=loc,
            priority=_parse_priority(_child_text(tag, "priority")),
            lastmod=_child_text(tag, "lastmod"),
            changefreq=_child_text(tag, "changefreq"),
        ))
    return entries


def _compare(a: SitemapEntry, b: SitemapEntry) -> int:
    priority_a = a.priority if a.priority is not None else DEFAULT_PRIORITY
    priority_b = b.priority if b.priority is not None else DEFAULT_PRIORITY
    if priority_a != priority_b:
        return -1 if priority_a > priority_b else 1

    # Most recent first, only when both sides carry a usable lastmod
    ts_a = _lastmod_timestamp(a.lastmod)
    ts_b = _lastmod_timestamp(b.lastmod)
    if ts_a is not None and ts_b is not None and ts_a != ts_b:
        return -1 if ts_a > ts_b else 1
    return 0


def select_top_pages(entries: Sequence[SitemapEntry], max_pages: int) -> List[str]:
    """
    Pick up to `max_pages` paths: highest priority first, then freshest.
    The homepage, when listed, always comes first.
    """
    ordered = sorted(entries, key=cmp_to_key(_compare))
    homepage = next((entry for entry in ordered if urlparse(entry.loc).path in ("/", "")), None)

    selected: List[str] = []
    if homepage is not None and max_pages > 0:
        selected.append(homepage.path)

    for entry in ordered:
        if len(selected) >= max_pages:
            break
        if homepage is not None and entry.loc == homepage.loc:
            continue
        if entry.path not in selected:
            selected.append(entry.path)

    return selected


class SitemapParser:
    """Discovers and parses the XML sitemap of a site."""

    def __init__(
        self,
        base_url: str,
        fetcher: PageFetcher,
        extra_locations: Sequence[str] = (),
        max_nested: int = settings.SITEMAP_MAX_NESTED,
    ):
        self.base_url = base_url.rstrip("/")
        self.fetcher = fetcher
        self.extra_locations = list(extra_locations)
        self.max_nested = max_nested

    def candidate_urls(self) -> List[str]:
        candidates = [urljoin(self.base_url + "/", path.lstrip("/")) for path in COMMON_SITEMAP_PATHS]
        for hint in self.extra_locations:
            if hint not in candidates:
                candidates.append(hint)
        return candidates

    async def fetch_entries(self) -> List[SitemapEntry]:
        """Return the entries of the first parseable sitemap, or []."""
        for sitemap_url in self.candidate_urls():
            result = await self.fetcher.fetch(sitemap_url)
            if not result.is_success or not result.body:
                continue

            soup = BeautifulSoup(result.body, "xml")
            if soup.find("sitemapindex") is not None:
                logger.info("Found sitemap index", url=sitemap_url)
                return await self._fetch_nested(soup)
            if soup.find("urlset") is not None:
                entries = parse_urlset(soup)
                logger.info("Found sitemap", url=sitemap_url, entries=len(entries))
                return entries
            logger.debug("Not a sitemap document", url=sitemap_url)

        logger.info("No sitemap found", base_url=self.base_url)
        return []

    async def _fetch_nested(self, index: BeautifulSoup) -> List[SitemapEntry]:
        locs = [loc for loc in (_child_text(tag, "loc") for tag in index.find_all("sitemap")) if loc]
        entries: List[SitemapEntry] = []
        for loc in locs[: self.max_nested]:
            result = await self.fetcher.fetch(loc)
            if not result.is_success or not result.body:
                logger.warning("Nested sitemap unavailable", url=loc, status=result.status_code)
                continue
            soup = BeautifulSoup(result.body, "xml")
            if soup.find("urlset") is not None:
                entries.extend(parse_urlset(soup))
        return entries
