"""
Audit orchestration.
Fetches the site, builds the observations and hands them to the scoring
pipeline. All network I/O of an audit run happens here.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional, Tuple, Union

import httpx
import structlog

from wpaudit.collectors.page import PageCollector
from wpaudit.collectors.site import SiteCollector
from wpaudit.core.config import settings
from wpaudit.core.exceptions import EmptyObservationsError
from wpaudit.core.logging import get_logger
from wpaudit.crawler.fetcher import FetchResult, PageFetcher
from wpaudit.crawler.pagespeed import FieldPerformanceCache, PageSpeedClient
from wpaudit.crawler.robots import RobotsChecker
from wpaudit.crawler.sitemap import SitemapParser, select_top_pages
from wpaudit.crawler.urls import normalize_base_url, page_url
from wpaudit.models import (
    HOMEPAGE_PATHS,
    FieldPerformance,
    ModernizationData,
    PageObservation,
    WordPressDetection,
)
from wpaudit.pipeline.audit import AuditAborted, ScoredAudit, score_observations

logger = get_logger(__name__)


@dataclass
class AuditConfig:
    url: str
    pages: List[str] = field(default_factory=lambda: ["/"])
    auto_pages: bool = False
    max_pages: int = settings.AUDIT_MAX_PAGES
    api_url: Optional[str] = None
    pagespeed_key: Optional[str] = None
    strategy: str = settings.PAGESPEED_STRATEGY


@dataclass
class AuditReport:
    url: str
    generated_at: str
    pages: List[PageObservation]
    wordpress: WordPressDetection
    modernization: ModernizationData
    result: ScoredAudit
    field_performance: Optional[FieldPerformance] = None
    failed_paths: List[str] = field(default_factory=list)


def normalize_paths(paths: List[str]) -> List[str]:
    """Leading slash on every path, duplicates dropped, order kept."""
    normalized: List[str] = []
    for path in paths:
        path = (path or "/").strip()
        if not path.startswith(("/", "?")):
            path = "/" + path
        if path not in normalized:
            normalized.append(path)
    return normalized or ["/"]


async def resolve_paths(config: AuditConfig, base_url: str, fetcher: PageFetcher, robots: RobotsChecker) -> List[str]:
    if config.auto_pages:
        parser = SitemapParser(base_url, fetcher, extra_locations=robots.get_sitemaps())
        selected = select_top_pages(await parser.fetch_entries(), config.max_pages)
        if selected:
            logger.info("Pages selected from sitemap", pages=selected)
            return normalize_paths(selected)
        logger.warning("No sitemap pages found, falling back to explicit pages", pages=config.pages)
    return normalize_paths(config.pages)


def homepage_body(paths: List[str], results: List[FetchResult]) -> Optional[str]:
    """HTML of the audited homepage, when it was requested and fetched."""
    for path, result in zip(paths, results):
        if path in HOMEPAGE_PATHS and result.is_success:
            return result.body
    return None


async def lookup_field_performance(
    observations: List[PageObservation],
    client: PageSpeedClient,
    strategy: str,
) -> Tuple[List[PageObservation], Optional[FieldPerformance]]:
    """
    Fetch field performance for the site, trying the homepage first.

    The first successful result is attached to the page it was measured on
    and returned; it scores for the whole site whichever page that was.
    """
    candidates = sorted(range(len(observations)), key=lambda i: not observations[i].is_homepage)
    for index in candidates[: settings.PAGESPEED_MAX_PAGES]:
        vitals = await client.analyze(observations[index].url, strategy)
        if vitals is not None:
            if not observations[index].is_homepage:
                logger.info("Field performance taken from a non-homepage page", path=observations[index].path)
            updated = list(observations)
            updated[index] = replace(observations[index], field_performance=vitals)
            return updated, vitals
    return observations, None


async def run_audit(
    config: AuditConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Union[AuditReport, AuditAborted]:
    """
    Run a complete audit of `config.url`.
    Raises ValidationError for a malformed URL; returns AuditAborted when
    none of the requested pages could be fetched.
    """
    base_url = normalize_base_url(config.url)
    with structlog.contextvars.bound_contextvars(site=base_url):
        return await _audit_site(config, base_url, transport)


async def _audit_site(
    config: AuditConfig,
    base_url: str,
    transport: Optional[httpx.AsyncBaseTransport],
) -> Union[AuditReport, AuditAborted]:
    logger.info("Audit started", auto_pages=config.auto_pages)

    async with PageFetcher(transport=transport) as fetcher:
        robots = RobotsChecker(base_url, fetcher)
        await robots.fetch()

        paths = await resolve_paths(config, base_url, fetcher, robots)
        for path in paths:
            if not robots.is_allowed(page_url(base_url, path)):
                logger.warning("Path disallowed by robots.txt, auditing anyway", path=path)

        site = SiteCollector(base_url, fetcher, api_url=config.api_url)
        has_sitemap = await site.check_file("/sitemap.xml")

        results = await fetcher.fetch_many([page_url(base_url, path) for path in paths])
        failed_paths = [path for path, result in zip(paths, results) if not result.is_success]

        collector = PageCollector(has_robots_txt=robots.exists, has_sitemap=has_sitemap)
        observations = collector.collect_many(paths, results)
        if not observations:
            reason = EmptyObservationsError().message
            logger.error("Audit aborted", reason=reason, failed_paths=failed_paths)
            return AuditAborted(reason=reason, failed_paths=failed_paths)

        html = homepage_body(paths, results)
        if html is None:
            first_body = next(result.body for result in results if result.is_success)
            html = await site.homepage_html(fallback=first_body)
        wordpress = await site.detect_wordpress(html)
        modernization = await site.probe_modernization(html)

    cache = FieldPerformanceCache()
    client = PageSpeedClient(api_key=config.pagespeed_key, cache=cache, transport=transport)
    vitals = None
    if client.enabled:
        observations, vitals = await lookup_field_performance(observations, client, config.strategy)
    cache.clear()

    outcome = score_observations(observations, modernization, field=vitals, failed_paths=failed_paths)
    if isinstance(outcome, AuditAborted):
        return outcome

    return AuditReport(
        url=base_url,
        generated_at=datetime.now(timezone.utc).isoformat(),
        pages=observations,
        wordpress=wordpress,
        modernization=modernization,
        result=outcome,
        field_performance=outcome.aggregated.field_performance,
        failed_paths=failed_paths,
    )
