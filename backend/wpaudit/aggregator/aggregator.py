"""
Multi-page aggregation.

Reduces the ordered list of page observations into one representative
observation per category:

- SEO: homepage-weighted coverage of each on-page feature
- Performance: rounded arithmetic mean of the counts, caching OR-combined
- Security: first page only (headers are site-wide configuration)
- Field performance: homepage value, else first page value

Modernization is probed once per site and never passes through here.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from wpaudit.core.exceptions import EmptyObservationsError
from wpaudit.core.logging import get_logger
from wpaudit.models import (
    FieldPerformance,
    ImageFormats,
    PageObservation,
    PerformanceData,
    SecurityData,
    find_homepage,
)

logger = get_logger(__name__)

HOMEPAGE_WEIGHT = 2
PAGE_WEIGHT = 1


@dataclass(frozen=True)
class SinglePage:
    """SEO input when exactly one page was audited."""
    page: PageObservation


@dataclass(frozen=True)
class AggregatedCoverage:
    """SEO input when several pages were audited."""
    total_pages: int
    title_coverage: float
    meta_coverage: float
    h1_coverage: float
    canonical_coverage: float
    has_robots_txt: bool
    has_sitemap: bool
    title: Optional[str] = None
    meta_description: Optional[str] = None
    canonical_url: Optional[str] = None
    h1_tags: Tuple[str, ...] = ()


SeoObservation = Union[SinglePage, AggregatedCoverage]


@dataclass(frozen=True)
class AggregatedObservation:
    page_count: int
    seo: SeoObservation
    performance: PerformanceData
    security: SecurityData
    field_performance: Optional[FieldPerformance] = None


def page_weight(page: PageObservation) -> int:
    """Homepage counts double towards SEO coverage."""
    return HOMEPAGE_WEIGHT if page.is_homepage else PAGE_WEIGHT


def weighted_coverage(pages: List[PageObservation], predicate: Callable[[PageObservation], bool]) -> float:
    """Weighted fraction of pages for which `predicate` holds."""
    if not pages:
        raise EmptyObservationsError("Coverage is undefined for an empty page list")
    total = sum(page_weight(p) for p in pages)
    covered = sum(page_weight(p) for p in pages if predicate(p))
    return covered / total


def _mean(values: List[int]) -> int:
    """Arithmetic mean rounded half-up to the nearest integer."""
    n = len(values)
    return (2 * sum(values) + n) // (2 * n)


def aggregate_seo(pages: List[PageObservation]) -> SeoObservation:
    if not pages:
        raise EmptyObservationsError()
    if len(pages) == 1:
        return SinglePage(page=pages[0])

    first = pages[0].seo
    title_coverage = weighted_coverage(pages, lambda p: p.seo.has_title)
    meta_coverage = weighted_coverage(pages, lambda p: p.seo.has_meta_description)
    h1_coverage = weighted_coverage(pages, lambda p: p.seo.has_single_h1)
    canonical_coverage = weighted_coverage(pages, lambda p: p.seo.has_canonical)

    return AggregatedCoverage(
        total_pages=len(pages),
        title_coverage=title_coverage,
        meta_coverage=meta_coverage,
        h1_coverage=h1_coverage,
        canonical_coverage=canonical_coverage,
        # robots.txt and sitemap are fetched once per site
        has_robots_txt=first.has_robots_txt,
        has_sitemap=first.has_sitemap,
        title=first.title if title_coverage > 0 else None,
        meta_description=first.meta_description if meta_coverage > 0 else None,
        canonical_url=first.canonical_url if canonical_coverage > 0 else None,
        h1_tags=first.h1_tags if h1_coverage > 0 else (),
    )


def aggregate_performance(pages: List[PageObservation]) -> PerformanceData:
    if not pages:
        raise EmptyObservationsError()

    perf = [p.performance for p in pages]
    image_formats = ImageFormats(**{
        name: _mean([getattr(p.image_formats, name) for p in perf])
        for name in ImageFormats.FIELDS
    })
    cache_control_value = next((p.cache_control_value for p in perf if p.cache_control_value), None)

    return PerformanceData(
        html_size_bytes=_mean([p.html_size_bytes for p in perf]),
        num_scripts=_mean([p.num_scripts for p in perf]),
        num_stylesheets=_mean([p.num_stylesheets for p in perf]),
        blocking_scripts=_mean([p.blocking_scripts for p in perf]),
        blocking_stylesheets=_mean([p.blocking_stylesheets for p in perf]),
        image_formats=image_formats,
        has_cache_control=any(p.has_cache_control for p in perf),
        cache_control_value=cache_control_value,
    )


def aggregate_security(pages: List[PageObservation]) -> SecurityData:
    if not pages:
        raise EmptyObservationsError()
    return pages[0].security


def select_field_performance(pages: List[PageObservation]) -> Optional[FieldPerformance]:
    if not pages:
        raise EmptyObservationsError()
    homepage = find_homepage(pages)
    if homepage is not None and homepage.field_performance is not None:
        return homepage.field_performance
    return pages[0].field_performance


def aggregate(pages: List[PageObservation]) -> AggregatedObservation:
    """Combine all page observations into one observation per category."""
    if not pages:
        raise EmptyObservationsError()

    aggregated = AggregatedObservation(
        page_count=len(pages),
        seo=aggregate_seo(pages),
        performance=aggregate_performance(pages),
        security=aggregate_security(pages),
        field_performance=select_field_performance(pages),
    )
    logger.debug(
        "Aggregated page observations",
        pages=len(pages),
        paths=[p.path for p in pages],
        has_field_performance=aggregated.field_performance is not None,
    )
    return aggregated
