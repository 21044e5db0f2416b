"""
SEO analyzer.

Title, meta description and H1 are classified from weighted coverage.
A single audited page is the degenerate case: its coverage is 1.0 when
the feature is present and 0.0 when it is not, and it goes through the
same buckets as a multi-page run. Only the wording of the issues
differs between the two.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from wpaudit.aggregator.aggregator import AggregatedCoverage, SeoObservation, SinglePage
from wpaudit.models import CoverageQuality, H1Quality, SeoAnalysis

EXCELLENT_COVERAGE = 0.95
GOOD_COVERAGE = 0.7

TITLE_LENGTH_RANGE = (30, 60)
META_LENGTH_RANGE = (120, 160)

H1_BUCKETS = {
    "excellent": H1Quality.EXCELLENT,
    "good": H1Quality.ISSUES,
    "missing": H1Quality.MISSING,
}


@dataclass(frozen=True)
class SeoCoverage:
    total_pages: int
    title: float
    meta: float
    h1: float
    canonical: float
    has_robots_txt: bool
    has_sitemap: bool
    example_title: Optional[str] = None
    example_meta: Optional[str] = None
    example_h1_tags: Tuple[str, ...] = ()


def _presence(flag: bool) -> float:
    return 1.0 if flag else 0.0


def coverage_of(observation: SeoObservation) -> SeoCoverage:
    if isinstance(observation, SinglePage):
        seo = observation.page.seo
        return SeoCoverage(
            total_pages=1,
            title=_presence(seo.has_title),
            meta=_presence(seo.has_meta_description),
            h1=_presence(seo.has_single_h1),
            canonical=_presence(seo.has_canonical),
            has_robots_txt=seo.has_robots_txt,
            has_sitemap=seo.has_sitemap,
            example_title=seo.title,
            example_meta=seo.meta_description,
            example_h1_tags=seo.h1_tags,
        )
    if isinstance(observation, AggregatedCoverage):
        return SeoCoverage(
            total_pages=observation.total_pages,
            title=observation.title_coverage,
            meta=observation.meta_coverage,
            h1=observation.h1_coverage,
            canonical=observation.canonical_coverage,
            has_robots_txt=observation.has_robots_txt,
            has_sitemap=observation.has_sitemap,
            example_title=observation.title,
            example_meta=observation.meta_description,
            example_h1_tags=observation.h1_tags,
        )
    raise TypeError(f"Unsupported SEO observation: {type(observation).__name__}")


def coverage_bucket(coverage: float) -> str:
    """Return "excellent", "good" or "missing" for a coverage ratio."""
    if coverage >= EXCELLENT_COVERAGE:
        return "excellent"
    if coverage >= GOOD_COVERAGE:
        return "good"
    return "missing"


def missing_percent(coverage: float) -> int:
    return int((1 - coverage) * 100 + 0.5)


def _analyze_title(cov: SeoCoverage, issues: List[str], recommendations: List[str]) -> CoverageQuality:
    bucket = coverage_bucket(cov.title)
    if cov.total_pages == 1:
        if bucket == "missing":
            issues.append("Page title is missing")
            recommendations.append("Add a descriptive, keyword-rich title tag to every page")
    elif bucket == "good":
        issues.append(f"{missing_percent(cov.title)}% of pages are missing title tags")
        recommendations.append("Add descriptive, keyword-rich title tags to all pages")
    elif bucket == "missing":
        issues.append(f"{missing_percent(cov.title)}% of pages are missing title tags")
        recommendations.append("Critically: Many pages lack title tags. Add unique titles to every page")

    if cov.example_title:
        low, high = TITLE_LENGTH_RANGE
        if len(cov.example_title) < low:
            recommendations.append(
                "Title is short - consider adding more descriptive keywords (aim for 50-60 characters)"
            )
        elif len(cov.example_title) > high:
            recommendations.append(
                "Title is long and may be truncated in search results (aim for 50-60 characters)"
            )
    return CoverageQuality(bucket)


def _analyze_meta(cov: SeoCoverage, issues: List[str], recommendations: List[str]) -> CoverageQuality:
    bucket = coverage_bucket(cov.meta)
    if cov.total_pages == 1:
        if bucket == "missing":
            issues.append("Meta description is missing")
            recommendations.append(
                "Add unique meta descriptions to improve click-through rates (aim for 150-160 characters)"
            )
    elif bucket == "good":
        issues.append(f"{missing_percent(cov.meta)}% of pages are missing meta descriptions")
        recommendations.append("Add unique meta descriptions to all pages (aim for 150-160 characters)")
    elif bucket == "missing":
        issues.append(f"{missing_percent(cov.meta)}% of pages are missing meta descriptions")
        recommendations.append(
            "Critically: Many pages lack meta descriptions. Add unique descriptions to improve click-through rates"
        )

    if cov.example_meta:
        low, high = META_LENGTH_RANGE
        if len(cov.example_meta) < low:
            recommendations.append("Meta description could be more detailed")
        elif len(cov.example_meta) > high:
            recommendations.append("Meta description may be truncated (keep under 160 characters)")
    return CoverageQuality(bucket)


def _analyze_h1(cov: SeoCoverage, issues: List[str], recommendations: List[str]) -> H1Quality:
    bucket = coverage_bucket(cov.h1)
    if cov.total_pages == 1:
        if bucket == "missing":
            count = len(cov.example_h1_tags)
            if count == 0:
                issues.append("No H1 heading found")
                recommendations.append("Add exactly one H1 heading per page for better structure")
            else:
                issues.append(f"Multiple H1 tags found ({count})")
                recommendations.append("Use only one H1 per page; use H2-H6 for subheadings")
    elif bucket == "good":
        issues.append(f"{missing_percent(cov.h1)}% of pages have missing or multiple H1 tags")
        recommendations.append("Ensure every page has exactly one H1 heading")
    elif bucket == "missing":
        issues.append(f"{missing_percent(cov.h1)}% of pages have missing or multiple H1 tags")
        recommendations.append("Critically: Fix H1 structure - every page needs exactly one H1")
    return H1_BUCKETS[bucket]


def analyze_seo(observation: SeoObservation) -> SeoAnalysis:
    issues: List[str] = []
    recommendations: List[str] = []
    cov = coverage_of(observation)

    title_quality = _analyze_title(cov, issues, recommendations)
    meta_quality = _analyze_meta(cov, issues, recommendations)
    h1_quality = _analyze_h1(cov, issues, recommendations)

    has_canonical = cov.canonical > 0
    if not has_canonical:
        recommendations.append("Add canonical tags to prevent duplicate content issues")

    if not cov.has_robots_txt:
        issues.append("No robots.txt file found")
        recommendations.append("Create robots.txt to guide search engine crawlers")

    if not cov.has_sitemap:
        issues.append("No sitemap.xml found")
        recommendations.append("Generate and submit an XML sitemap to search engines")

    return SeoAnalysis(
        title_quality=title_quality,
        meta_description_quality=meta_quality,
        h1_quality=h1_quality,
        has_canonical=has_canonical,
        has_robots_txt=cov.has_robots_txt,
        has_sitemap=cov.has_sitemap,
        issues=issues,
        recommendations=recommendations,
    )
