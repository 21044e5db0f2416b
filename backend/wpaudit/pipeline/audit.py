"""
Scoring pipeline.
Aggregator -> Analyzers -> Scorer -> top issues, with no I/O.

The empty-input case is returned as an AuditAborted value rather than a
zero score, so callers must branch on the result type.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Union

from wpaudit.aggregator.aggregator import AggregatedObservation, aggregate
from wpaudit.analyzer.modernization import analyze_modernization
from wpaudit.analyzer.performance import analyze_performance
from wpaudit.analyzer.security import analyze_security
from wpaudit.analyzer.seo import analyze_seo
from wpaudit.core.exceptions import EmptyObservationsError
from wpaudit.core.logging import get_logger
from wpaudit.models import (
    CategoryAnalyses,
    FieldPerformance,
    ModernizationData,
    PageObservation,
    ScoringResult,
)
from wpaudit.recommendations.engine import RecommendationEngine, TopIssue
from wpaudit.scorer.scorer import SiteScorer

logger = get_logger(__name__)


@dataclass
class ScoredAudit:
    aggregated: AggregatedObservation
    analyses: CategoryAnalyses
    scores: ScoringResult
    top_issues: List[TopIssue]
    next_steps: str


@dataclass
class AuditAborted:
    """No page could be audited; there is deliberately no score."""
    reason: str
    failed_paths: List[str] = field(default_factory=list)


AuditOutcome = Union[ScoredAudit, AuditAborted]


def analyze_all(
    aggregated: AggregatedObservation,
    modernization: ModernizationData,
    field_performance: Optional[FieldPerformance] = None,
) -> CategoryAnalyses:
    """Run the four category analyzers on one representative observation."""
    return CategoryAnalyses(
        performance=analyze_performance(aggregated.performance, field_performance),
        seo=analyze_seo(aggregated.seo),
        security=analyze_security(aggregated.security),
        modernization=analyze_modernization(modernization),
    )


def score_observations(
    pages: List[PageObservation],
    modernization: ModernizationData,
    field: Optional[FieldPerformance] = None,
    scorer: Optional[SiteScorer] = None,
    engine: Optional[RecommendationEngine] = None,
    failed_paths: Optional[List[str]] = None,
) -> AuditOutcome:
    """
    Score a set of page observations.

    `field` overrides the field-performance record selected from the pages.
    Returns AuditAborted when `pages` is empty.
    """
    scorer = scorer or SiteScorer()
    engine = engine or RecommendationEngine()

    try:
        aggregated = aggregate(pages)
    except EmptyObservationsError as e:
        logger.error("Audit aborted", reason=e.message, failed_paths=failed_paths or [])
        return AuditAborted(reason=e.message, failed_paths=list(failed_paths or []))

    if field is not None:
        aggregated = replace(aggregated, field_performance=field)
    analyses = analyze_all(aggregated, modernization, aggregated.field_performance)
    scores = scorer.score(analyses)

    logger.info(
        "Audit scored",
        pages=aggregated.page_count,
        score=scores.overall,
        rating=scores.rating.value,
    )

    return ScoredAudit(
        aggregated=aggregated,
        analyses=analyses,
        scores=scores,
        top_issues=engine.top_issues(analyses),
        next_steps=engine.next_steps(scores.rating),
    )
