"""
Site scorer.
Applies the point tables to the four category analyses and classifies
the sum into a rating band.
"""

from typing import Any, Dict

from wpaudit.core.logging import get_logger
from wpaudit.models import CategoryAnalyses, ScoringResult
from wpaudit.scorer.rules import (
    PERFORMANCE_MAX,
    PERFORMANCE_MAX_WITH_BONUS,
    clamp,
    get_rating,
    score_modernization,
    score_performance,
    score_security,
    score_seo,
    score_vitals_bonus,
)

logger = get_logger(__name__)


class SiteScorer:
    """
    Computes the 0-100 modernization score.

    Category weights are fixed by the point tables:
    - Performance: 30 (41 with the Core Web Vitals bonus)
    - SEO: 25
    - Security: 25
    - Modernization: 20

    Stateless; one instance can score any number of audits.
    """

    def score(self, analyses: CategoryAnalyses) -> ScoringResult:
        breakdown: Dict[str, Any] = {}

        performance, breakdown["performance"] = score_performance(analyses.performance)
        bonus = 0
        performance_max = PERFORMANCE_MAX
        if analyses.performance.core_web_vitals is not None:
            bonus, breakdown["core_web_vitals"] = score_vitals_bonus(analyses.performance.core_web_vitals)
            performance_max = PERFORMANCE_MAX_WITH_BONUS
        performance = clamp(performance + bonus, 0, performance_max)

        seo, breakdown["seo"] = score_seo(analyses.seo)
        security, breakdown["security"] = score_security(analyses.security)
        modernization, breakdown["modernization"] = score_modernization(analyses.modernization)

        # Not re-clamped: the bonus may push the sum past 100.
        overall = performance + seo + security + modernization
        rating = get_rating(overall)

        logger.debug(
            "Scored audit",
            performance=performance,
            performance_bonus=bonus,
            seo=seo,
            security=security,
            modernization=modernization,
            overall=overall,
            rating=rating.value,
        )

        return ScoringResult(
            performance=performance,
            seo=seo,
            security=security,
            modernization=modernization,
            overall=overall,
            rating=rating,
            performance_bonus=bonus,
            performance_max=performance_max,
            breakdown=breakdown,
        )
