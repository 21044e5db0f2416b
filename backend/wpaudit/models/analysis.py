"""
Classification buckets, per-category analyses and the scoring result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class HtmlSizeCategory(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class ScriptLoadCategory(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    HEAVY = "heavy"


class ImageOptimization(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    POOR = "poor"


class CachingStatus(str, Enum):
    EXCELLENT = "excellent"
    PARTIAL = "partial"
    NONE = "none"


class VitalStatus(str, Enum):
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"


class CoverageQuality(str, Enum):
    """Bucket for title and meta description coverage."""
    EXCELLENT = "excellent"
    GOOD = "good"
    MISSING = "missing"


class H1Quality(str, Enum):
    EXCELLENT = "excellent"
    ISSUES = "issues"
    MISSING = "missing"


class HttpsStatus(str, Enum):
    SECURE = "secure"
    INSECURE = "insecure"


class HeadersCoverage(str, Enum):
    EXCELLENT = "excellent"
    PARTIAL = "partial"
    NONE = "none"


class VersionExposure(str, Enum):
    HIDDEN = "hidden"
    EXPOSED = "exposed"


class SecurityPosture(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"


class RestApiStatus(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class PermalinkModernity(str, Enum):
    MODERN = "modern"
    # Not produced by the current permalink heuristic.
    MIXED = "mixed"
    LEGACY = "legacy"


class CdnUsage(str, Enum):
    YES = "yes"
    # Not produced by the current CDN heuristic.
    PARTIAL = "partial"
    NO = "no"


class HeadlessReadiness(str, Enum):
    READY = "ready"
    NEEDS_WORK = "needs-work"
    NOT_READY = "not-ready"


class Rating(str, Enum):
    HEALTHY = "healthy"
    NEEDS_OPTIMIZATION = "needs-optimization"
    NEEDS_MODERNIZATION = "needs-modernization"
    LEGACY = "legacy"


@dataclass
class CoreWebVitals:
    lcp_status: VitalStatus
    cls_status: VitalStatus
    inp_status: VitalStatus
    ttfb_status: VitalStatus

    def to_dict(self) -> Dict[str, str]:
        return {
            "lcpStatus": self.lcp_status.value,
            "clsStatus": self.cls_status.value,
            "inpStatus": self.inp_status.value,
            "ttfbStatus": self.ttfb_status.value,
        }


@dataclass
class PerformanceAnalysis:
    html_size_category: HtmlSizeCategory
    script_load_category: ScriptLoadCategory
    image_optimization: ImageOptimization
    caching: CachingStatus
    core_web_vitals: Optional[CoreWebVitals] = None
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def details(self) -> Dict[str, Any]:
        details = {
            "htmlSizeCategory": self.html_size_category.value,
            "scriptLoadCategory": self.script_load_category.value,
            "imageOptimization": self.image_optimization.value,
            "caching": self.caching.value,
        }
        if self.core_web_vitals is not None:
            details["coreWebVitals"] = self.core_web_vitals.to_dict()
        return details


@dataclass
class SeoAnalysis:
    title_quality: CoverageQuality
    meta_description_quality: CoverageQuality
    h1_quality: H1Quality
    has_canonical: bool
    has_robots_txt: bool
    has_sitemap: bool
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def details(self) -> Dict[str, Any]:
        return {
            "titleQuality": self.title_quality.value,
            "metaDescriptionQuality": self.meta_description_quality.value,
            "h1Quality": self.h1_quality.value,
            "hasCanonical": self.has_canonical,
            "hasRobotsTxt": self.has_robots_txt,
            "hasSitemap": self.has_sitemap,
        }


@dataclass
class SecurityAnalysis:
    https_status: HttpsStatus
    headers_coverage: HeadersCoverage
    version_exposure: VersionExposure
    overall_posture: SecurityPosture
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def details(self) -> Dict[str, Any]:
        return {
            "httpsStatus": self.https_status.value,
            "headersCoverage": self.headers_coverage.value,
            "versionExposure": self.version_exposure.value,
            "overallPosture": self.overall_posture.value,
        }


@dataclass
class ModernizationAnalysis:
    rest_api_status: RestApiStatus
    permalink_modernity: PermalinkModernity
    cdn_usage: CdnUsage
    headless_readiness: HeadlessReadiness
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def details(self) -> Dict[str, Any]:
        return {
            "restApiStatus": self.rest_api_status.value,
            "permalinkModernity": self.permalink_modernity.value,
            "cdnUsage": self.cdn_usage.value,
            "headlessReadiness": self.headless_readiness.value,
        }


@dataclass
class CategoryAnalyses:
    performance: PerformanceAnalysis
    seo: SeoAnalysis
    security: SecurityAnalysis
    modernization: ModernizationAnalysis


@dataclass(frozen=True)
class ScoringResult:
    """
    Category sub-scores, their sum and the rating band.

    `overall` is the plain sum. With a field-performance bonus the
    performance sub-score may reach 41 and `overall` may exceed 100.
    """
    performance: int
    seo: int
    security: int
    modernization: int
    overall: int
    rating: Rating
    performance_bonus: int = 0
    performance_max: int = 30
    breakdown: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "performance": self.performance,
            "seo": self.seo,
            "security": self.security,
            "modernization": self.modernization,
            "rating": self.rating.value,
            "performanceBonus": self.performance_bonus,
        }
