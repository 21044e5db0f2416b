"""
Observation records produced by the collectors.

One PageObservation per successfully fetched path, plus the site-level
records (modernization probe, WordPress detection, field performance).
All records are frozen: they are created once per fetch and only read
afterwards.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional, Tuple

HOMEPAGE_PATHS = ("/", "")


@dataclass(frozen=True)
class SeoData:
    """Raw SEO fields extracted from one page."""
    title: Optional[str] = None
    meta_description: Optional[str] = None
    canonical_url: Optional[str] = None
    h1_tags: Tuple[str, ...] = ()
    has_robots_txt: bool = False
    has_sitemap: bool = False

    @property
    def has_title(self) -> bool:
        return bool(self.title)

    @property
    def has_meta_description(self) -> bool:
        return bool(self.meta_description)

    @property
    def has_canonical(self) -> bool:
        return bool(self.canonical_url)

    @property
    def has_single_h1(self) -> bool:
        return len(self.h1_tags) == 1


@dataclass(frozen=True)
class ImageFormats:
    jpeg: int = 0
    png: int = 0
    webp: int = 0
    avif: int = 0
    svg: int = 0
    gif: int = 0

    FIELDS = ("jpeg", "png", "webp", "avif", "svg", "gif")

    @property
    def total(self) -> int:
        return sum(getattr(self, name) for name in self.FIELDS)

    @property
    def modern(self) -> int:
        return self.webp + self.avif

    @property
    def legacy(self) -> int:
        return self.jpeg + self.png

    def to_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in self.FIELDS}


@dataclass(frozen=True)
class PerformanceData:
    """Raw performance counts extracted from one page."""
    html_size_bytes: int = 0
    num_scripts: int = 0
    num_stylesheets: int = 0
    blocking_scripts: int = 0
    blocking_stylesheets: int = 0
    image_formats: ImageFormats = field(default_factory=ImageFormats)
    has_cache_control: bool = False
    cache_control_value: Optional[str] = None

    def __post_init__(self):
        for name in ("html_size_bytes", "num_scripts", "num_stylesheets",
                     "blocking_scripts", "blocking_stylesheets"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")


@dataclass(frozen=True)
class SecurityData:
    """Raw security flags for one page."""
    is_https: bool = False
    has_x_content_type_options: bool = False
    has_x_frame_options: bool = False
    has_content_security_policy: bool = False
    exposed_wp_version: bool = False
    security_headers: Dict[str, str] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class FieldPerformance:
    """Core Web Vitals from the PageSpeed Insights lookup."""
    lcp_ms: float
    cls_score: float
    inp_ms: float
    ttfb_ms: float
    performance_score: Optional[float] = None
    strategy: str = "mobile"
    fetched_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PageObservation:
    """Everything observed on one successfully fetched path."""
    path: str
    seo: SeoData
    performance: PerformanceData
    security: SecurityData
    url: str = ""
    status_code: int = 200
    field_performance: Optional[FieldPerformance] = None

    @property
    def is_homepage(self) -> bool:
        return self.path in HOMEPAGE_PATHS


@dataclass(frozen=True)
class ModernizationData:
    """Site-level probe results, computed once against the base URL."""
    has_rest_api: bool = False
    has_posts_endpoint: bool = False
    has_pages_endpoint: bool = False
    has_pretty_permalinks: bool = False
    uses_cdn: bool = False
    cdn_domains: Tuple[str, ...] = ()


@dataclass(frozen=True)
class WordPressDetection:
    is_wordpress: bool = False
    wp_version: Optional[str] = None
    theme_name: Optional[str] = None
    plugins: Tuple[str, ...] = ()
    detection_methods: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detected": self.is_wordpress,
            "version": self.wp_version,
            "theme": self.theme_name,
            "plugins": list(self.plugins),
            "detectionMethods": list(self.detection_methods),
        }


def find_homepage(pages: List[PageObservation]) -> Optional[PageObservation]:
    """Return the first observation for the root path, if any."""
    for page in pages:
        if page.is_homepage:
            return page
    return None
