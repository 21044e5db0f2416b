"""
Pydantic schemas for API request validation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from wpaudit.core.config import settings
from wpaudit.models import (
    FieldPerformance,
    ImageFormats,
    ModernizationData,
    PageObservation,
    PerformanceData,
    SecurityData,
    SeoData,
)


# ============================================================
# Audit
# ============================================================

class AuditRequest(BaseModel):
    url: str = Field(..., description="Base URL of the WordPress site")
    pages: List[str] = Field(default_factory=lambda: ["/"], description="Paths to audit")
    auto_pages: bool = Field(False, description="Select pages from the sitemap")
    max_pages: int = Field(settings.AUDIT_MAX_PAGES, ge=1, le=50, description="Page ceiling for auto_pages")
    api_url: Optional[str] = Field(None, description="REST API root override")
    strategy: str = Field(settings.PAGESPEED_STRATEGY, pattern="^(mobile|desktop)$")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            v = f"https://{v}"
        return v.rstrip("/")


# ============================================================
# Score (caller-supplied observations, no I/O)
# ============================================================

class SeoSchema(BaseModel):
    title: Optional[str] = None
    meta_description: Optional[str] = None
    canonical_url: Optional[str] = None
    h1_tags: List[str] = Field(default_factory=list)
    has_robots_txt: bool = False
    has_sitemap: bool = False

    def to_model(self) -> SeoData:
        return SeoData(
            title=self.title,
            meta_description=self.meta_description,
            canonical_url=self.canonical_url,
            h1_tags=tuple(self.h1_tags),
            has_robots_txt=self.has_robots_txt,
            has_sitemap=self.has_sitemap,
        )


class ImageFormatsSchema(BaseModel):
    jpeg: int = Field(0, ge=0)
    png: int = Field(0, ge=0)
    webp: int = Field(0, ge=0)
    avif: int = Field(0, ge=0)
    svg: int = Field(0, ge=0)
    gif: int = Field(0, ge=0)


class PerformanceSchema(BaseModel):
    html_size_bytes: int = Field(0, ge=0)
    num_scripts: int = Field(0, ge=0)
    num_stylesheets: int = Field(0, ge=0)
    blocking_scripts: int = Field(0, ge=0)
    blocking_stylesheets: int = Field(0, ge=0)
    image_formats: ImageFormatsSchema = Field(default_factory=ImageFormatsSchema)
    has_cache_control: bool = False
    cache_control_value: Optional[str] = None

    def to_model(self) -> PerformanceData:
        return PerformanceData(
            html_size_bytes=self.html_size_bytes,
            num_scripts=self.num_scripts,
            num_stylesheets=self.num_stylesheets,
            blocking_scripts=self.blocking_scripts,
            blocking_stylesheets=self.blocking_stylesheets,
            image_formats=ImageFormats(**self.image_formats.model_dump()),
            has_cache_control=self.has_cache_control,
            cache_control_value=self.cache_control_value,
        )


class SecuritySchema(BaseModel):
    is_https: bool = False
    has_x_content_type_options: bool = False
    has_x_frame_options: bool = False
    has_content_security_policy: bool = False
    exposed_wp_version: bool = False

    def to_model(self) -> SecurityData:
        return SecurityData(**self.model_dump())


class FieldPerformanceSchema(BaseModel):
    lcp_ms: float = Field(..., ge=0)
    cls_score: float = Field(..., ge=0)
    inp_ms: float = Field(..., ge=0)
    ttfb_ms: float = Field(..., ge=0)
    performance_score: Optional[float] = None
    strategy: str = "mobile"

    def to_model(self) -> FieldPerformance:
        return FieldPerformance(**self.model_dump())


class PageObservationSchema(BaseModel):
    path: str = "/"
    url: str = ""
    seo: SeoSchema = Field(default_factory=SeoSchema)
    performance: PerformanceSchema = Field(default_factory=PerformanceSchema)
    security: SecuritySchema = Field(default_factory=SecuritySchema)
    field_performance: Optional[FieldPerformanceSchema] = None

    def to_model(self) -> PageObservation:
        return PageObservation(
            path=self.path,
            url=self.url,
            seo=self.seo.to_model(),
            performance=self.performance.to_model(),
            security=self.security.to_model(),
            field_performance=self.field_performance.to_model() if self.field_performance else None,
        )


class ModernizationSchema(BaseModel):
    has_rest_api: bool = False
    has_posts_endpoint: bool = False
    has_pages_endpoint: bool = False
    has_pretty_permalinks: bool = False
    uses_cdn: bool = False
    cdn_domains: List[str] = Field(default_factory=list)

    def to_model(self) -> ModernizationData:
        return ModernizationData(
            has_rest_api=self.has_rest_api,
            has_posts_endpoint=self.has_posts_endpoint,
            has_pages_endpoint=self.has_pages_endpoint,
            has_pretty_permalinks=self.has_pretty_permalinks,
            uses_cdn=self.uses_cdn,
            cdn_domains=tuple(self.cdn_domains),
        )


class ScoreRequest(BaseModel):
    pages: List[PageObservationSchema] = Field(..., description="Ordered page observations")
    modernization: ModernizationSchema = Field(default_factory=ModernizationSchema)
