"""
Security analyzer - HTTPS, security header coverage and version exposure.
"""

from typing import List

from wpaudit.models import (
    HeadersCoverage,
    HttpsStatus,
    SecurityAnalysis,
    SecurityData,
    SecurityPosture,
    VersionExposure,
)

# (flag attribute, header name, recommendation)
REQUIRED_HEADERS = (
    ("has_x_content_type_options", "X-Content-Type-Options",
     "Add X-Content-Type-Options: nosniff header"),
    ("has_x_frame_options", "X-Frame-Options",
     "Add X-Frame-Options header to prevent clickjacking"),
    ("has_content_security_policy", "Content-Security-Policy",
     "Implement Content-Security-Policy to mitigate XSS attacks"),
)


def analyze_security(sec: SecurityData) -> SecurityAnalysis:
    issues: List[str] = []
    recommendations: List[str] = []

    https_status = HttpsStatus.SECURE if sec.is_https else HttpsStatus.INSECURE
    if https_status == HttpsStatus.INSECURE:
        issues.append("Site is not using HTTPS")
        recommendations.append("CRITICAL: Migrate to HTTPS immediately for security and SEO")

    present = sum(1 for attr, _, _ in REQUIRED_HEADERS if getattr(sec, attr))
    if present == len(REQUIRED_HEADERS):
        headers_coverage = HeadersCoverage.EXCELLENT
    elif present >= 1:
        headers_coverage = HeadersCoverage.PARTIAL
        for attr, header, recommendation in REQUIRED_HEADERS:
            if not getattr(sec, attr):
                issues.append(f"Missing {header} header")
                recommendations.append(recommendation)
    else:
        headers_coverage = HeadersCoverage.NONE
        issues.append("Critical security headers are missing")
        recommendations.append(
            "Implement essential security headers (CSP, X-Frame-Options, X-Content-Type-Options)"
        )

    version_exposure = VersionExposure.EXPOSED if sec.exposed_wp_version else VersionExposure.HIDDEN
    if version_exposure == VersionExposure.EXPOSED:
        issues.append("WordPress version is publicly exposed")
        recommendations.append("Hide WordPress version to reduce attack surface")

    if (
        https_status == HttpsStatus.SECURE
        and headers_coverage == HeadersCoverage.EXCELLENT
        and version_exposure == VersionExposure.HIDDEN
    ):
        posture = SecurityPosture.STRONG
    elif https_status == HttpsStatus.INSECURE or headers_coverage == HeadersCoverage.NONE:
        posture = SecurityPosture.WEAK
    else:
        posture = SecurityPosture.MODERATE

    return SecurityAnalysis(
        https_status=https_status,
        headers_coverage=headers_coverage,
        version_exposure=version_exposure,
        overall_posture=posture,
        issues=issues,
        recommendations=recommendations,
    )
