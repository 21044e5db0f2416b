"""
JSON report: the structured audit document returned by the API and
written by the CLI with --format json.
"""

import json
from typing import Any, Dict, Optional

from wpaudit.core.config import settings
from wpaudit.models import FieldPerformance, PageObservation
from wpaudit.pipeline.audit import ScoredAudit
from wpaudit.report.common import category_rows


def _raw_page(page: PageObservation) -> Dict[str, Any]:
    return {
        "path": page.path,
        "url": page.url,
        "status": page.status_code,
        "seo": {
            "title": page.seo.title,
            "metaDescription": page.seo.meta_description,
            "canonicalUrl": page.seo.canonical_url,
            "h1Tags": list(page.seo.h1_tags),
        },
        "performance": {
            "htmlSizeBytes": page.performance.html_size_bytes,
            "numScripts": page.performance.num_scripts,
            "numStylesheets": page.performance.num_stylesheets,
            "blockingScripts": page.performance.blocking_scripts,
            "blockingStylesheets": page.performance.blocking_stylesheets,
            "imageFormats": page.performance.image_formats.to_dict(),
            "cacheControl": page.performance.cache_control_value,
        },
        "security": {
            "isHttps": page.security.is_https,
            "securityHeaders": dict(page.security.security_headers),
        },
    }


def _field_performance(field: Optional[FieldPerformance]) -> Any:
    if field is None:
        return None
    return {
        "lcp": field.lcp_ms,
        "cls": field.cls_score,
        "inp": field.inp_ms,
        "ttfb": field.ttfb_ms,
        "performanceScore": field.performance_score,
        "strategy": field.strategy,
        "fetchedAt": field.fetched_at,
    }


def score_document(result: ScoredAudit) -> Dict[str, Any]:
    """Scores, findings and top issues of a ScoredAudit."""
    findings = {
        row["key"]: {
            "category": row["label"],
            "score": row["score"],
            "maxScore": row["max"],
            "issues": list(row["analysis"].issues),
            "recommendations": list(row["analysis"].recommendations),
            "details": row["analysis"].details(),
        }
        for row in category_rows(result)
    }
    return {
        "scores": result.scores.to_dict(),
        "findings": findings,
        "fieldPerformance": _field_performance(result.aggregated.field_performance),
        "topIssues": [issue.to_dict() for issue in result.top_issues],
        "nextSteps": result.next_steps,
    }


def build_document(report) -> Dict[str, Any]:
    """Plain-dict form of an AuditReport."""
    document = {
        "meta": {
            "version": settings.APP_VERSION,
            "generatedAt": report.generated_at,
            "url": report.url,
            "pagesAudited": len(report.pages),
            "failedPaths": list(report.failed_paths),
        },
        "wordpress": report.wordpress.to_dict(),
    }
    document.update(score_document(report.result))
    document["rawData"] = {"pages": [_raw_page(page) for page in report.pages]}
    return document


def render_json(report) -> str:
    return json.dumps(build_document(report), indent=2, ensure_ascii=False)
