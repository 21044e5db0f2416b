"""
FastAPI route handlers for the audit API.
"""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, status

from wpaudit.api.schemas import AuditRequest, ScoreRequest
from wpaudit.core.logging import get_logger
from wpaudit.pipeline.audit import AuditAborted, score_observations
from wpaudit.pipeline.runner import AuditConfig, run_audit
from wpaudit.report.json_report import build_document, score_document

logger = get_logger(__name__)

router = APIRouter()


def _aborted(outcome: AuditAborted) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"reason": outcome.reason, "failed_paths": outcome.failed_paths},
    )


@router.post(
    "/audit",
    summary="Run a full audit of a WordPress site",
    tags=["Audit"],
)
async def audit_site(request: AuditRequest) -> Dict[str, Any]:
    """Fetch the requested pages, score them and return the JSON report document."""
    config = AuditConfig(
        url=request.url,
        pages=request.pages,
        auto_pages=request.auto_pages,
        max_pages=request.max_pages,
        api_url=request.api_url,
        strategy=request.strategy,
    )
    # ValidationError is mapped to 400 by the application error handler
    outcome = await run_audit(config)

    if isinstance(outcome, AuditAborted):
        raise _aborted(outcome)

    logger.info("Audit completed", url=outcome.url, score=outcome.result.scores.overall)
    return build_document(outcome)


@router.post(
    "/score",
    summary="Score caller-supplied page observations",
    tags=["Audit"],
)
async def score(request: ScoreRequest) -> Dict[str, Any]:
    """Run aggregation, analysis and scoring only. No network access."""
    outcome = score_observations(
        [page.to_model() for page in request.pages],
        request.modernization.to_model(),
    )
    if isinstance(outcome, AuditAborted):
        raise _aborted(outcome)
    return score_document(outcome)
