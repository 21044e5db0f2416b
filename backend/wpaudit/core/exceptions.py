"""
Custom exception classes for the audit tool.
"""

from typing import Any, Optional


class AuditError(Exception):
    """Base exception for all audit errors."""

    def __init__(self, message: str, detail: Optional[Any] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class CollectorError(AuditError):
    """Raised when a collector cannot extract observations from a response."""
    pass


class AggregationError(AuditError):
    """Raised when page observations cannot be combined."""
    pass


class EmptyObservationsError(AggregationError):
    """Raised when no page was successfully fetched, so nothing can be scored."""

    def __init__(self, message: str = "No pages could be successfully audited", detail: Optional[Any] = None):
        super().__init__(message, detail)


class ScorerError(AuditError):
    """Raised when scorer encounters an error."""
    pass


class InvalidClassificationError(ScorerError):
    """Raised when a classification outside the point tables reaches the scorer."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Unknown {field} classification: {value!r}", detail={"field": field, "value": value})


class ReportError(AuditError):
    """Raised when a report cannot be rendered or written."""
    pass


class ValidationError(AuditError):
    """Raised when input validation fails."""
    pass


class PageSpeedError(AuditError):
    """Raised when the PageSpeed Insights API returns an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, detail={"status_code": status_code})
