"""
Exception hierarchy for Resume RAG.

Input errors propagate to callers. Provider errors are raised internally
by AI backends and absorbed by the components that call them.
"""

from typing import Any, Optional


class ResumeRAGError(Exception):
    """Base exception for the retrieval and matching engine."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/response."""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class InvalidQueryError(ResumeRAGError):
    """Raised when the query text or query vector is unusable."""

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, error_code="INVALID_QUERY", **kwargs)


class InvalidFilterError(ResumeRAGError):
    """Raised when search filters or limits fail validation."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        super().__init__(message, error_code="INVALID_FILTER", details=details, **kwargs)


class JobNotFoundError(ResumeRAGError):
    """Raised when a job id is unknown to the document store."""

    def __init__(self, job_id: str, **kwargs: Any):
        super().__init__(
            f"Job not found: {job_id}",
            error_code="JOB_NOT_FOUND",
            details={"job_id": job_id},
            **kwargs,
        )


class ProviderError(ResumeRAGError):
    """Raised by AI providers when a generation or extraction call fails."""

    def __init__(self, message: str, provider: Optional[str] = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        super().__init__(message, error_code="PROVIDER_ERROR", details=details, **kwargs)


class ProviderUnavailableError(ProviderError):
    """Transient provider failure (rate limit, refused connection) that triggers a cool-down."""


class StoreError(ResumeRAGError):
    """Raised when the document store cannot be queried."""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        super().__init__(message, error_code="STORE_ERROR", details=details, **kwargs)
