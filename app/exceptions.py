# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class JobTrailException(Exception):
    """
    Base exception for the JobTrail API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "JOBTRAIL_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class InvalidIdError(JobTrailException):
    """Raised when an id-addressed operation gets a blank identifier."""

    def __init__(self, kind: str = "Job application"):
        super().__init__(
            message=f"{kind} ID cannot be null or empty",
            code="INVALID_ID",
            status_code=400,
            suggestion="Pass the id returned when the record was created",
        )


# =============================================================================
# Job Application Exceptions
# =============================================================================

class JobApplicationNotFoundError(JobTrailException):
    """Raised when a job application doesn't exist or was deleted."""

    def __init__(self, application_id: str):
        super().__init__(
            message=f"Job application with ID {application_id} not found",
            code="JOB_APPLICATION_NOT_FOUND",
            status_code=404,
            suggestion="Check that the id is correct and the application hasn't been deleted",
            details={"id": application_id}
        )


# =============================================================================
# Reference Data Exceptions
# =============================================================================

class CompanyNotFoundError(JobTrailException):
    """Raised when a company ID doesn't exist."""

    def __init__(self, company_id: str):
        super().__init__(
            message=f"Company with ID {company_id} not found",
            code="COMPANY_NOT_FOUND",
            status_code=404,
            suggestion="List companies with GET /api/companies",
            details={"id": company_id}
        )


class PlatformNotFoundError(JobTrailException):
    """Raised when a platform ID doesn't exist."""

    def __init__(self, platform_id: str):
        super().__init__(
            message=f"Platform with ID {platform_id} not found",
            code="PLATFORM_NOT_FOUND",
            status_code=404,
            suggestion="List platforms with GET /api/platforms",
            details={"id": platform_id}
        )


class ReferenceInUseConflictError(JobTrailException):
    """Raised when deleting a company/platform that applications still reference."""

    def __init__(self, kind: str, record_id: str, usage_count: int):
        super().__init__(
            message=f"{kind.capitalize()} {record_id} is still referenced by {usage_count} job application(s)",
            code="REFERENCE_IN_USE",
            status_code=409,
            suggestion=f"Move those applications to another {kind} before deleting this one",
            details={"id": record_id, "usage_count": usage_count}
        )


class ReferenceChangedError(JobTrailException):
    """Raised when a company/platform is deleted while an application is being saved."""

    def __init__(self, kind: str, record_id: str | None):
        super().__init__(
            message=f"{kind.capitalize()} {record_id} was deleted while the job application was being saved",
            code="REFERENCE_CHANGED",
            status_code=409,
            suggestion="Retry the request",
            details={"kind": kind, "id": record_id}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def jobtrail_exception_handler(
    request: Request,
    exc: JobTrailException
) -> JSONResponse:
    """
    Convert JobTrailException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Malformed or missing input is a client error (400) with one entry per
    offending field.
    """
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({
            "field": ".".join(location) or "body",
            "message": error.get("msg", "Invalid value"),
        })

    logger.warning(f"Validation failed for {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        }
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log full detail server side, return an opaque 500."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )
