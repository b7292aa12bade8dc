# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .job_application_service import JobApplicationService, validate_id
from .reference_service import ReferenceService

__all__ = [
    "JobApplicationService",
    "ReferenceService",
    "validate_id",
]
