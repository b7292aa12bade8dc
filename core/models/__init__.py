# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - job_application.py: Job application record, status enum, request/response
# - reference.py: Company and Platform lookup records
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Job Application Models
# -----------------------------------------------------------------------------
from .job_application import (
    JobApplication,
    JobApplicationCreate,
    JobApplicationResponse,
    JobApplicationStatus,
    JobApplicationUpdate,
)

# -----------------------------------------------------------------------------
# Reference Models - Companies and platforms
# -----------------------------------------------------------------------------
from .reference import (
    Company,
    Platform,
)

__all__ = [
    # Job Application
    "JobApplication",
    "JobApplicationCreate",
    "JobApplicationResponse",
    "JobApplicationStatus",
    "JobApplicationUpdate",
    # Reference
    "Company",
    "Platform",
]
