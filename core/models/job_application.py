# =============================================================================
# core/models/job_application.py - Job Application Schemas
# =============================================================================
# These models define the API contract for job application operations:
# - JobApplicationStatus: Enum for application states (ordinal-stable)
# - JobApplication: The stored record (internal, includes soft-delete flag)
# - JobApplicationCreate: Input for POST /api/jobapplications
# - JobApplicationUpdate: Input for PUT /api/jobapplications/{id}
# - JobApplicationResponse: Output returned to clients
#
# Request/response models use camelCase on the wire (jobTitle, createDate)
# and snake_case in Python.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class JobApplicationStatus(str, Enum):
    """
    Possible states for a job application.

    The declaration order is the ordinal order and must never change:
    the persistent store keeps the ordinal, not the name.

    - Applied (0): Application has been submitted
    - Rejected (1): Application was rejected
    - InterviewScheduled (2): Interview has been scheduled
    - OfferReceived (3): Job offer has been received
    - Withdrawn (4): Application was withdrawn by the applicant
    - UnderReview (5): Application is currently under review
    """
    APPLIED = "Applied"
    REJECTED = "Rejected"
    INTERVIEW_SCHEDULED = "InterviewScheduled"
    OFFER_RECEIVED = "OfferReceived"
    WITHDRAWN = "Withdrawn"
    UNDER_REVIEW = "UnderReview"

    @property
    def ordinal(self) -> int:
        """Stable integer position of this status."""
        return list(JobApplicationStatus).index(self)

    @classmethod
    def from_ordinal(cls, value: int) -> "JobApplicationStatus":
        """
        Look up a status by its integer ordinal.

        Raises:
            ValueError: If the ordinal is out of range
        """
        members = list(cls)
        if not 0 <= value < len(members):
            raise ValueError(
                f"Status ordinal must be between 0 and {len(members) - 1}, got {value}"
            )
        return members[value]


def _coerce_status(value: Any) -> Any:
    """Accept either a status name or its integer ordinal."""
    if isinstance(value, int) and not isinstance(value, bool):
        return JobApplicationStatus.from_ordinal(value)
    return value


# Shared config for wire-facing models
_CAMEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


class JobApplication(BaseModel):
    """
    A stored job application record.

    `company` and `platform` are denormalized names; `company_id` and
    `platform_id` reference the Company / Platform lookup rows.

    Records are never physically removed. Soft delete sets `is_deleted`
    and refreshes `modified_date`.
    """

    id: str = Field(default="", description="Unique identifier (server-assigned)")

    company: str = Field(..., max_length=100)
    job_title: str = Field(..., max_length=100)
    platform: str = Field(..., max_length=50)

    company_id: str | None = Field(default=None, description="Referenced company row")
    platform_id: str | None = Field(default=None, description="Referenced platform row")

    create_date: datetime | None = Field(default=None)
    modified_date: datetime | None = Field(default=None)

    status: JobApplicationStatus = Field(default=JobApplicationStatus.APPLIED)
    notes: str | None = Field(default=None, max_length=1000)

    is_deleted: bool = Field(default=False)


class JobApplicationCreate(BaseModel):
    """
    Schema for creating a job application.

    Any client-supplied identifier is ignored; the store assigns one.

    Example:
        {
            "company": "Microsoft",
            "jobTitle": "Senior Software Engineer",
            "platform": "LinkedIn",
            "status": "Applied",
            "notes": "Referred by a former colleague"
        }
    """

    model_config = _CAMEL_CONFIG

    company: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Name of the company"
    )

    job_title: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Title of the job position"
    )

    platform: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Platform where the application was submitted"
    )

    status: JobApplicationStatus = Field(
        default=JobApplicationStatus.APPLIED,
        description="Current status (name or ordinal)"
    )

    notes: str | None = Field(
        default=None,
        max_length=1000,
        description="Optional notes about the application"
    )

    @field_validator("status", mode="before")
    @classmethod
    def accept_status_ordinal(cls, value: Any) -> Any:
        return _coerce_status(value)


class JobApplicationUpdate(BaseModel):
    """
    Schema for updating a job application.

    `jobTitle` is required. The other fields are applied only when they
    appear in the payload; omitted fields keep their current values.
    An explicit `"notes": null` clears the notes.

    Example:
        {
            "jobTitle": "Staff Software Engineer",
            "status": "OfferReceived"
        }
    """

    model_config = _CAMEL_CONFIG

    job_title: str = Field(..., min_length=1, max_length=100)
    status: JobApplicationStatus | None = Field(default=None)
    notes: str | None = Field(default=None, max_length=1000)
    company: str | None = Field(default=None, min_length=1, max_length=100)
    platform: str | None = Field(default=None, min_length=1, max_length=50)

    @field_validator("status", mode="before")
    @classmethod
    def accept_status_ordinal(cls, value: Any) -> Any:
        return _coerce_status(value)

    def supplied(self, field_name: str) -> bool:
        """True if the client explicitly sent this field."""
        return field_name in self.model_fields_set


class JobApplicationResponse(BaseModel):
    """
    Schema for returning a job application to clients.

    Returned by every /api/jobapplications endpoint that has a body.
    The soft-delete flag and reference ids are not exposed.
    """

    model_config = _CAMEL_CONFIG

    id: str
    company: str
    job_title: str
    platform: str
    create_date: datetime
    modified_date: datetime
    status: JobApplicationStatus
    notes: str | None = None

    @classmethod
    def from_record(cls, record: JobApplication) -> "JobApplicationResponse":
        """Map a stored record to its external representation."""
        return cls(
            id=record.id,
            company=record.company,
            job_title=record.job_title,
            platform=record.platform,
            create_date=record.create_date,
            modified_date=record.modified_date,
            status=record.status,
            notes=record.notes,
        )
