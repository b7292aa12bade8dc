# =============================================================================
# core/models/reference.py - Company / Platform Schemas
# =============================================================================
# Lookup entities referenced by every job application:
# - Company: the employer an application was sent to
# - Platform: where the application was submitted (LinkedIn, Indeed, ...)
#
# Both are created on demand when an application names an unknown company
# or platform, and can only be hard-deleted while nothing references them.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Company(BaseModel):
    """
    A company record.

    Example:
        {
            "id": "comp-001",
            "name": "Microsoft",
            "industry": "Technology",
            "createDate": "2024-01-15T10:30:00Z"
        }
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique company identifier")
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    website_url: str | None = Field(default=None, max_length=200)
    industry: str | None = Field(default=None, max_length=100)
    create_date: datetime
    modified_date: datetime


class Platform(BaseModel):
    """
    A job platform record.

    Example:
        {
            "id": "plat-001",
            "name": "LinkedIn",
            "websiteUrl": "https://linkedin.com",
            "isActive": true
        }
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique platform identifier")
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    website_url: str | None = Field(default=None, max_length=200)

    # Inactive platforms stay referenced by old applications
    is_active: bool = Field(default=True)

    create_date: datetime
    modified_date: datetime
