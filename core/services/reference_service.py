# =============================================================================
# core/services/reference_service.py - Company / Platform Business Logic
# =============================================================================
# Read and delete operations over the lookup entities. Creation happens
# implicitly through JobApplicationService (get-or-create by name).
# =============================================================================

import logging

from app.exceptions import (
    CompanyNotFoundError,
    PlatformNotFoundError,
    ReferenceInUseConflictError,
)
from core.models.reference import Company, Platform
from core.repositories.base import DataStore, ReferenceInUseError
from core.services.job_application_service import validate_id

logger = logging.getLogger(__name__)


class ReferenceService:
    """Service for company and platform lookups."""

    def __init__(self, store: DataStore):
        self._store = store

    # -------------------------------------------------------------------------
    # Companies
    # -------------------------------------------------------------------------

    async def list_companies(self) -> list[Company]:
        return await self._store.list_companies()

    async def get_company(self, company_id: str) -> Company:
        company_id = validate_id(company_id, kind="Company")

        company = await self._store.get_company(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company

    async def delete_company(self, company_id: str) -> None:
        """
        Hard delete an unused company.

        Raises:
            CompanyNotFoundError: If the company doesn't exist
            ReferenceInUseConflictError: If applications still reference it
        """
        company_id = validate_id(company_id, kind="Company")

        try:
            deleted = await self._store.delete_company(company_id)
        except ReferenceInUseError as e:
            logger.warning(f"Refused to delete company {company_id}: {e.message}")
            raise ReferenceInUseConflictError("company", company_id, e.usage_count) from e

        if not deleted:
            raise CompanyNotFoundError(company_id)

        logger.info(f"Deleted company {company_id}")

    # -------------------------------------------------------------------------
    # Platforms
    # -------------------------------------------------------------------------

    async def list_platforms(self) -> list[Platform]:
        return await self._store.list_platforms()

    async def get_platform(self, platform_id: str) -> Platform:
        platform_id = validate_id(platform_id, kind="Platform")

        platform = await self._store.get_platform(platform_id)
        if platform is None:
            raise PlatformNotFoundError(platform_id)
        return platform

    async def delete_platform(self, platform_id: str) -> None:
        """
        Hard delete an unused platform.

        Raises:
            PlatformNotFoundError: If the platform doesn't exist
            ReferenceInUseConflictError: If applications still reference it
        """
        platform_id = validate_id(platform_id, kind="Platform")

        try:
            deleted = await self._store.delete_platform(platform_id)
        except ReferenceInUseError as e:
            logger.warning(f"Refused to delete platform {platform_id}: {e.message}")
            raise ReferenceInUseConflictError("platform", platform_id, e.usage_count) from e

        if not deleted:
            raise PlatformNotFoundError(platform_id)

        logger.info(f"Deleted platform {platform_id}")
