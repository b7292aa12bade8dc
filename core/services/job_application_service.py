# =============================================================================
# core/services/job_application_service.py - Job Application Business Logic
# =============================================================================
# Handles job application CRUD and soft delete.
# Separates HTTP concerns from storage:
# - validates identifiers before touching the store
# - resolves company/platform names to lookup rows (get-or-create)
# - maps request models to stored records
# - turns "absent" results into JobApplicationNotFoundError
# =============================================================================

import logging

from app.exceptions import (
    InvalidIdError,
    JobApplicationNotFoundError,
    ReferenceChangedError,
)
from core.models.job_application import (
    JobApplication,
    JobApplicationCreate,
    JobApplicationUpdate,
)
from core.repositories.base import DataStore, RecordNotFoundError, ReferenceNotFoundError
from lib.utils import is_blank

logger = logging.getLogger(__name__)

# Times create/update resolve company and platform names before giving up
REFERENCE_ATTEMPTS = 2


def validate_id(record_id: str | None, kind: str = "Job application") -> str:
    """
    Reject blank identifiers.

    Returns:
        The identifier with surrounding whitespace removed

    Raises:
        InvalidIdError: If the identifier is None, empty or whitespace
    """
    if is_blank(record_id):
        logger.warning(f"{kind} operation called with null or empty ID")
        raise InvalidIdError(kind)
    return record_id.strip()


class JobApplicationService:
    """
    Service for job application operations.

    Provides a clean interface between API routes and the store.
    The store is injected; nothing here knows which backend it is.
    """

    def __init__(self, store: DataStore):
        self._store = store

    async def list_applications(self) -> list[JobApplication]:
        """All non-deleted applications, newest first."""
        applications = await self._store.get_all()
        logger.info(f"Retrieved {len(applications)} job applications")
        return applications

    async def get_application(self, application_id: str) -> JobApplication:
        """
        Get a job application by ID.

        Raises:
            InvalidIdError: If the id is blank
            JobApplicationNotFoundError: If absent or soft-deleted
        """
        application_id = validate_id(application_id)

        application = await self._store.get_by_id(application_id)
        if application is None:
            logger.warning(f"Job application with ID {application_id} not found")
            raise JobApplicationNotFoundError(application_id)

        return application

    async def create_application(self, request: JobApplicationCreate) -> JobApplication:
        """
        Create a job application.

        Unknown company/platform names get a new lookup row; known ones
        (case-insensitive) are reused. If a resolved row is deleted before
        the insert lands, the names are resolved again once.

        Returns:
            The stored record with its server-assigned id and timestamps

        Raises:
            ReferenceChangedError: If the references vanish on every attempt
        """
        logger.info(f"Creating new job application for company: {request.company}")

        for attempt in range(1, REFERENCE_ATTEMPTS + 1):
            company = await self._store.get_or_create_company(request.company)
            platform = await self._store.get_or_create_platform(request.platform)

            record = JobApplication(
                company=company.name,
                company_id=company.id,
                platform=platform.name,
                platform_id=platform.id,
                job_title=request.job_title,
                status=request.status,
                notes=request.notes,
            )
            try:
                created = await self._store.create(record)
            except ReferenceNotFoundError as e:
                self._reference_lost(e, attempt)
                continue

            logger.info(f"Created job application with ID: {created.id}")
            return created

    async def update_application(
        self,
        application_id: str,
        request: JobApplicationUpdate,
    ) -> JobApplication:
        """
        Update a job application.

        `job_title` is always applied; `status`, `notes`, `company` and
        `platform` only when the client sent them. Only those fields are
        handed to the store, which merges them into the current record
        atomically, so concurrent updates of different fields both stick.

        Raises:
            InvalidIdError: If the id is blank
            JobApplicationNotFoundError: If absent, soft-deleted, or deleted
                between the lookup and the write
            ReferenceChangedError: If a new company/platform vanishes on
                every attempt
        """
        application_id = validate_id(application_id)
        logger.info(f"Updating job application with ID: {application_id}")

        existing = await self.get_application(application_id)

        for attempt in range(1, REFERENCE_ATTEMPTS + 1):
            changes = await self._collect_changes(request)
            try:
                updated = await self._store.update(
                    existing.model_copy(update=changes),
                    fields=changes.keys(),
                )
            except RecordNotFoundError as e:
                logger.warning(f"Job application with ID {application_id} vanished before update: {e.message}")
                raise JobApplicationNotFoundError(application_id) from e
            except ReferenceNotFoundError as e:
                self._reference_lost(e, attempt)
                continue

            logger.info(f"Updated job application with ID: {application_id}")
            return updated

    async def _collect_changes(self, request: JobApplicationUpdate) -> dict:
        """Fields the client sent, with company/platform names resolved to rows."""
        changes: dict = {"job_title": request.job_title}
        if request.supplied("status") and request.status is not None:
            changes["status"] = request.status
        if request.supplied("notes"):
            changes["notes"] = request.notes
        if request.supplied("company") and request.company is not None:
            company = await self._store.get_or_create_company(request.company)
            changes["company"] = company.name
            changes["company_id"] = company.id
        if request.supplied("platform") and request.platform is not None:
            platform = await self._store.get_or_create_platform(request.platform)
            changes["platform"] = platform.name
            changes["platform_id"] = platform.id
        return changes

    @staticmethod
    def _reference_lost(error: ReferenceNotFoundError, attempt: int) -> None:
        logger.warning(f"{error.message} (attempt {attempt}/{REFERENCE_ATTEMPTS})")
        if attempt == REFERENCE_ATTEMPTS:
            raise ReferenceChangedError(error.kind, error.record_id) from error

    async def delete_application(self, application_id: str) -> None:
        """
        Soft delete a job application.

        Raises:
            InvalidIdError: If the id is blank
            JobApplicationNotFoundError: If absent or already deleted
        """
        application_id = validate_id(application_id)
        logger.info(f"Deleting job application with ID: {application_id}")

        if not await self._store.exists(application_id):
            logger.warning(f"Job application with ID {application_id} not found for deletion")
            raise JobApplicationNotFoundError(application_id)

        if not await self._store.delete(application_id):
            logger.warning(f"Failed to delete job application with ID: {application_id}")
            raise JobApplicationNotFoundError(application_id)

        logger.info(f"Deleted job application with ID: {application_id}")
