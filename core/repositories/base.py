# =============================================================================
# core/repositories/base.py - Storage Contracts
# =============================================================================
# Abstract interfaces shared by both store backends:
# - JobApplicationRepository: CRUD + soft delete over job applications
# - ReferenceDataRepository: lookup-or-create over companies and platforms
# - DataStore: one object implementing both (what the app injects)
#
# "Not found" on reads is a None / False return value, never an exception.
# Exceptions are reserved for contract violations (None input), an update
# whose target is gone, and restricted reference deletes.
# =============================================================================

from abc import ABC, abstractmethod
from collections.abc import Iterable

from core.models.job_application import JobApplication
from core.models.reference import Company, Platform
from lib.utils import ApplicationError


# =============================================================================
# Errors
# =============================================================================

class RepositoryError(ApplicationError):
    """Base error for store operations."""

    def __init__(self, message: str, code: str = "REPOSITORY_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


class RecordNotFoundError(RepositoryError):
    """Raised by update() when the target is absent or soft-deleted."""

    def __init__(self, record_id: str):
        super().__init__(
            f"Job application with ID {record_id} not found or has been deleted.",
            code="RECORD_NOT_FOUND",
            details={"id": record_id},
        )
        self.record_id = record_id


class ReferenceNotFoundError(RepositoryError):
    """Raised by create()/update() when a referenced company or platform is gone."""

    def __init__(self, kind: str, record_id: str | None):
        super().__init__(
            f"{kind.capitalize()} {record_id} does not exist",
            code="REFERENCE_NOT_FOUND",
            details={"kind": kind, "id": record_id},
        )
        self.kind = kind
        self.record_id = record_id


class ReferenceInUseError(RepositoryError):
    """Raised when deleting a company/platform that applications still reference."""

    def __init__(self, kind: str, record_id: str, usage_count: int):
        super().__init__(
            f"{kind.capitalize()} {record_id} is referenced by {usage_count} job application(s)",
            code="REFERENCE_IN_USE",
            details={"kind": kind, "id": record_id, "usage_count": usage_count},
        )
        self.kind = kind
        self.record_id = record_id
        self.usage_count = usage_count


# =============================================================================
# Soft-delete predicate
# =============================================================================

def is_visible(record: JobApplication | None) -> bool:
    """
    The single soft-delete filter for in-memory reads.

    Every read path (get_all, get_by_id, exists, update, delete) goes
    through this predicate.
    """
    return record is not None and not record.is_deleted


# Fields update() may change. company / platform names follow their ids.
MUTABLE_FIELDS = frozenset({
    "company",
    "company_id",
    "platform",
    "platform_id",
    "job_title",
    "status",
    "notes",
})


def resolve_update_fields(fields: Iterable[str] | None) -> frozenset[str]:
    """
    Validate the field selection passed to update().

    Raises:
        ValueError: If a field outside MUTABLE_FIELDS is named
    """
    if fields is None:
        return MUTABLE_FIELDS

    selected = frozenset(fields)
    unknown = selected - MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
    return selected


# =============================================================================
# Interfaces
# =============================================================================

class JobApplicationRepository(ABC):
    """CRUD + soft delete over job applications."""

    @abstractmethod
    async def get_all(self) -> list[JobApplication]:
        """All non-deleted records, newest create_date first."""

    @abstractmethod
    async def get_by_id(self, record_id: str) -> JobApplication | None:
        """The record if present and not soft-deleted, else None."""

    @abstractmethod
    async def create(self, record: JobApplication) -> JobApplication:
        """
        Store a new record.

        Assigns a fresh id, sets both timestamps to now and clears the
        deletion flag. Any id on the input is ignored.

        Raises:
            ValueError: If record is None
        """

    @abstractmethod
    async def update(
        self,
        record: JobApplication,
        fields: Iterable[str] | None = None,
    ) -> JobApplication:
        """
        Overwrite mutable fields of an existing record.

        The current record is read and written under one lock / transaction.
        With `fields`, only those fields are taken from `record`; the rest
        keep their stored values. Without it, every field in
        MUTABLE_FIELDS is replaced.

        Raises:
            ValueError: If record is None or `fields` names an immutable field
            RecordNotFoundError: If the target is absent or soft-deleted
            ReferenceNotFoundError: If company_id / platform_id don't exist
        """

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        """Soft delete. Returns False (and mutates nothing) if not visible."""

    @abstractmethod
    async def exists(self, record_id: str) -> bool:
        """True iff present and not soft-deleted."""


class ReferenceDataRepository(ABC):
    """Companies and platforms referenced by job applications."""

    @abstractmethod
    async def list_companies(self) -> list[Company]: ...

    @abstractmethod
    async def get_company(self, company_id: str) -> Company | None: ...

    @abstractmethod
    async def get_or_create_company(self, name: str) -> Company:
        """Existing company whose name matches case-insensitively, else a new one."""

    @abstractmethod
    async def delete_company(self, company_id: str) -> bool:
        """
        Hard delete a company.

        Raises:
            ReferenceInUseError: If any job application references it
        """

    @abstractmethod
    async def list_platforms(self) -> list[Platform]: ...

    @abstractmethod
    async def get_platform(self, platform_id: str) -> Platform | None: ...

    @abstractmethod
    async def get_or_create_platform(self, name: str) -> Platform:
        """Existing platform whose name matches case-insensitively, else a new one."""

    @abstractmethod
    async def delete_platform(self, platform_id: str) -> bool:
        """
        Hard delete a platform.

        Raises:
            ReferenceInUseError: If any job application references it
        """


class DataStore(JobApplicationRepository, ReferenceDataRepository):
    """A complete store backend. Selected once at startup."""

    name: str = "store"

    @abstractmethod
    async def ping(self) -> None:
        """Round trip to the backend. Raises if it can't answer."""

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
