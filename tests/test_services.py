# =============================================================================
# tests/test_services.py - Service Layer Tests
# =============================================================================
# Tests for JobApplicationService and ReferenceService:
# - identifier validation
# - absent / deleted records surface as NotFound errors
# - create resolves company/platform names and applies defaults
# - update applies only the fields the client sent
# - reference deletes map store conflicts to 409 errors
# =============================================================================

import asyncio

import pytest

from app.exceptions import (
    CompanyNotFoundError,
    InvalidIdError,
    JobApplicationNotFoundError,
    PlatformNotFoundError,
    ReferenceChangedError,
    ReferenceInUseConflictError,
)
from core.models.job_application import (
    JobApplicationCreate,
    JobApplicationStatus,
    JobApplicationUpdate,
)
from core.repositories.memory import InMemoryStore
from core.services.job_application_service import (
    REFERENCE_ATTEMPTS,
    JobApplicationService,
    validate_id,
)


# =============================================================================
# Identifier Validation
# =============================================================================

class TestValidateId:
    """Tests for validate_id()."""

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_blank_rejected(self, value):
        with pytest.raises(InvalidIdError) as exc_info:
            validate_id(value)

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "INVALID_ID"

    def test_whitespace_trimmed(self):
        assert validate_id("  ja-001 ") == "ja-001"

    def test_kind_in_message(self):
        with pytest.raises(InvalidIdError) as exc_info:
            validate_id("", kind="Platform")

        assert exc_info.value.message.startswith("Platform ID")


# =============================================================================
# Job Application Service
# =============================================================================

class TestGetApplication:
    """Tests for listing and fetching."""

    @pytest.mark.asyncio
    async def test_list_excludes_deleted(self, job_service):
        applications = await job_service.list_applications()

        assert {a.id for a in applications} == {"ja-001", "ja-002", "ja-003"}

    @pytest.mark.asyncio
    async def test_get_existing(self, job_service):
        application = await job_service.get_application("ja-002")
        assert application.company == "Google"

    @pytest.mark.asyncio
    async def test_get_deleted_is_not_found(self, job_service):
        with pytest.raises(JobApplicationNotFoundError) as exc_info:
            await job_service.get_application("ja-deleted-001")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details == {"id": "ja-deleted-001"}

    @pytest.mark.asyncio
    async def test_get_blank_id(self, job_service):
        with pytest.raises(InvalidIdError):
            await job_service.get_application(" ")


class TestCreateApplication:
    """Tests for create_application()."""

    @pytest.mark.asyncio
    async def test_defaults_to_applied(self, job_service):
        created = await job_service.create_application(
            JobApplicationCreate(company="X", jobTitle="Y", platform="Z")
        )

        assert created.status == JobApplicationStatus.APPLIED
        assert created.notes is None
        assert created.id
        assert created.create_date == created.modified_date

    @pytest.mark.asyncio
    async def test_reuses_known_company_and_platform(self, job_service, memory_store):
        created = await job_service.create_application(
            JobApplicationCreate(company="microsoft", jobTitle="PM", platform="LINKEDIN")
        )

        assert created.company_id == "comp-001"
        assert created.company == "Microsoft"
        assert created.platform_id == "plat-001"
        assert created.platform == "LinkedIn"
        assert len(await memory_store.list_companies()) == 3

    @pytest.mark.asyncio
    async def test_creates_new_lookup_rows(self, job_service, memory_store):
        created = await job_service.create_application(
            JobApplicationCreate(company="Stripe", jobTitle="Backend Engineer", platform="Wellfound")
        )

        company = await memory_store.get_company(created.company_id)
        assert company.name == "Stripe"
        assert len(await memory_store.list_platforms()) == 4


class TestUpdateApplication:
    """Tests for update_application()."""

    @pytest.mark.asyncio
    async def test_only_job_title(self, job_service):
        before = await job_service.get_application("ja-001")

        updated = await job_service.update_application(
            "ja-001", JobApplicationUpdate(jobTitle="Principal Engineer")
        )

        assert updated.job_title == "Principal Engineer"
        assert updated.status == before.status
        assert updated.notes == before.notes
        assert updated.company == before.company
        assert updated.create_date == before.create_date
        assert updated.modified_date > before.modified_date

    @pytest.mark.asyncio
    async def test_status_and_notes(self, job_service):
        updated = await job_service.update_application(
            "ja-002",
            JobApplicationUpdate(jobTitle="Software Developer", status="Rejected", notes="No luck"),
        )

        assert updated.status == JobApplicationStatus.REJECTED
        assert updated.notes == "No luck"

    @pytest.mark.asyncio
    async def test_explicit_null_notes_clears(self, job_service):
        updated = await job_service.update_application(
            "ja-002", JobApplicationUpdate(**{"jobTitle": "Software Developer", "notes": None})
        )

        assert updated.notes is None

    @pytest.mark.asyncio
    async def test_change_company(self, job_service):
        updated = await job_service.update_application(
            "ja-003", JobApplicationUpdate(jobTitle="Full Stack Developer", company="Netflix")
        )

        assert updated.company == "Netflix"
        assert updated.company_id != "comp-003"
        assert updated.platform == "Indeed"

    @pytest.mark.asyncio
    async def test_deleted_is_not_found(self, job_service):
        with pytest.raises(JobApplicationNotFoundError):
            await job_service.update_application(
                "ja-deleted-001", JobApplicationUpdate(jobTitle="Back from the dead")
            )

    @pytest.mark.asyncio
    async def test_blank_id(self, job_service):
        with pytest.raises(InvalidIdError):
            await job_service.update_application("", JobApplicationUpdate(jobTitle="X"))


class TestConcurrentUpdates:
    """Tests for partial updates racing on one record."""

    @pytest.mark.asyncio
    async def test_updates_of_different_fields_both_stick(self):
        service = JobApplicationService(InMemoryStore(latency_scale=1.0))

        await asyncio.gather(
            service.update_application(
                "ja-001",
                JobApplicationUpdate(jobTitle="Senior Software Engineer", status="Rejected"),
            ),
            service.update_application(
                "ja-001",
                JobApplicationUpdate(jobTitle="Senior Software Engineer", notes="follow up"),
            ),
        )

        final = await service.get_application("ja-001")
        assert final.status == JobApplicationStatus.REJECTED
        assert final.notes == "follow up"

    @pytest.mark.asyncio
    async def test_sql_updates_of_different_fields_both_stick(self, sql_store):
        service = JobApplicationService(sql_store)
        created = await service.create_application(
            JobApplicationCreate(company="Acme", jobTitle="Engineer", platform="LinkedIn", notes="old")
        )

        await asyncio.gather(
            service.update_application(
                created.id, JobApplicationUpdate(jobTitle="Engineer", status="OfferReceived")
            ),
            service.update_application(
                created.id, JobApplicationUpdate(jobTitle="Engineer", company="Globex")
            ),
        )

        final = await service.get_application(created.id)
        assert final.status == JobApplicationStatus.OFFER_RECEIVED
        assert final.company == "Globex"
        assert final.notes == "old"


class TestReferenceDeletedMidSave:
    """Tests for a company/platform deleted between resolution and write."""

    @staticmethod
    def vanishing_company(store, monkeypatch, times: int):
        """Make the first `times` company lookups return an already-deleted row."""
        real = store.get_or_create_company
        calls = {"count": 0}

        async def get_or_create_company(name):
            calls["count"] += 1
            company = await real(name)
            if calls["count"] <= times:
                return company.model_copy(update={"id": "comp-deleted"})
            return company

        monkeypatch.setattr(store, "get_or_create_company", get_or_create_company)
        return calls

    @pytest.mark.asyncio
    async def test_create_retries_once(self, job_service, memory_store, monkeypatch):
        calls = self.vanishing_company(memory_store, monkeypatch, times=1)

        created = await job_service.create_application(
            JobApplicationCreate(company="Microsoft", jobTitle="PM", platform="LinkedIn")
        )

        assert calls["count"] == 2
        assert created.company_id == "comp-001"

    @pytest.mark.asyncio
    async def test_create_gives_up_with_conflict(self, job_service, memory_store, monkeypatch):
        self.vanishing_company(memory_store, monkeypatch, times=REFERENCE_ATTEMPTS)

        with pytest.raises(ReferenceChangedError) as exc_info:
            await job_service.create_application(
                JobApplicationCreate(company="Microsoft", jobTitle="PM", platform="LinkedIn")
            )

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"kind": "company", "id": "comp-deleted"}

    @pytest.mark.asyncio
    async def test_update_gives_up_with_conflict(self, job_service, memory_store, monkeypatch):
        self.vanishing_company(memory_store, monkeypatch, times=REFERENCE_ATTEMPTS)

        with pytest.raises(ReferenceChangedError):
            await job_service.update_application(
                "ja-002", JobApplicationUpdate(jobTitle="Software Developer", company="Amazon")
            )

        unchanged = await job_service.get_application("ja-002")
        assert unchanged.company == "Google"


class TestDeleteApplication:
    """Tests for delete_application()."""

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, job_service):
        await job_service.delete_application("ja-001")

        with pytest.raises(JobApplicationNotFoundError):
            await job_service.get_application("ja-001")
        with pytest.raises(JobApplicationNotFoundError):
            await job_service.delete_application("ja-001")

    @pytest.mark.asyncio
    async def test_unknown_id(self, job_service):
        with pytest.raises(JobApplicationNotFoundError):
            await job_service.delete_application("nope")

    @pytest.mark.asyncio
    async def test_lost_race_is_not_found(self, job_service, memory_store, monkeypatch):
        """Test a record deleted between the exists check and the delete."""
        async def already_gone(record_id):
            return False

        monkeypatch.setattr(memory_store, "delete", already_gone)

        with pytest.raises(JobApplicationNotFoundError):
            await job_service.delete_application("ja-001")


# =============================================================================
# Reference Service
# =============================================================================

class TestReferenceService:
    """Tests for ReferenceService."""

    @pytest.mark.asyncio
    async def test_list_companies(self, reference_service):
        companies = await reference_service.list_companies()
        assert [c.name for c in companies] == ["Amazon", "Google", "Microsoft"]

    @pytest.mark.asyncio
    async def test_get_unknown_company(self, reference_service):
        with pytest.raises(CompanyNotFoundError):
            await reference_service.get_company("comp-404")

    @pytest.mark.asyncio
    async def test_get_platform(self, reference_service):
        platform = await reference_service.get_platform("plat-002")
        assert platform.name == "Indeed"

    @pytest.mark.asyncio
    async def test_delete_referenced_company_conflicts(self, reference_service):
        with pytest.raises(ReferenceInUseConflictError) as exc_info:
            await reference_service.delete_company("comp-002")

        # ja-002 plus the soft-deleted ja-deleted-001
        assert exc_info.value.details["usage_count"] == 2
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_unused_platform(self, reference_service, memory_store):
        platform = await memory_store.get_or_create_platform("Hired")

        await reference_service.delete_platform(platform.id)

        with pytest.raises(PlatformNotFoundError):
            await reference_service.get_platform(platform.id)
        with pytest.raises(PlatformNotFoundError):
            await reference_service.delete_platform(platform.id)

    @pytest.mark.asyncio
    async def test_blank_reference_id(self, reference_service):
        with pytest.raises(InvalidIdError):
            await reference_service.delete_company("  ")
