# =============================================================================
# tests/test_memory_store.py - In-Memory Store Tests
# =============================================================================
# Tests for InMemoryStore:
# - Seed data is present and the pre-deleted record is filtered out
# - Concurrent mutations are serialized by the store lock
# - Simulated latency is applied only when enabled
# - Reference rows are looked up case-insensitively and delete-restricted
# =============================================================================

import asyncio
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.models.job_application import JobApplication, JobApplicationStatus
from core.repositories.base import (
    RecordNotFoundError,
    ReferenceInUseError,
    ReferenceNotFoundError,
)
from core.repositories.memory import InMemoryStore


# =============================================================================
# Seed Data Tests
# =============================================================================

class TestSeedData:
    """Test the records populated at construction."""

    @pytest.mark.asyncio
    async def test_get_all_excludes_pre_deleted_record(self, memory_store):
        """Test that ja-001 is listed and ja-deleted-001 is not."""
        ids = [a.id for a in await memory_store.get_all()]

        assert "ja-001" in ids
        assert "ja-deleted-001" not in ids

    @pytest.mark.asyncio
    async def test_seeded_record_values(self, memory_store):
        """Test the known values of ja-001."""
        record = await memory_store.get_by_id("ja-001")

        assert record.company == "Microsoft"
        assert record.status == JobApplicationStatus.INTERVIEW_SCHEDULED
        assert record.is_deleted is False

    @pytest.mark.asyncio
    async def test_deleted_record_is_absent(self, memory_store):
        """Test that the pre-deleted record is invisible from the start."""
        assert await memory_store.get_by_id("ja-deleted-001") is None
        assert await memory_store.exists("ja-deleted-001") is False
        assert await memory_store.delete("ja-deleted-001") is False

    @pytest.mark.asyncio
    async def test_get_all_newest_first(self, memory_store):
        """Test ordering by creation date, descending."""
        records = await memory_store.get_all()
        dates = [r.create_date for r in records]

        assert dates == sorted(dates, reverse=True)
        assert [r.id for r in records] == ["ja-003", "ja-002", "ja-001"]

    @pytest.mark.asyncio
    async def test_seed_can_be_disabled(self, empty_store):
        assert await empty_store.get_all() == []
        assert await empty_store.list_companies() == []

    @pytest.mark.asyncio
    async def test_delete_then_update_scenario(self, memory_store):
        """Test delete ja-001, then lookup and update both report absence."""
        assert await memory_store.delete("ja-001") is True
        assert await memory_store.get_by_id("ja-001") is None

        stale = JobApplication(
            id="ja-001",
            company="Microsoft", company_id="comp-001",
            platform="LinkedIn", platform_id="plat-001",
            job_title="Principal Engineer",
        )
        with pytest.raises(RecordNotFoundError):
            await memory_store.update(stale)


# =============================================================================
# Isolation Tests
# =============================================================================

class TestIsolation:
    """Test that callers can't mutate stored state through returned objects."""

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, memory_store):
        record = await memory_store.get_by_id("ja-001")
        record.job_title = "Changed outside the store"
        record.is_deleted = True

        fresh = await memory_store.get_by_id("ja-001")
        assert fresh is not None
        assert fresh.job_title == "Senior Software Engineer"

    @pytest.mark.asyncio
    async def test_create_ignores_client_id(self, memory_store):
        record = JobApplication(
            id="ja-001",
            company="Microsoft", company_id="comp-001",
            platform="LinkedIn", platform_id="plat-001",
            job_title="Duplicate id attempt",
            is_deleted=True,
        )

        created = await memory_store.create(record)

        assert created.id != "ja-001"
        assert created.is_deleted is False
        original = await memory_store.get_by_id("ja-001")
        assert original.job_title == "Senior Software Engineer"

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_reference(self, memory_store):
        record = JobApplication(
            company="Nowhere", company_id="comp-missing",
            platform="LinkedIn", platform_id="plat-001",
            job_title="Engineer",
        )

        with pytest.raises(ReferenceNotFoundError):
            await memory_store.create(record)


# =============================================================================
# Concurrency Tests
# =============================================================================

class TestConcurrency:
    """Test that concurrent callers never corrupt the store."""

    @pytest.mark.asyncio
    async def test_concurrent_deletes_succeed_once(self):
        """Test that exactly one of many concurrent deletes wins."""
        store = InMemoryStore(latency_scale=0.1)

        results = await asyncio.gather(*(store.delete("ja-002") for _ in range(10)))

        assert results.count(True) == 1
        assert await store.exists("ja-002") is False

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_unique_ids(self, memory_store):
        async def create(n: int):
            return await memory_store.create(JobApplication(
                company="Microsoft", company_id="comp-001",
                platform="LinkedIn", platform_id="plat-001",
                job_title=f"Engineer {n}",
            ))

        created = await asyncio.gather(*(create(n) for n in range(25)))

        ids = {c.id for c in created}
        assert len(ids) == 25
        assert all(ids)

    def test_threaded_updates_keep_timestamps_increasing(self, memory_store):
        """Test updates from many threads against the same record."""
        def update(n: int):
            return asyncio.run(memory_store.update(JobApplication(
                id="ja-003",
                company="Amazon", company_id="comp-003",
                platform="Indeed", platform_id="plat-002",
                job_title=f"Revision {n}",
                status=JobApplicationStatus.UNDER_REVIEW,
            )))

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(update, range(40)))

        stamps = [r.modified_date for r in results]
        assert len(set(stamps)) == len(stamps)

        final = asyncio.run(memory_store.get_by_id("ja-003"))
        assert final.modified_date == max(stamps)
        assert final.job_title in {r.job_title for r in results}

    @pytest.mark.asyncio
    async def test_concurrent_get_or_create_returns_one_company(self, empty_store):
        companies = await asyncio.gather(
            *(empty_store.get_or_create_company("Acme") for _ in range(10))
        )

        assert len({c.id for c in companies}) == 1
        assert len(await empty_store.list_companies()) == 1


# =============================================================================
# Latency Tests
# =============================================================================

class TestLatency:
    """Test the simulated I/O delay."""

    def test_negative_scale_rejected(self):
        with pytest.raises(ValueError):
            InMemoryStore(latency_scale=-1)

    @pytest.mark.asyncio
    async def test_latency_applied_when_enabled(self):
        store = InMemoryStore(latency_scale=1.0)

        started = time.perf_counter()
        await store.get_by_id("ja-001")
        elapsed = time.perf_counter() - started

        # get_by_id base delay is 25ms
        assert elapsed >= 0.02

    @pytest.mark.asyncio
    async def test_no_latency_by_default(self, memory_store):
        started = time.perf_counter()
        for _ in range(20):
            await memory_store.get_by_id("ja-001")
        elapsed = time.perf_counter() - started

        assert elapsed < 0.5


# =============================================================================
# Reference Data Tests
# =============================================================================

class TestReferenceData:
    """Test companies and platforms in the in-memory store."""

    @pytest.mark.asyncio
    async def test_get_or_create_matches_case_insensitively(self, memory_store):
        company = await memory_store.get_or_create_company("  microsoft ")

        assert company.id == "comp-001"
        assert company.name == "Microsoft"

    @pytest.mark.asyncio
    async def test_get_or_create_new_platform(self, memory_store):
        platform = await memory_store.get_or_create_platform("Glassdoor")

        assert platform.id not in {"plat-001", "plat-002", "plat-003"}
        assert platform.is_active is True
        assert (await memory_store.get_platform(platform.id)).name == "Glassdoor"

    @pytest.mark.asyncio
    async def test_list_sorted_by_name(self, memory_store):
        names = [c.name for c in await memory_store.list_companies()]
        assert names == ["Amazon", "Google", "Microsoft"]

    @pytest.mark.asyncio
    async def test_delete_restricted_by_deleted_application(self, memory_store):
        """Test that a soft-deleted application still blocks a hard delete."""
        await memory_store.delete("ja-001")

        with pytest.raises(ReferenceInUseError) as exc_info:
            await memory_store.delete_company("comp-001")

        assert exc_info.value.usage_count == 1

    @pytest.mark.asyncio
    async def test_delete_unused_company(self, memory_store):
        company = await memory_store.get_or_create_company("Unused Inc")

        assert await memory_store.delete_company(company.id) is True
        assert await memory_store.get_company(company.id) is None
        assert await memory_store.delete_company(company.id) is False
