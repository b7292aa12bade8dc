# =============================================================================
# core/repositories/memory.py - In-Memory Store
# =============================================================================
# Thread-safe in-memory implementation of DataStore, used for development,
# demos and tests (USE_MOCK_STORE=true).
#
# - Records live in plain dicts keyed by id, owned by the store instance
# - A threading.Lock guards every read-modify-write sequence; nothing is
#   awaited while the lock is held, so each mutation is atomic for threads
#   and coroutines alike
# - Records are replaced wholesale on mutation and copies are handed out,
#   so callers never see a half-applied update
# - Optional artificial latency emulates I/O (scaled, 0 disables it)
#
# Usage:
#   store = InMemoryStore(latency_scale=1.0)
#   applications = await store.get_all()
# =============================================================================

import asyncio
import logging
import threading
from collections.abc import Iterable
from datetime import timedelta

from core.models.job_application import JobApplication, JobApplicationStatus
from core.models.reference import Company, Platform
from core.repositories.base import (
    DataStore,
    RecordNotFoundError,
    ReferenceInUseError,
    ReferenceNotFoundError,
    is_visible,
    resolve_update_fields,
)
from lib.utils import is_blank, new_record_id, next_timestamp, normalize_name, utcnow

logger = logging.getLogger(__name__)


# Base delay per operation (seconds), multiplied by latency_scale
OPERATION_LATENCY = {
    "get_all": 0.050,
    "get_by_id": 0.025,
    "create": 0.100,
    "update": 0.075,
    "delete": 0.050,
    "exists": 0.025,
}

# Readiness fails if the lock stays held longer than this (seconds)
PING_LOCK_TIMEOUT = 1.0


class InMemoryStore(DataStore):
    """
    In-memory job application store with seeded sample data.

    Args:
        latency_scale: Multiplier for OPERATION_LATENCY (0 = no delay)
        seed: Populate sample companies, platforms and applications
    """

    name = "memory"

    def __init__(self, latency_scale: float = 0.0, seed: bool = True):
        if latency_scale < 0:
            raise ValueError("latency_scale must be >= 0")

        self._applications: dict[str, JobApplication] = {}
        self._companies: dict[str, Company] = {}
        self._platforms: dict[str, Platform] = {}
        self._lock = threading.Lock()
        self._latency_scale = latency_scale

        if seed:
            self._seed()

    async def _simulate_latency(self, operation: str) -> None:
        delay = OPERATION_LATENCY.get(operation, 0.0) * self._latency_scale
        if delay > 0:
            await asyncio.sleep(delay)

    # -------------------------------------------------------------------------
    # Job Applications
    # -------------------------------------------------------------------------

    async def get_all(self) -> list[JobApplication]:
        await self._simulate_latency("get_all")

        with self._lock:
            visible = [r for r in self._applications.values() if is_visible(r)]

        visible.sort(key=lambda r: r.create_date, reverse=True)
        return [r.model_copy() for r in visible]

    async def get_by_id(self, record_id: str) -> JobApplication | None:
        await self._simulate_latency("get_by_id")

        if is_blank(record_id):
            return None

        with self._lock:
            record = self._applications.get(record_id)

        return record.model_copy() if is_visible(record) else None

    async def create(self, record: JobApplication) -> JobApplication:
        await self._simulate_latency("create")

        if record is None:
            raise ValueError("record must not be None")

        with self._lock:
            self._check_references(record)

            record_id = new_record_id()
            while record_id in self._applications:
                record_id = new_record_id()

            now = utcnow()
            stored = record.model_copy(update={
                "id": record_id,
                "company": self._companies[record.company_id].name,
                "platform": self._platforms[record.platform_id].name,
                "create_date": now,
                "modified_date": now,
                "is_deleted": False,
            })
            self._applications[record_id] = stored

        logger.debug(f"Stored job application {record_id}")
        return stored.model_copy()

    async def update(
        self,
        record: JobApplication,
        fields: Iterable[str] | None = None,
    ) -> JobApplication:
        await self._simulate_latency("update")

        if record is None:
            raise ValueError("record must not be None")
        selected = resolve_update_fields(fields)

        # Read, merge and write under one lock acquisition
        with self._lock:
            existing = self._applications.get(record.id)
            if not is_visible(existing):
                raise RecordNotFoundError(record.id)

            changes = {name: getattr(record, name) for name in selected}
            merged = existing.model_copy(update=changes)
            self._check_references(merged)

            updated = merged.model_copy(update={
                "company": self._companies[merged.company_id].name,
                "platform": self._platforms[merged.platform_id].name,
                "modified_date": next_timestamp(existing.modified_date),
            })
            self._applications[existing.id] = updated

        return updated.model_copy()

    async def delete(self, record_id: str) -> bool:
        await self._simulate_latency("delete")

        if is_blank(record_id):
            return False

        with self._lock:
            existing = self._applications.get(record_id)
            if not is_visible(existing):
                return False

            self._applications[record_id] = existing.model_copy(update={
                "is_deleted": True,
                "modified_date": next_timestamp(existing.modified_date),
            })

        return True

    async def exists(self, record_id: str) -> bool:
        await self._simulate_latency("exists")

        if is_blank(record_id):
            return False

        with self._lock:
            return is_visible(self._applications.get(record_id))

    async def ping(self) -> None:
        acquired = await asyncio.to_thread(self._lock.acquire, timeout=PING_LOCK_TIMEOUT)
        if not acquired:
            raise RuntimeError(f"Store lock not released within {PING_LOCK_TIMEOUT}s")
        self._lock.release()

    def _check_references(self, record: JobApplication) -> None:
        # Caller holds the lock
        if record.company_id not in self._companies:
            raise ReferenceNotFoundError("company", record.company_id)
        if record.platform_id not in self._platforms:
            raise ReferenceNotFoundError("platform", record.platform_id)

    # -------------------------------------------------------------------------
    # Companies
    # -------------------------------------------------------------------------

    async def list_companies(self) -> list[Company]:
        with self._lock:
            companies = list(self._companies.values())
        return [c.model_copy() for c in sorted(companies, key=lambda c: normalize_name(c.name))]

    async def get_company(self, company_id: str) -> Company | None:
        with self._lock:
            company = self._companies.get(company_id)
        return company.model_copy() if company else None

    async def get_or_create_company(self, name: str) -> Company:
        if is_blank(name):
            raise ValueError("Company name must not be blank")

        key = normalize_name(name)
        with self._lock:
            for company in self._companies.values():
                if normalize_name(company.name) == key:
                    return company.model_copy()

            now = utcnow()
            company = Company(
                id=new_record_id(),
                name=name.strip(),
                create_date=now,
                modified_date=now,
            )
            self._companies[company.id] = company

        logger.info(f"Created company {company.id} ({company.name})")
        return company.model_copy()

    async def delete_company(self, company_id: str) -> bool:
        with self._lock:
            if company_id not in self._companies:
                return False

            usage = sum(1 for r in self._applications.values() if r.company_id == company_id)
            if usage:
                raise ReferenceInUseError("company", company_id, usage)

            del self._companies[company_id]

        return True

    # -------------------------------------------------------------------------
    # Platforms
    # -------------------------------------------------------------------------

    async def list_platforms(self) -> list[Platform]:
        with self._lock:
            platforms = list(self._platforms.values())
        return [p.model_copy() for p in sorted(platforms, key=lambda p: normalize_name(p.name))]

    async def get_platform(self, platform_id: str) -> Platform | None:
        with self._lock:
            platform = self._platforms.get(platform_id)
        return platform.model_copy() if platform else None

    async def get_or_create_platform(self, name: str) -> Platform:
        if is_blank(name):
            raise ValueError("Platform name must not be blank")

        key = normalize_name(name)
        with self._lock:
            for platform in self._platforms.values():
                if normalize_name(platform.name) == key:
                    return platform.model_copy()

            now = utcnow()
            platform = Platform(
                id=new_record_id(),
                name=name.strip(),
                create_date=now,
                modified_date=now,
            )
            self._platforms[platform.id] = platform

        logger.info(f"Created platform {platform.id} ({platform.name})")
        return platform.model_copy()

    async def delete_platform(self, platform_id: str) -> bool:
        with self._lock:
            if platform_id not in self._platforms:
                return False

            usage = sum(1 for r in self._applications.values() if r.platform_id == platform_id)
            if usage:
                raise ReferenceInUseError("platform", platform_id, usage)

            del self._platforms[platform_id]

        return True

    # -------------------------------------------------------------------------
    # Seed Data
    # -------------------------------------------------------------------------

    def _seed(self) -> None:
        """
        Populate deterministic sample rows.

        Ids are fixed so tests can address known records, including one
        application that is already soft-deleted.
        """
        now = utcnow()

        def days_ago(days: int):
            return now - timedelta(days=days)

        companies = [
            Company(id="comp-001", name="Microsoft", description="Technology company",
                    industry="Technology", create_date=days_ago(100), modified_date=days_ago(100)),
            Company(id="comp-002", name="Google", description="Search and technology company",
                    industry="Technology", create_date=days_ago(100), modified_date=days_ago(100)),
            Company(id="comp-003", name="Amazon", description="E-commerce and cloud services",
                    industry="Technology", create_date=days_ago(100), modified_date=days_ago(100)),
        ]
        platforms = [
            Platform(id="plat-001", name="LinkedIn", description="Professional networking platform",
                     website_url="https://linkedin.com", create_date=days_ago(100), modified_date=days_ago(100)),
            Platform(id="plat-002", name="Indeed", description="Job search platform",
                     website_url="https://indeed.com", create_date=days_ago(100), modified_date=days_ago(100)),
            Platform(id="plat-003", name="Company Website",
                     description="Direct application through company website",
                     create_date=days_ago(100), modified_date=days_ago(100)),
        ]
        applications = [
            JobApplication(
                id="ja-001",
                company="Microsoft", company_id="comp-001",
                platform="LinkedIn", platform_id="plat-001",
                job_title="Senior Software Engineer",
                create_date=days_ago(45), modified_date=days_ago(10),
                status=JobApplicationStatus.INTERVIEW_SCHEDULED,
                notes="Initial screening completed. Technical interview scheduled for next week.",
            ),
            JobApplication(
                id="ja-002",
                company="Google", company_id="comp-002",
                platform="Company Website", platform_id="plat-003",
                job_title="Software Developer",
                create_date=days_ago(38), modified_date=days_ago(38),
                status=JobApplicationStatus.APPLIED,
                notes="Applied through careers page. Waiting for response.",
            ),
            JobApplication(
                id="ja-003",
                company="Amazon", company_id="comp-003",
                platform="Indeed", platform_id="plat-002",
                job_title="Full Stack Developer",
                create_date=days_ago(32), modified_date=days_ago(5),
                status=JobApplicationStatus.OFFER_RECEIVED,
                notes="Completed all interview rounds. Offer received with competitive salary package.",
            ),
            JobApplication(
                id="ja-deleted-001",
                company="Google", company_id="comp-002",
                platform="LinkedIn", platform_id="plat-001",
                job_title="Data Engineer",
                create_date=days_ago(60), modified_date=days_ago(20),
                status=JobApplicationStatus.WITHDRAWN,
                notes="Withdrew after accepting another process.",
                is_deleted=True,
            ),
        ]

        for company in companies:
            self._companies[company.id] = company
        for platform in platforms:
            self._platforms[platform.id] = platform
        for application in applications:
            self._applications[application.id] = application

        logger.debug(f"Seeded in-memory store with {len(applications)} job applications")
