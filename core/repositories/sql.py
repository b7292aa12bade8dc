# =============================================================================
# core/repositories/sql.py - SQL Store
# =============================================================================
# SQLAlchemy implementation of DataStore (USE_MOCK_STORE=false).
#
# Each operation opens a short-lived session inside a worker thread
# (asyncio.to_thread) so the event loop never blocks on the database.
# update() and delete() read and write inside one transaction, locking the
# row where the dialect supports SELECT ... FOR UPDATE. Company and platform
# rows are matched on their stored normalized_name.
# =============================================================================

import asyncio
import logging
from collections.abc import Iterable

from sqlalchemy import Engine, func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.models.job_application import JobApplication, JobApplicationStatus
from core.models.reference import Company, Platform
from core.repositories.base import (
    DataStore,
    RecordNotFoundError,
    ReferenceInUseError,
    ReferenceNotFoundError,
    resolve_update_fields,
)
from lib.database import (
    CompanyRow,
    JobApplicationRow,
    PlatformRow,
    create_session_factory,
)
from lib.utils import is_blank, new_record_id, next_timestamp, normalize_name, utcnow

logger = logging.getLogger(__name__)

LookupRow = CompanyRow | PlatformRow


def visible_clause():
    """The single soft-delete filter for SQL reads."""
    return JobApplicationRow.is_deleted.is_(False)


def _to_record(row: JobApplicationRow) -> JobApplication:
    return JobApplication(
        id=row.id,
        company=row.company.name,
        company_id=row.company_id,
        platform=row.platform.name,
        platform_id=row.platform_id,
        job_title=row.job_title,
        create_date=row.create_date,
        modified_date=row.modified_date,
        status=JobApplicationStatus.from_ordinal(row.status),
        notes=row.notes,
        is_deleted=row.is_deleted,
    )


def _to_company(row: CompanyRow) -> Company:
    return Company(
        id=row.id,
        name=row.name,
        description=row.description,
        website_url=row.website_url,
        industry=row.industry,
        create_date=row.create_date,
        modified_date=row.modified_date,
    )


def _to_platform(row: PlatformRow) -> Platform:
    return Platform(
        id=row.id,
        name=row.name,
        description=row.description,
        website_url=row.website_url,
        is_active=row.is_active,
        create_date=row.create_date,
        modified_date=row.modified_date,
    )


class SqlStore(DataStore):
    """
    Job application store backed by a relational database.

    Args:
        engine: SQLAlchemy engine (schema must already exist)
    """

    name = "sql"

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    async def close(self) -> None:
        await asyncio.to_thread(self._engine.dispose)

    # -------------------------------------------------------------------------
    # Job Applications
    # -------------------------------------------------------------------------

    async def get_all(self) -> list[JobApplication]:
        return await asyncio.to_thread(self._get_all)

    def _get_all(self) -> list[JobApplication]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(JobApplicationRow)
                .where(visible_clause())
                .order_by(JobApplicationRow.create_date.desc())
            ).all()
            return [_to_record(row) for row in rows]

    async def get_by_id(self, record_id: str) -> JobApplication | None:
        if is_blank(record_id):
            return None
        return await asyncio.to_thread(self._get_by_id, record_id)

    def _get_by_id(self, record_id: str) -> JobApplication | None:
        with self._session_factory() as session:
            row = self._find_visible(session, record_id)
            return _to_record(row) if row else None

    async def create(self, record: JobApplication) -> JobApplication:
        if record is None:
            raise ValueError("record must not be None")
        return await asyncio.to_thread(self._create, record)

    def _create(self, record: JobApplication) -> JobApplication:
        now = utcnow()
        row = JobApplicationRow(
            id=new_record_id(),
            company_id=record.company_id,
            platform_id=record.platform_id,
            job_title=record.job_title,
            status=record.status.ordinal,
            notes=record.notes,
            create_date=now,
            modified_date=now,
            is_deleted=False,
        )

        with self._session_factory.begin() as session:
            self._check_references(session, record.company_id, record.platform_id)
            session.add(row)
            session.flush()
            session.refresh(row)
            created = _to_record(row)

        logger.debug(f"Stored job application {created.id}")
        return created

    async def update(
        self,
        record: JobApplication,
        fields: Iterable[str] | None = None,
    ) -> JobApplication:
        if record is None:
            raise ValueError("record must not be None")
        selected = resolve_update_fields(fields)
        return await asyncio.to_thread(self._update, record, selected)

    def _update(self, record: JobApplication, selected: frozenset[str]) -> JobApplication:
        with self._session_factory.begin() as session:
            row = self._find_visible(session, record.id, for_update=True)
            if row is None:
                raise RecordNotFoundError(record.id)

            # Names are derived from the referenced rows
            if "company_id" in selected:
                row.company_id = record.company_id
            if "platform_id" in selected:
                row.platform_id = record.platform_id
            if "job_title" in selected:
                row.job_title = record.job_title
            if "status" in selected:
                row.status = record.status.ordinal
            if "notes" in selected:
                row.notes = record.notes

            self._check_references(session, row.company_id, row.platform_id)
            row.modified_date = next_timestamp(row.modified_date)

            session.flush()
            # Reload company/platform names for the new references
            session.expire(row, ["company", "platform"])
            return _to_record(row)

    async def delete(self, record_id: str) -> bool:
        if is_blank(record_id):
            return False
        return await asyncio.to_thread(self._delete, record_id)

    def _delete(self, record_id: str) -> bool:
        with self._session_factory.begin() as session:
            row = self._find_visible(session, record_id, for_update=True)
            if row is None:
                return False

            row.is_deleted = True
            row.modified_date = next_timestamp(row.modified_date)
            return True

    async def exists(self, record_id: str) -> bool:
        if is_blank(record_id):
            return False
        return await asyncio.to_thread(self._exists, record_id)

    def _exists(self, record_id: str) -> bool:
        with self._session_factory() as session:
            count = session.scalar(
                select(func.count())
                .select_from(JobApplicationRow)
                .where(JobApplicationRow.id == record_id, visible_clause())
            )
            return bool(count)

    @staticmethod
    def _check_references(session: Session, company_id: str | None, platform_id: str | None) -> None:
        # Locked until commit so a concurrent reference delete waits for us
        if company_id is None or session.get(CompanyRow, company_id, with_for_update=True) is None:
            raise ReferenceNotFoundError("company", company_id)
        if platform_id is None or session.get(PlatformRow, platform_id, with_for_update=True) is None:
            raise ReferenceNotFoundError("platform", platform_id)

    @staticmethod
    def _find_visible(
        session: Session,
        record_id: str,
        for_update: bool = False,
    ) -> JobApplicationRow | None:
        query = select(JobApplicationRow).where(
            JobApplicationRow.id == record_id, visible_clause()
        )
        if for_update:
            query = query.with_for_update(of=JobApplicationRow)
        return session.scalars(query).unique().first()

    # -------------------------------------------------------------------------
    # Companies
    # -------------------------------------------------------------------------

    async def list_companies(self) -> list[Company]:
        return await asyncio.to_thread(self._list_companies)

    def _list_companies(self) -> list[Company]:
        with self._session_factory() as session:
            rows = session.scalars(select(CompanyRow).order_by(CompanyRow.normalized_name)).all()
            return [_to_company(row) for row in rows]

    async def get_company(self, company_id: str) -> Company | None:
        return await asyncio.to_thread(self._get_company, company_id)

    def _get_company(self, company_id: str) -> Company | None:
        with self._session_factory() as session:
            row = session.get(CompanyRow, company_id)
            return _to_company(row) if row else None

    async def get_or_create_company(self, name: str) -> Company:
        if is_blank(name):
            raise ValueError("Company name must not be blank")
        row = await asyncio.to_thread(self._get_or_create, CompanyRow, "company", name)
        return _to_company(row)

    async def delete_company(self, company_id: str) -> bool:
        return await asyncio.to_thread(self._delete_company, company_id)

    def _delete_company(self, company_id: str) -> bool:
        with self._session_factory.begin() as session:
            row = session.get(CompanyRow, company_id, with_for_update=True)
            if row is None:
                return False

            usage = session.scalar(
                select(func.count())
                .select_from(JobApplicationRow)
                .where(JobApplicationRow.company_id == company_id)
            )
            if usage:
                raise ReferenceInUseError("company", company_id, usage)

            session.delete(row)
            return True

    # -------------------------------------------------------------------------
    # Platforms
    # -------------------------------------------------------------------------

    async def list_platforms(self) -> list[Platform]:
        return await asyncio.to_thread(self._list_platforms)

    def _list_platforms(self) -> list[Platform]:
        with self._session_factory() as session:
            rows = session.scalars(select(PlatformRow).order_by(PlatformRow.normalized_name)).all()
            return [_to_platform(row) for row in rows]

    async def get_platform(self, platform_id: str) -> Platform | None:
        return await asyncio.to_thread(self._get_platform, platform_id)

    def _get_platform(self, platform_id: str) -> Platform | None:
        with self._session_factory() as session:
            row = session.get(PlatformRow, platform_id)
            return _to_platform(row) if row else None

    async def get_or_create_platform(self, name: str) -> Platform:
        if is_blank(name):
            raise ValueError("Platform name must not be blank")
        row = await asyncio.to_thread(self._get_or_create, PlatformRow, "platform", name, is_active=True)
        return _to_platform(row)

    async def delete_platform(self, platform_id: str) -> bool:
        return await asyncio.to_thread(self._delete_platform, platform_id)

    def _delete_platform(self, platform_id: str) -> bool:
        with self._session_factory.begin() as session:
            row = session.get(PlatformRow, platform_id, with_for_update=True)
            if row is None:
                return False

            usage = session.scalar(
                select(func.count())
                .select_from(JobApplicationRow)
                .where(JobApplicationRow.platform_id == platform_id)
            )
            if usage:
                raise ReferenceInUseError("platform", platform_id, usage)

            session.delete(row)
            return True

    # -------------------------------------------------------------------------
    # Lookup rows
    # -------------------------------------------------------------------------

    def _get_or_create(self, row_type: type[LookupRow], kind: str, name: str, **extra) -> LookupRow:
        """
        Row whose normalized name matches, inserting one if there is none.

        Two callers inserting the same new name race on the unique
        normalized_name constraint; the loser reads back the winner's row.
        """
        key = normalize_name(name)
        try:
            with self._session_factory.begin() as session:
                row = self._find_by_name(session, row_type, key)
                if row is not None:
                    return row

                now = utcnow()
                row = row_type(
                    id=new_record_id(),
                    name=name.strip(),
                    normalized_name=key,
                    create_date=now,
                    modified_date=now,
                    **extra,
                )
                session.add(row)
        except IntegrityError:
            with self._session_factory() as session:
                row = self._find_by_name(session, row_type, key)
            if row is None:
                raise
            logger.debug(f"Concurrent insert of {kind} '{key}', using {row.id}")
            return row

        logger.info(f"Created {kind} {row.id} ({row.name})")
        return row

    @staticmethod
    def _find_by_name(session: Session, row_type: type[LookupRow], key: str) -> LookupRow | None:
        return session.scalars(select(row_type).where(row_type.normalized_name == key)).first()

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def ping(self) -> None:
        await asyncio.to_thread(self._ping)

    def _ping(self) -> None:
        with self._engine.connect() as connection:
            connection.execute(text("SELECT 1"))
