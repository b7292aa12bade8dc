# =============================================================================
# lib/database.py - SQLAlchemy Engine and Table Definitions
# =============================================================================
# Persistent storage for the SQL-backed store (USE_MOCK_STORE=false):
# - build_engine(): engine from a connection string (DATABASE_URL)
# - create_session_factory(): sessionmaker bound to the engine
# - create_schema(): create tables that don't exist yet
# - CompanyRow / PlatformRow / JobApplicationRow: ORM tables
#
# Usage:
#   engine = build_engine("sqlite:///./jobtrail.db")
#   create_schema(engine)
#   Session = create_session_factory(engine)
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Engine,
    ForeignKey,
    Integer,
    String,
    create_engine,
    event,
)
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


# =============================================================================
# Column Types
# =============================================================================

class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime column.

    SQLite drops tzinfo on the way back; results are re-tagged as UTC so the
    rest of the app only ever sees aware datetimes.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


# =============================================================================
# Tables
# =============================================================================

class Base(DeclarativeBase):
    pass


class CompanyRow(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # normalize_name(name), the lookup key
    normalized_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(String(500))
    website_url: Mapped[str | None] = mapped_column(String(200))
    industry: Mapped[str | None] = mapped_column(String(100))
    create_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    modified_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)


class PlatformRow(Base):
    __tablename__ = "job_platforms"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # normalize_name(name), the lookup key
    normalized_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(String(500))
    website_url: Mapped[str | None] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    create_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    modified_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)


class JobApplicationRow(Base):
    __tablename__ = "job_applications"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    company_id: Mapped[str] = mapped_column(
        ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    platform_id: Mapped[str] = mapped_column(
        ForeignKey("job_platforms.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    job_title: Mapped[str] = mapped_column(String(100), nullable=False)
    create_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    modified_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    # Stored as the status ordinal
    status: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    notes: Mapped[str | None] = mapped_column(String(1000))
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    company: Mapped[CompanyRow] = relationship(lazy="joined", innerjoin=True)
    platform: Mapped[PlatformRow] = relationship(lazy="joined", innerjoin=True)


# =============================================================================
# Engine / Session
# =============================================================================

def normalize_database_url(database_url: str) -> str:
    """
    Clean up a connection string.

    Strips whitespace and rewrites the legacy postgres:// scheme that
    SQLAlchemy no longer accepts.

    Raises:
        ValueError: If no dialect can be parsed from the URL
    """
    database_url = database_url.strip()
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
        logger.info("Rewrote postgres:// to postgresql:// for compatibility")

    parsed = make_url(database_url)
    if not parsed.drivername:
        raise ValueError(
            "Invalid DATABASE_URL - no dialect found. "
            "Expected schemes like postgresql://, sqlite:///path.db"
        )
    return database_url


def sanitize_database_url(database_url: str) -> str:
    """Connection string with the password masked, for logging."""
    return make_url(database_url).render_as_string(hide_password=True)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given connection string.

    SQLite connections are shared across worker threads and get foreign
    key enforcement switched on.

    Args:
        database_url: SQLAlchemy connection string
        echo: Log every SQL statement

    Returns:
        Engine
    """
    database_url = normalize_database_url(database_url)
    parsed = make_url(database_url)

    engine_kwargs: dict = {"echo": echo}
    if parsed.get_backend_name() == "sqlite":
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_pre_ping"] = True

    logger.info(f"Initializing SQLAlchemy with URL: {sanitize_database_url(database_url)}")
    engine = create_engine(database_url, **engine_kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory; objects stay readable after commit."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info(f"Ensured tables: {sorted(Base.metadata.tables)}")
