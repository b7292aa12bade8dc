# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The store is built once (in the app lifespan) and kept on app.state;
# services are cheap wrappers created per request around that instance.
# =============================================================================

import logging
from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from core.repositories.base import DataStore
from core.repositories.memory import InMemoryStore
from core.repositories.sql import SqlStore
from core.services.job_application_service import JobApplicationService
from core.services.reference_service import ReferenceService
from lib.database import build_engine, create_schema

logger = logging.getLogger(__name__)


def build_store(config: Settings) -> DataStore:
    """
    Build the store backend selected by configuration.

    USE_MOCK_STORE=true  -> seeded InMemoryStore
    USE_MOCK_STORE=false -> SqlStore on DATABASE_URL (tables created if missing)
    """
    if config.USE_MOCK_STORE:
        logger.info(
            f"Using in-memory store (seed={config.SEED_MOCK_DATA}, "
            f"latency_scale={config.MOCK_LATENCY_SCALE})"
        )
        return InMemoryStore(
            latency_scale=config.MOCK_LATENCY_SCALE,
            seed=config.SEED_MOCK_DATA,
        )

    engine = build_engine(config.DATABASE_URL, echo=config.SQL_ECHO)
    create_schema(engine)
    logger.info(f"Using SQL store (dialect: {engine.dialect.name})")
    return SqlStore(engine)


def get_store(request: Request) -> DataStore:
    """
    Get the store instance for this app.

    Returns the instance created at startup.
    """
    return request.app.state.store


StoreDep = Annotated[DataStore, Depends(get_store)]


def get_job_application_service(store: StoreDep) -> JobApplicationService:
    return JobApplicationService(store)


def get_reference_service(store: StoreDep) -> ReferenceService:
    return ReferenceService(store)


# Type aliases for dependency injection
JobApplicationServiceDep = Annotated[JobApplicationService, Depends(get_job_application_service)]
ReferenceServiceDep = Annotated[ReferenceService, Depends(get_reference_service)]
