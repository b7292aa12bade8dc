# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Provides stores (seeded in-memory, empty in-memory, SQLite-backed),
#   services and a TestClient bound to a fresh store
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("USE_MOCK_STORE", "true")
os.environ.setdefault("MOCK_LATENCY_SCALE", "0")

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from core.repositories.memory import InMemoryStore
from core.repositories.sql import SqlStore
from core.services.job_application_service import JobApplicationService
from core.services.reference_service import ReferenceService
from lib.database import build_engine, create_schema


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def memory_store():
    """In-memory store with the sample records (ja-001, ja-deleted-001, ...)."""
    return InMemoryStore(latency_scale=0.0, seed=True)


@pytest.fixture
def empty_store():
    """In-memory store with no records at all."""
    return InMemoryStore(latency_scale=0.0, seed=False)


@pytest.fixture
def sql_store(tmp_path):
    """SQLite-backed store on a throwaway database file."""
    engine = build_engine(f"sqlite:///{tmp_path / 'jobtrail-test.db'}")
    create_schema(engine)
    yield SqlStore(engine)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def any_store(request, tmp_path):
    """Each store backend in turn, both starting empty."""
    if request.param == "memory":
        yield InMemoryStore(latency_scale=0.0, seed=False)
        return

    engine = build_engine(f"sqlite:///{tmp_path / 'jobtrail-contract.db'}")
    create_schema(engine)
    yield SqlStore(engine)
    engine.dispose()


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def job_service(memory_store):
    return JobApplicationService(memory_store)


@pytest.fixture
def reference_service(memory_store):
    return ReferenceService(memory_store)


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def client(memory_store):
    """FastAPI test client serving the seeded in-memory store."""
    with TestClient(create_app(store=memory_store)) as test_client:
        yield test_client


@pytest.fixture
def sample_create_payload():
    """Valid POST /api/jobapplications body."""
    return {
        "company": "Stripe",
        "jobTitle": "Backend Engineer",
        "platform": "Wellfound",
        "status": "Applied",
        "notes": "Applied with the updated resume.",
    }
