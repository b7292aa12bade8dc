# =============================================================================
# core/repositories/__init__.py - Store Exports
# =============================================================================

from .base import (
    MUTABLE_FIELDS,
    DataStore,
    JobApplicationRepository,
    RecordNotFoundError,
    ReferenceDataRepository,
    ReferenceInUseError,
    ReferenceNotFoundError,
    RepositoryError,
    is_visible,
    resolve_update_fields,
)
from .memory import InMemoryStore
from .sql import SqlStore

__all__ = [
    "MUTABLE_FIELDS",
    "DataStore",
    "JobApplicationRepository",
    "ReferenceDataRepository",
    "RepositoryError",
    "RecordNotFoundError",
    "ReferenceInUseError",
    "ReferenceNotFoundError",
    "is_visible",
    "resolve_update_fields",
    "InMemoryStore",
    "SqlStore",
]
