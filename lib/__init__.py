# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - database.py: SQLAlchemy engine, session factory and table definitions
# - utils.py: Shared utilities (error base class, ids, timestamps)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import (
    ApplicationError,
    is_blank,
    new_record_id,
    next_timestamp,
    normalize_name,
    utcnow,
)

__all__ = [
    "ApplicationError",
    "is_blank",
    "new_record_id",
    "next_timestamp",
    "normalize_name",
    "utcnow",
]
