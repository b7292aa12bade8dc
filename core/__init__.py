# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for records and request/response bodies
# - repositories/: Store contracts and the in-memory / SQL backends
# - services/: Validation, mapping and error translation
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
