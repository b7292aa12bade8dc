# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the JobTrail API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_memory_store.py: In-memory store behavior, seed data, concurrency
# - test_store_contract.py: Repository contract run against every backend
# - test_sql_store.py: SQL-specific behavior (ordinals, restrict deletes)
# - test_services.py: Service-layer validation and error translation
# - test_api.py: HTTP endpoints through FastAPI's TestClient
# - test_config.py: Settings and store selection
#
# Run tests with: pytest
# =============================================================================
