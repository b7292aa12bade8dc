# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - job_applications.py: Job application CRUD + soft delete
# - companies.py: Company lookup endpoints
# - platforms.py: Platform lookup endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import job_applications
from . import companies
from . import platforms

__all__ = [
    "health",
    "job_applications",
    "companies",
    "platforms",
]
