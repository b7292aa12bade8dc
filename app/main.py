# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the JobTrail API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app import __version__
from app.config import settings
from app.dependencies import build_store
from app.exceptions import (
    JobTrailException,
    jobtrail_exception_handler,
    unexpected_exception_handler,
    validation_exception_handler,
)
from app.routers import companies, health, job_applications, platforms
from core.repositories.base import DataStore

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


DESCRIPTION = """
## Job Application Tracking API

Keep track of every job you applied to, where you found it, and how far it got.

### Resources

| Resource | Description |
|----------|-------------|
| **Job Applications** | Create, read, update and soft-delete applications |
| **Companies** | Employers referenced by applications (created on demand) |
| **Platforms** | Where applications were submitted (created on demand) |

### Quick Start

```bash
# 1. Record an application
curl -X POST http://localhost:8000/api/jobapplications \\
  -H "Content-Type: application/json" \\
  -d '{"company": "Microsoft", "jobTitle": "Software Engineer", "platform": "LinkedIn"}'

# 2. Move it forward
curl -X PUT http://localhost:8000/api/jobapplications/{id} \\
  -H "Content-Type: application/json" \\
  -d '{"jobTitle": "Software Engineer", "status": "InterviewScheduled"}'

# 3. List what's open
curl http://localhost:8000/api/jobapplications
```
"""


def create_app(store: DataStore | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Store instance to serve from. When omitted, the lifespan
            handler builds one from settings (USE_MOCK_STORE / DATABASE_URL).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        - Startup: Build the configured store (unless one was injected)
        - Shutdown: Release store resources
        """
        logger.info(f"Starting JobTrail API in {settings.ENVIRONMENT} mode")
        logger.info(f"CORS origins: {settings.cors_origins_list}")

        if getattr(app.state, "store", None) is None:
            app.state.store = build_store(settings)

        yield

        logger.info("Shutting down JobTrail API")
        await app.state.store.close()

    app = FastAPI(
        title="JobTrail API",
        description=DESCRIPTION,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Job Applications",
                "description": "Create, read, update and soft-delete job applications",
            },
            {
                "name": "Companies",
                "description": "Companies referenced by job applications",
            },
            {
                "name": "Platforms",
                "description": "Platforms where applications were submitted",
            },
            {
                "name": "Health",
                "description": "API health and readiness checks",
            },
        ],
    )
    app.state.store = store

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    # CORS middleware - allows cross-origin requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    app.add_exception_handler(JobTrailException, jobtrail_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    # Job application endpoints
    app.include_router(
        job_applications.router,
        prefix="/api/jobapplications",
        tags=["Job Applications"]
    )

    # Reference data endpoints
    app.include_router(
        companies.router,
        prefix="/api/companies",
        tags=["Companies"]
    )
    app.include_router(
        platforms.router,
        prefix="/api/platforms",
        tags=["Platforms"]
    )

    # Health check endpoints
    app.include_router(
        health.router,
        prefix="/api",
        tags=["Health"]
    )

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint - returns API info.
        """
        return {
            "name": "JobTrail API",
            "version": __version__,
            "docs": "/docs",
            "health": "/api/health",
        }

    return app


app = create_app()
