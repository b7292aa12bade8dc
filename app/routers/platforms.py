# =============================================================================
# app/routers/platforms.py - Platform Endpoints
# =============================================================================
# Platforms are created implicitly when an application names a new one.
# These endpoints list, inspect and remove them.
# =============================================================================

from fastapi import APIRouter, Response, status

from app.dependencies import ReferenceServiceDep
from core.models.reference import Platform

router = APIRouter()


@router.get("", response_model=list[Platform])
async def list_platforms(service: ReferenceServiceDep):
    """List all platforms, alphabetically."""
    return await service.list_platforms()


@router.get("/{platform_id}", response_model=Platform)
async def get_platform(platform_id: str, service: ReferenceServiceDep):
    """Get a platform by ID."""
    return await service.get_platform(platform_id)


@router.delete("/{platform_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_platform(platform_id: str, service: ReferenceServiceDep):
    """
    Delete a platform.

    Refused with 409 while any job application (including deleted ones)
    still references it.
    """
    await service.delete_platform(platform_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
