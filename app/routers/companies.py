# =============================================================================
# app/routers/companies.py - Company Endpoints
# =============================================================================
# Companies are created implicitly when an application names a new one.
# These endpoints list, inspect and remove them.
# =============================================================================

from fastapi import APIRouter, Response, status

from app.dependencies import ReferenceServiceDep
from core.models.reference import Company

router = APIRouter()


@router.get("", response_model=list[Company])
async def list_companies(service: ReferenceServiceDep):
    """List all companies, alphabetically."""
    return await service.list_companies()


@router.get("/{company_id}", response_model=Company)
async def get_company(company_id: str, service: ReferenceServiceDep):
    """Get a company by ID."""
    return await service.get_company(company_id)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(company_id: str, service: ReferenceServiceDep):
    """
    Delete a company.

    Refused with 409 while any job application (including deleted ones)
    still references it.
    """
    await service.delete_company(company_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
