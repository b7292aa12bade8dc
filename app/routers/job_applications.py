# =============================================================================
# app/routers/job_applications.py - Job Application CRUD Endpoints
# =============================================================================
# Handles job application listing, lookup, creation, update and soft delete.
# Request/response models live in core/models/job_application.py.
# =============================================================================

from fastapi import APIRouter, Request, Response, status

from app.dependencies import JobApplicationServiceDep
from core.models.job_application import (
    JobApplicationCreate,
    JobApplicationResponse,
    JobApplicationUpdate,
)

router = APIRouter()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=list[JobApplicationResponse])
async def list_job_applications(service: JobApplicationServiceDep):
    """
    List job applications.

    Returns every application that hasn't been deleted, newest first.
    """
    applications = await service.list_applications()
    return [JobApplicationResponse.from_record(a) for a in applications]


@router.get("/{application_id}", response_model=JobApplicationResponse)
async def get_job_application(application_id: str, service: JobApplicationServiceDep):
    """
    Get a job application by ID.

    Deleted applications are reported as not found.
    """
    application = await service.get_application(application_id)
    return JobApplicationResponse.from_record(application)


@router.post(
    "",
    response_model=JobApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_job_application(
    payload: JobApplicationCreate,
    request: Request,
    response: Response,
    service: JobApplicationServiceDep,
):
    """
    Create a new job application.

    The server assigns the id and timestamps. The Location header points
    at the new record.
    """
    application = await service.create_application(payload)

    response.headers["Location"] = str(
        request.url_for("get_job_application", application_id=application.id)
    )
    return JobApplicationResponse.from_record(application)


@router.put("/{application_id}", response_model=JobApplicationResponse)
async def update_job_application(
    application_id: str,
    payload: JobApplicationUpdate,
    service: JobApplicationServiceDep,
):
    """
    Update an existing job application.

    `jobTitle` is required; `status`, `notes`, `company` and `platform`
    are only changed when present in the body.
    """
    application = await service.update_application(application_id, payload)
    return JobApplicationResponse.from_record(application)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job_application(application_id: str, service: JobApplicationServiceDep):
    """
    Soft delete a job application.

    The record is flagged as deleted but kept for auditing.
    """
    await service.delete_application(application_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
