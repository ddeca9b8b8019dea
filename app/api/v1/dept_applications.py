"""
Department Application Review API
TPO_Dept coordinators approve, hold or reject submitted applications
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as SchemaValidationError

from app.core.deps import batch_rate_limit, get_application_service, require_coordinator
from app.models.user import User
from app.schemas.application import (
    ApplicationActionResponse,
    ApplicationDetailResponse,
    ApplicationFilters,
    ApplicationQueueResponse,
    ApplicationStatsResponse,
    ApproveApplicationRequest,
    BatchApproveRequest,
    HoldApplicationRequest,
    RejectApplicationRequest,
)
from app.schemas.student import BatchActionResponse
from app.services.application_review_service import ApplicationReviewService
from app.utils.constants import ApplicationStatus

router = APIRouter()


@router.get("", response_model=ApplicationQueueResponse)
async def list_applications(
    status: ApplicationStatus = Query(ApplicationStatus.SUBMITTED),
    job_posting_id: Optional[UUID] = Query(None),
    cgpa_min: Optional[float] = Query(None, ge=0, le=10),
    cgpa_max: Optional[float] = Query(None, ge=0, le=10),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    current_user: User = Depends(require_coordinator),
    service: ApplicationReviewService = Depends(get_application_service),
):
    """
    Review queue, oldest application first

    **Auth**: TPO_Dept (JWT required)
    """
    try:
        filters = ApplicationFilters(
            status=status,
            job_posting_id=job_posting_id,
            cgpa_min=cgpa_min,
            cgpa_max=cgpa_max,
            date_from=date_from,
            date_to=date_to,
            search=search,
        )
    except SchemaValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))

    result = await service.list_queue(current_user.id, filters)
    return ApplicationQueueResponse.model_validate(result)


@router.get("/stats", response_model=ApplicationStatsResponse)
async def application_stats(
    current_user: User = Depends(require_coordinator),
    service: ApplicationReviewService = Depends(get_application_service),
):
    result = await service.stats(current_user.id)
    return ApplicationStatsResponse.model_validate(result)


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
async def get_application(
    application_id: UUID,
    current_user: User = Depends(require_coordinator),
    service: ApplicationReviewService = Depends(get_application_service),
):
    """Application with job posting, student record, resume and consent."""
    result = await service.get_detail(current_user.id, application_id)
    return ApplicationDetailResponse.model_validate(result)


@router.put("/{application_id}/approve", response_model=ApplicationActionResponse)
async def approve_application(
    application_id: UUID,
    body: Optional[ApproveApplicationRequest] = None,
    current_user: User = Depends(require_coordinator),
    service: ApplicationReviewService = Depends(get_application_service),
):
    """
    Approve and forward to TPO Admin

    Student must be verified and meet the posting's eligibility criteria.
    """
    result = await service.approve(current_user.id, application_id, body.notes if body else None)
    return ApplicationActionResponse.model_validate(result)


@router.put("/{application_id}/hold", response_model=ApplicationActionResponse)
async def hold_application(
    application_id: UUID,
    body: HoldApplicationRequest,
    current_user: User = Depends(require_coordinator),
    service: ApplicationReviewService = Depends(get_application_service),
):
    result = await service.hold(current_user.id, application_id, body.issues)
    return ApplicationActionResponse.model_validate(result)


@router.put("/{application_id}/reject", response_model=ApplicationActionResponse)
async def reject_application(
    application_id: UUID,
    body: RejectApplicationRequest,
    current_user: User = Depends(require_coordinator),
    service: ApplicationReviewService = Depends(get_application_service),
):
    result = await service.reject(current_user.id, application_id, body.reason)
    return ApplicationActionResponse.model_validate(result)


@router.post("/batch-approve", response_model=BatchActionResponse, dependencies=[Depends(batch_rate_limit)])
async def batch_approve_applications(
    body: BatchApproveRequest,
    current_user: User = Depends(require_coordinator),
    service: ApplicationReviewService = Depends(get_application_service),
):
    """Approve up to 100 applications at once (all-or-nothing)."""
    result = await service.batch_approve(current_user.id, body.application_ids, body.notes)
    return BatchActionResponse.model_validate(result)
