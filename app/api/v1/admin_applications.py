"""
TPO Admin Application API
Second gate: forward department-approved applications to recruiters
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.deps import batch_rate_limit, get_admin_application_service, require_admin
from app.models.user import User
from app.schemas.application import (
    AdminApplicationStatsResponse,
    ApplicationActionResponse,
    ApplicationDetailResponse,
    ApplicationQueueResponse,
    BulkForwardRequest,
    FlagApplicationRequest,
    ForwardRequest,
    RejectApplicationRequest,
)
from app.schemas.student import BatchActionResponse
from app.services.admin_application_service import AdminApplicationService
from app.utils.constants import ApplicationStatus

router = APIRouter()


@router.get("", response_model=ApplicationQueueResponse)
async def list_pending_applications(
    status: ApplicationStatus = Query(ApplicationStatus.PENDING_ADMIN),
    current_user: User = Depends(require_admin),
    service: AdminApplicationService = Depends(get_admin_application_service),
):
    """Applications at the admin gate, oldest first."""
    result = await service.list_pending(status)
    return ApplicationQueueResponse.model_validate(result)


@router.get("/stats", response_model=AdminApplicationStatsResponse)
async def application_stats(
    current_user: User = Depends(require_admin),
    service: AdminApplicationService = Depends(get_admin_application_service),
):
    result = await service.stats()
    return AdminApplicationStatsResponse.model_validate(result)


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
async def get_application(
    application_id: UUID,
    current_user: User = Depends(require_admin),
    service: AdminApplicationService = Depends(get_admin_application_service),
):
    """Application with posting, student record and resume."""
    result = await service.get_detail(application_id)
    return ApplicationDetailResponse.model_validate(result)


@router.put("/{application_id}/forward", response_model=ApplicationActionResponse)
async def forward_application(
    application_id: UUID,
    body: Optional[ForwardRequest] = None,
    current_user: User = Depends(require_admin),
    service: AdminApplicationService = Depends(get_admin_application_service),
):
    result = await service.forward(current_user.id, application_id, body.notes if body else None)
    return ApplicationActionResponse.model_validate(result)


@router.put("/{application_id}/reject", response_model=ApplicationActionResponse)
async def reject_application(
    application_id: UUID,
    body: RejectApplicationRequest,
    current_user: User = Depends(require_admin),
    service: AdminApplicationService = Depends(get_admin_application_service),
):
    """Reject a pending or held application (appeal path)."""
    result = await service.reject(current_user.id, application_id, body.reason)
    return ApplicationActionResponse.model_validate(result)


@router.put("/{application_id}/flag", response_model=ApplicationActionResponse)
async def flag_application(
    application_id: UUID,
    body: FlagApplicationRequest,
    current_user: User = Depends(require_admin),
    service: AdminApplicationService = Depends(get_admin_application_service),
):
    result = await service.flag(current_user.id, application_id, body.reason)
    return ApplicationActionResponse.model_validate(result)


@router.post("/bulk-forward", response_model=BatchActionResponse, dependencies=[Depends(batch_rate_limit)])
async def bulk_forward_applications(
    body: BulkForwardRequest,
    current_user: User = Depends(require_admin),
    service: AdminApplicationService = Depends(get_admin_application_service),
):
    """Forward up to 200 applications at once."""
    result = await service.bulk_forward(current_user.id, body.application_ids, body.notes)
    return BatchActionResponse.model_validate(result)
