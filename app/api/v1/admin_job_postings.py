"""TPO Admin job posting approval API."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_job_posting_service, require_admin
from app.models.user import User
from app.schemas.job import (
    EligibilityCriteria,
    EligibilityPreviewResponse,
    JobPostingActionResponse,
    JobPostingDetailResponse,
    JobPostingListResponse,
    JobPostingStatsResponse,
    JobPostingRejectRequest,
    ModificationRequest,
)
from app.services.job_posting_approval_service import JobPostingApprovalService
from app.utils.constants import JobPostingStatus

router = APIRouter()


@router.get("", response_model=JobPostingListResponse)
async def list_job_postings(
    status: Optional[JobPostingStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    """List job postings, newest first."""
    result = await service.list_postings(status, search)
    return JobPostingListResponse.model_validate(result)


@router.get("/stats", response_model=JobPostingStatsResponse)
async def posting_stats(
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    result = await service.stats()
    return JobPostingStatsResponse.model_validate(result)


@router.get("/{posting_id}", response_model=JobPostingDetailResponse)
async def get_job_posting(
    posting_id: UUID,
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    """Job posting with application counts per status."""
    result = await service.get_detail(posting_id)
    return JobPostingDetailResponse.model_validate(result)


@router.get("/{posting_id}/eligibility-preview", response_model=EligibilityPreviewResponse)
async def eligibility_preview(
    posting_id: UUID,
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    """Count verified students who meet the posting's criteria, by department."""
    result = await service.eligibility_preview(posting_id)
    return EligibilityPreviewResponse.model_validate(result)


@router.put("/{posting_id}/approve", response_model=JobPostingActionResponse)
async def approve_job_posting(
    posting_id: UUID,
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    result = await service.approve(current_user.id, posting_id)
    return JobPostingActionResponse.model_validate(result)


@router.put("/{posting_id}/reject", response_model=JobPostingActionResponse)
async def reject_job_posting(
    posting_id: UUID,
    body: JobPostingRejectRequest,
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    result = await service.reject(current_user.id, posting_id, body.reason)
    return JobPostingActionResponse.model_validate(result)


@router.put("/{posting_id}/request-modifications", response_model=JobPostingActionResponse)
async def request_modifications(
    posting_id: UUID,
    body: ModificationRequest,
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    result = await service.request_modifications(current_user.id, posting_id, body.modifications)
    return JobPostingActionResponse.model_validate(result)


@router.put("/{posting_id}/criteria", response_model=JobPostingActionResponse)
async def update_criteria(
    posting_id: UUID,
    body: EligibilityCriteria,
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    """Replace eligibility criteria (pending postings only)."""
    result = await service.update_criteria(posting_id, body)
    return JobPostingActionResponse.model_validate(result)


@router.put("/{posting_id}/close", response_model=JobPostingActionResponse)
async def close_job_posting(
    posting_id: UUID,
    current_user: User = Depends(require_admin),
    service: JobPostingApprovalService = Depends(get_job_posting_service),
):
    result = await service.close(current_user.id, posting_id)
    return JobPostingActionResponse.model_validate(result)
