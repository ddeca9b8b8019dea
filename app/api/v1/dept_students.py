"""
Department Student Verification API
TPO_Dept coordinators review student profiles in their departments
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as SchemaValidationError

from app.core.deps import batch_rate_limit, get_profile_service, require_coordinator
from app.models.user import User
from app.schemas.student import (
    BatchActionResponse,
    BatchVerifyRequest,
    HoldProfileRequest,
    ProfileVerificationFilters,
    RejectProfileRequest,
    StudentActionResponse,
    StudentListResponse,
    StudentReviewResponse,
    VerificationStatsResponse,
    VerifyProfileRequest,
)
from app.services.profile_verification_service import ProfileVerificationService
from app.utils.constants import VerificationBucket

router = APIRouter()


@router.get("", response_model=StudentListResponse)
async def list_students(
    verification_status: Optional[VerificationBucket] = Query(None),
    profile_completion_min: Optional[int] = Query(None, ge=0, le=100),
    profile_completion_max: Optional[int] = Query(None, ge=0, le=100),
    graduation_year: Optional[int] = Query(None),
    semester: Optional[int] = Query(None, ge=1, le=12),
    search: Optional[str] = Query(None, max_length=100),
    current_user: User = Depends(require_coordinator),
    service: ProfileVerificationService = Depends(get_profile_service),
):
    """
    List students in the coordinator's departments

    **Auth**: TPO_Dept (JWT required)

    Unverified profiles first, then by completion (highest first).
    """
    try:
        filters = ProfileVerificationFilters(
            verification_status=verification_status,
            profile_completion_min=profile_completion_min,
            profile_completion_max=profile_completion_max,
            graduation_year=graduation_year,
            semester=semester,
            search=search,
        )
    except SchemaValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))

    result = await service.list_candidates(current_user.id, filters)
    return StudentListResponse.model_validate(result)


@router.get("/stats", response_model=VerificationStatsResponse)
async def verification_stats(
    current_user: User = Depends(require_coordinator),
    service: ProfileVerificationService = Depends(get_profile_service),
):
    """Verification counters for the coordinator's departments."""
    result = await service.stats(current_user.id)
    return VerificationStatsResponse.model_validate(result)


@router.get("/{student_id}", response_model=StudentReviewResponse)
async def get_student(
    student_id: UUID,
    current_user: User = Depends(require_coordinator),
    service: ProfileVerificationService = Depends(get_profile_service),
):
    """Full profile with review history, resumes and documents."""
    result = await service.get_detail(current_user.id, student_id)
    return StudentReviewResponse.model_validate(result)


@router.put("/{student_id}/verify", response_model=StudentActionResponse)
async def verify_student(
    student_id: UUID,
    body: Optional[VerifyProfileRequest] = None,
    current_user: User = Depends(require_coordinator),
    service: ProfileVerificationService = Depends(get_profile_service),
):
    """
    Verify a student profile

    Requires profile completion of at least 80%.
    """
    result = await service.verify(current_user.id, student_id, body.notes if body else None)
    return StudentActionResponse.model_validate(result)


@router.put("/{student_id}/hold", response_model=StudentActionResponse)
async def hold_student(
    student_id: UUID,
    body: HoldProfileRequest,
    current_user: User = Depends(require_coordinator),
    service: ProfileVerificationService = Depends(get_profile_service),
):
    result = await service.hold(current_user.id, student_id, body.issues)
    return StudentActionResponse.model_validate(result)


@router.put("/{student_id}/reject", response_model=StudentActionResponse)
async def reject_student(
    student_id: UUID,
    body: RejectProfileRequest,
    current_user: User = Depends(require_coordinator),
    service: ProfileVerificationService = Depends(get_profile_service),
):
    result = await service.reject(current_user.id, student_id, body.reason)
    return StudentActionResponse.model_validate(result)


@router.post("/batch-verify", response_model=BatchActionResponse, dependencies=[Depends(batch_rate_limit)])
async def batch_verify_students(
    body: BatchVerifyRequest,
    current_user: User = Depends(require_coordinator),
    service: ProfileVerificationService = Depends(get_profile_service),
):
    """
    Verify up to 50 students at once

    All-or-nothing: one invalid student fails the whole batch.
    """
    result = await service.batch_verify(current_user.id, body.student_ids, body.notes)
    return BatchActionResponse.model_validate(result)
