"""
Pydantic schemas for department profile verification
Filters, request bodies and responses
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.utils.constants import ProfileStatus, ReviewAction, VerificationBucket


# ==================== Filters ====================

class ProfileVerificationFilters(BaseModel):
    """Filters for the department student list."""

    verification_status: Optional[VerificationBucket] = Field(
        None, description="PENDING, VERIFIED or REJECTED bucket"
    )
    profile_completion_min: Optional[int] = Field(None, ge=0, le=100)
    profile_completion_max: Optional[int] = Field(None, ge=0, le=100)
    graduation_year: Optional[int] = Field(None, ge=2000, le=2100)
    semester: Optional[int] = Field(None, ge=1, le=12)
    search: Optional[str] = Field(None, max_length=100, description="Name or enrollment number")

    @model_validator(mode="after")
    def check_completion_range(self):
        if (
            self.profile_completion_min is not None
            and self.profile_completion_max is not None
            and self.profile_completion_min > self.profile_completion_max
        ):
            raise ValueError("profile_completion_min cannot exceed profile_completion_max")
        return self


# ==================== Requests ====================

class VerifyProfileRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class HoldProfileRequest(BaseModel):
    issues: str = Field(..., description="What the student must fix")


class RejectProfileRequest(BaseModel):
    reason: str = Field(..., description="Why the profile is rejected")


class BatchVerifyRequest(BaseModel):
    student_ids: List[UUID]
    notes: Optional[str] = Field(None, max_length=2000)


# ==================== Responses ====================

class StudentSummary(BaseModel):
    """Row in the department student list."""

    id: UUID
    enrollment_number: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    department: str
    degree: Optional[str] = None
    current_semester: Optional[int] = None
    expected_graduation_year: Optional[int] = None
    cgpi: Optional[float] = None
    active_backlogs: bool
    profile_complete_percent: int
    tpo_dept_verified: bool
    tpo_dept_verified_at: Optional[datetime] = None
    profile_status: ProfileStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewNoteResponse(BaseModel):
    id: UUID
    action: ReviewAction
    notes: Optional[str] = None
    actor_id: UUID
    actor_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SemesterMarkResponse(BaseModel):
    semester: int
    sgpa: Optional[float] = None
    backlogs: Optional[int] = None

    class Config:
        from_attributes = True


class DocumentResponse(BaseModel):
    id: UUID
    document_type: str
    file_name: str
    created_at: datetime

    class Config:
        from_attributes = True


class ResumeResponse(BaseModel):
    id: UUID
    file_name: str
    file_path: Optional[str] = None
    version: int
    is_primary: bool
    watermark_applied: bool
    created_at: datetime

    class Config:
        from_attributes = True


class StudentDetailResponse(StudentSummary):
    """Full profile for the review screen."""

    tpo_dept_verified_by: Optional[UUID] = None
    review_notes: List[ReviewNoteResponse] = Field(default_factory=list)
    semester_marks: List[SemesterMarkResponse] = Field(default_factory=list)


class StudentListStats(BaseModel):
    total: int
    pending: int
    verified: int
    rejected: int
    avg_profile_completion: int


class StudentListResponse(BaseModel):
    success: bool = True
    data: List[StudentSummary]
    stats: StudentListStats


class StudentReviewResponse(BaseModel):
    success: bool = True
    data: StudentDetailResponse
    resumes: List[ResumeResponse]
    documents: List[DocumentResponse]


class StudentActionResponse(BaseModel):
    success: bool = True
    message: str
    data: StudentSummary


class BatchResult(BaseModel):
    count: int


class BatchActionResponse(BaseModel):
    success: bool = True
    message: str
    data: BatchResult


class VerificationStats(BaseModel):
    total: int
    pending: int
    verified: int
    rejected: int
    hold: int
    verification_rate: str


class VerificationStatsResponse(BaseModel):
    success: bool = True
    data: VerificationStats
