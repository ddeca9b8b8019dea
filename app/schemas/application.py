"""Job application review schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.schemas.job import JobPostingBrief
from app.schemas.student import ResumeResponse, SemesterMarkResponse, StudentSummary
from app.utils.constants import ApplicationStatus


class ApplicationFilters(BaseModel):
    """Filters for the department review queue.

    ``cgpa_min``/``cgpa_max`` narrow the list by the student's CGPA for
    display only; eligibility is enforced at approval time.
    """

    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    job_posting_id: Optional[UUID] = None
    cgpa_min: Optional[float] = Field(None, ge=0, le=10)
    cgpa_max: Optional[float] = Field(None, ge=0, le=10)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def check_ranges(self):
        if self.cgpa_min is not None and self.cgpa_max is not None and self.cgpa_min > self.cgpa_max:
            raise ValueError("cgpa_min cannot exceed cgpa_max")
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from cannot be after date_to")
        return self


class ApproveApplicationRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class HoldApplicationRequest(BaseModel):
    issues: str


class RejectApplicationRequest(BaseModel):
    reason: str


class FlagApplicationRequest(BaseModel):
    reason: str


class BatchApproveRequest(BaseModel):
    application_ids: List[UUID]
    notes: Optional[str] = Field(None, max_length=2000)


class ApplicationResponse(BaseModel):
    id: UUID
    student_id: UUID
    job_posting_id: UUID
    resume_id: Optional[UUID] = None
    cover_letter: Optional[str] = None
    status: ApplicationStatus
    reviewed_by_dept: Optional[UUID] = None
    reviewed_by_dept_at: Optional[datetime] = None
    dept_review_notes: Optional[str] = None
    reviewed_by_admin: Optional[UUID] = None
    reviewed_by_admin_at: Optional[datetime] = None
    admin_review_notes: Optional[str] = None
    flag_reason: Optional[str] = None
    rejection_reason: Optional[str] = None
    rejected_by: Optional[UUID] = None
    rejected_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApplicationQueueItem(ApplicationResponse):
    student: StudentSummary
    job_posting: JobPostingBrief


class ApplicationQueueResponse(BaseModel):
    success: bool = True
    data: List[ApplicationQueueItem]
    total: int


class ConsentSummary(BaseModel):
    given_at: datetime
    expires_at: Optional[datetime] = None
    data_shared: List[str] = Field(default_factory=list)


class ReviewStudent(StudentSummary):
    semester_marks: List[SemesterMarkResponse] = Field(default_factory=list)


class ApplicationDetail(BaseModel):
    application: ApplicationResponse
    job_posting: JobPostingBrief
    student: ReviewStudent
    resume: Optional[ResumeResponse] = None
    consent: Optional[ConsentSummary] = None


class ApplicationDetailResponse(BaseModel):
    success: bool = True
    data: ApplicationDetail


class ApplicationActionResponse(BaseModel):
    success: bool = True
    message: str
    data: ApplicationResponse


class ApplicationStats(BaseModel):
    total: int
    pending_review: int
    approved: int
    rejected: int
    hold: int
    approval_rate: str


class ApplicationStatsResponse(BaseModel):
    success: bool = True
    data: ApplicationStats


class AdminApplicationStats(BaseModel):
    """Institution-wide counters, not scoped by department."""

    total: int
    pending_dept: int
    pending_admin: int
    forwarded: int
    rejected: int
    flagged: int
    hold: int
    forwarded_this_month: int


class AdminApplicationStatsResponse(BaseModel):
    success: bool = True
    data: AdminApplicationStats


class ForwardRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class BulkForwardRequest(BaseModel):
    application_ids: List[UUID]
    notes: Optional[str] = Field(None, max_length=2000)
