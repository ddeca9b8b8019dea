"""Job posting schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.utils.constants import JobPostingStatus


class EligibilityCriteria(BaseModel):
    """Eligibility rules attached to a job posting.

    ``None`` for ``cgpa_min`` or ``max_backlogs`` means the rule is not
    applied. Only departments in ``allowed_branches`` are eligible.
    """

    cgpa_min: Optional[float] = Field(None, ge=0, le=10, description="Minimum CGPA (0-10 scale)")
    max_backlogs: Optional[int] = Field(None, ge=0, description="Maximum active backlogs permitted")
    allowed_branches: List[str] = Field(default_factory=list, description="Departments allowed to apply")
    graduation_years: List[int] = Field(default_factory=list, description="Allowed graduation years")

    @model_validator(mode="before")
    @classmethod
    def accept_single_graduation_year(cls, data: Any) -> Any:
        """Older postings store ``graduation_year`` as a single integer."""
        if isinstance(data, dict) and "graduation_year" in data and "graduation_years" not in data:
            data = dict(data)
            year = data.pop("graduation_year")
            data["graduation_years"] = [year] if year else []
        return data

    class Config:
        extra = "ignore"


class OrganizationBrief(BaseModel):
    """Brief organization information."""

    id: UUID
    org_name: str
    website: Optional[str] = None
    industry: Optional[str] = None

    class Config:
        from_attributes = True


class JobPostingBrief(BaseModel):
    """Posting summary embedded in application listings."""

    id: UUID
    job_title: str
    employment_type: Optional[str] = None
    work_location: Optional[str] = None
    eligibility_criteria: EligibilityCriteria
    application_deadline: Optional[datetime] = None
    organization: Optional[OrganizationBrief] = None

    class Config:
        from_attributes = True


class JobPostingResponse(JobPostingBrief):
    """Full job posting as seen by TPO admins."""

    org_id: UUID
    description: Optional[str] = None
    status: JobPostingStatus
    approved_at: Optional[datetime] = None
    approved_by: Optional[UUID] = None
    rejection_reason: Optional[str] = None
    modifications_requested: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class JobPostingListResponse(BaseModel):
    success: bool = True
    data: List[JobPostingResponse]
    total: int


class JobPostingActionResponse(BaseModel):
    success: bool = True
    message: str
    data: JobPostingResponse


class JobPostingDetailResponse(BaseModel):
    success: bool = True
    data: JobPostingResponse
    applications_count: int
    applications_by_status: Dict[str, int]


class JobPostingStats(BaseModel):
    total: int
    pending_approval: int
    active: int
    rejected: int
    closed: int
    approved_this_month: int


class JobPostingStatsResponse(BaseModel):
    success: bool = True
    data: JobPostingStats


class JobPostingRejectRequest(BaseModel):
    reason: str = Field(..., description="Rejection reason shown to the recruiter")


class ModificationRequest(BaseModel):
    modifications: str = Field(..., description="Changes the recruiter must make")


class DepartmentEligibility(BaseModel):
    department: str
    eligible: int
    total: int
    percentage: int


class EligibilityPreviewResponse(BaseModel):
    success: bool = True
    total_students: int
    total_eligible: int
    department_breakdown: List[DepartmentEligibility]
