"""Job posting model."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base, JSONType
from app.utils.constants import JobPostingStatus


class JobPosting(Base):
    """Recruiter-submitted opening, approved by TPO admins before students can apply."""

    __tablename__ = "job_postings"

    org_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id"), nullable=False, index=True)
    job_title = Column(String(500), nullable=False, index=True)
    description = Column(Text)
    employment_type = Column(String(50))  # FULL_TIME, INTERNSHIP, ...
    work_location = Column(String(255))

    # {"cgpa_min": 7.0, "max_backlogs": 0, "allowed_branches": ["CSE"], "graduation_years": [2025]}
    eligibility_criteria = Column(JSONType, default=dict, nullable=False)
    application_deadline = Column(DateTime, nullable=True)

    # Approval
    status = Column(String(20), default=JobPostingStatus.PENDING_APPROVAL.value, nullable=False, index=True)
    approved_at = Column(DateTime, nullable=True)
    approved_by = Column(Uuid(as_uuid=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    modifications_requested = Column(Text, nullable=True)

    # Relationships
    organization = relationship("Organization", back_populates="job_postings")
    applications = relationship("JobApplication", back_populates="job_posting")

    def __repr__(self):
        return f"<JobPosting {self.job_title} ({self.status})>"
