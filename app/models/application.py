"""Application model."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.constants import ApplicationStatus


class JobApplication(Base):
    """Job application model."""

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("student_id", "job_posting_id", name="unique_student_job_application"),
        Index("ix_job_applications_status_created", "status", "created_at"),  # FIFO review queue
    )

    student_id = Column(Uuid(as_uuid=True), ForeignKey("student_profiles.id"), nullable=False, index=True)
    job_posting_id = Column(Uuid(as_uuid=True), ForeignKey("job_postings.id"), nullable=False, index=True)
    resume_id = Column(Uuid(as_uuid=True), ForeignKey("resumes.id"), nullable=True)
    cover_letter = Column(Text)

    # Status tracking
    status = Column(String(20), default=ApplicationStatus.SUBMITTED.value, nullable=False, index=True)

    # Department gate
    reviewed_by_dept = Column(Uuid(as_uuid=True), nullable=True)
    reviewed_by_dept_at = Column(DateTime, nullable=True)
    dept_review_notes = Column(Text, nullable=True)

    # Admin gate
    reviewed_by_admin = Column(Uuid(as_uuid=True), nullable=True)
    reviewed_by_admin_at = Column(DateTime, nullable=True)
    admin_review_notes = Column(Text, nullable=True)
    flag_reason = Column(Text, nullable=True)

    # Rejection
    rejection_reason = Column(Text, nullable=True)
    rejected_by = Column(Uuid(as_uuid=True), nullable=True)
    rejected_at = Column(DateTime, nullable=True)

    # Relationships
    student = relationship("StudentProfile", back_populates="applications")
    job_posting = relationship("JobPosting", back_populates="applications")

    def __repr__(self):
        return f"<JobApplication {self.student_id} -> {self.job_posting_id} ({self.status})>"
