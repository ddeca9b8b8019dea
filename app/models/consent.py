"""Data-sharing consent model."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Uuid

from app.db.base import Base, JSONType


class Consent(Base):
    """Student consent to share profile data with a job posting's recruiter."""

    __tablename__ = "consents"

    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_posting_id = Column(Uuid(as_uuid=True), ForeignKey("job_postings.id"), nullable=False, index=True)
    consent_given = Column(Boolean, default=True, nullable=False)
    revoked = Column(Boolean, default=False, nullable=False)
    access_expiry = Column(DateTime, nullable=True)
    data_shared = Column(JSONType, default=list)  # ["resume", "cgpi", "contact"]

    def __repr__(self):
        return f"<Consent {self.student_id} -> {self.job_posting_id}>"
