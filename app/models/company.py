"""Recruiting organization model."""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class Organization(Base):
    """Recruiter organization."""

    __tablename__ = "organizations"

    org_name = Column(String(255), nullable=False, index=True)
    website = Column(String(500))
    industry = Column(String(100))

    # Relationships
    job_postings = relationship("JobPosting", back_populates="organization")

    def __repr__(self):
        return f"<Organization {self.org_name}>"
