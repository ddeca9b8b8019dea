"""Resume model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class Resume(Base):
    """Resume metadata; file storage and watermarking live outside this service."""

    __tablename__ = "resumes"

    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500))
    version = Column(Integer, default=1, nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    watermark_applied = Column(Boolean, default=False, nullable=False)

    student = relationship("StudentProfile", back_populates="resumes")

    def __repr__(self):
        return f"<Resume {self.file_name} v{self.version}>"
