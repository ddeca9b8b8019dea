"""Student profile and related review records."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.constants import ProfileStatus
from app.utils.helpers import join_name


class StudentProfile(Base):
    """Student profile model."""

    __tablename__ = "student_profiles"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), unique=True, nullable=True)
    enrollment_number = Column(String(50), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100))
    last_name = Column(String(100), nullable=False)

    # Academic record
    department = Column(String(100), nullable=False, index=True)
    degree = Column(String(50))
    current_semester = Column(Integer)
    expected_graduation_year = Column(Integer, index=True)
    cgpi = Column(Float, nullable=True)
    active_backlogs = Column(Boolean, default=False, nullable=False)

    # Profile completion (0-100)
    profile_complete_percent = Column(Integer, default=0, nullable=False)

    # Department verification
    tpo_dept_verified = Column(Boolean, default=False, nullable=False, index=True)
    tpo_dept_verified_at = Column(DateTime, nullable=True)
    tpo_dept_verified_by = Column(Uuid(as_uuid=True), nullable=True)
    profile_status = Column(String(20), default=ProfileStatus.PENDING.value, nullable=False, index=True)

    # Soft delete
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    review_notes = relationship(
        "ProfileReviewNote",
        back_populates="student",
        order_by="ProfileReviewNote.created_at",
        cascade="all, delete-orphan",
    )
    semester_marks = relationship(
        "SemesterMark",
        back_populates="student",
        order_by="SemesterMark.semester",
        cascade="all, delete-orphan",
    )
    documents = relationship("StudentDocument", back_populates="student", cascade="all, delete-orphan")
    resumes = relationship("Resume", back_populates="student", cascade="all, delete-orphan")
    applications = relationship("JobApplication", back_populates="student")

    @property
    def full_name(self) -> str:
        return join_name(self.first_name, self.middle_name, self.last_name)

    def __repr__(self):
        return f"<StudentProfile {self.enrollment_number} ({self.department})>"


class ProfileReviewNote(Base):
    """One entry in a profile's append-only review log."""

    __tablename__ = "profile_review_notes"

    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action = Column(String(20), nullable=False)  # VERIFIED, HOLD, REJECTED
    notes = Column(Text, nullable=True)  # notes, issues or rejection reason
    actor_id = Column(Uuid(as_uuid=True), nullable=False)
    actor_name = Column(String(255))

    student = relationship("StudentProfile", back_populates="review_notes")

    def __repr__(self):
        return f"<ProfileReviewNote {self.action} for {self.student_id}>"


class SemesterMark(Base):
    """Per-semester academic result."""

    __tablename__ = "semester_marks"

    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    semester = Column(Integer, nullable=False)
    sgpa = Column(Float)
    backlogs = Column(Integer, default=0)

    student = relationship("StudentProfile", back_populates="semester_marks")


class StudentDocument(Base):
    """Supporting document uploaded by a student (marksheets, ID proof)."""

    __tablename__ = "student_documents"

    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    document_type = Column(String(50), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500))

    student = relationship("StudentProfile", back_populates="documents")
