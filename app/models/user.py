"""User model."""

from sqlalchemy import Boolean, Column, String

from app.db.base import Base


class User(Base):
    """User model for authentication."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default="student")  # student, recruiter, tpo_dept, tpo_admin
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
