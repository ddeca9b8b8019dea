"""Department coordinator model."""

from sqlalchemy import Boolean, Column, ForeignKey, String, Uuid

from app.db.base import Base, JSONType


class Coordinator(Base):
    """TPO department coordinator, scoped to one or more departments."""

    __tablename__ = "tpo_dept_coordinators"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), unique=True, nullable=False, index=True)
    coordinator_name = Column(String(255), nullable=False)
    primary_department = Column(String(100), nullable=False)
    assigned_departments = Column(JSONType, default=list, nullable=False)  # ["IT", "ECE"]

    # Capabilities
    can_verify_profiles = Column(Boolean, default=True, nullable=False)
    can_process_applications = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Coordinator {self.coordinator_name} ({self.primary_department})>"
