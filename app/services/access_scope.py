"""Department scope checks for TPO coordinators."""

import logging
from typing import Set
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.models.coordinator import Coordinator

logger = logging.getLogger(__name__)

# Capability flags on Coordinator
VERIFY_PROFILES = "can_verify_profiles"
PROCESS_APPLICATIONS = "can_process_applications"


def authorized_departments(coordinator: Coordinator) -> Set[str]:
    """Primary department plus every assigned department."""
    departments = set(coordinator.assigned_departments or [])
    departments.add(coordinator.primary_department)
    return departments


def is_authorized(coordinator: Coordinator, department: str) -> bool:
    return department in authorized_departments(coordinator)


async def get_coordinator(db: AsyncSession, user_id: UUID) -> Coordinator:
    """Load the coordinator record for the acting user."""
    result = await db.execute(select(Coordinator).where(Coordinator.user_id == user_id))
    coordinator = result.scalar_one_or_none()
    if coordinator is None:
        logger.warning(f"No coordinator profile for user {user_id}")
        raise NotFoundError("coordinator", "Coordinator profile not found")
    return coordinator


def require_capability(coordinator: Coordinator, capability: str, action: str) -> None:
    """Raise unless the coordinator is active and holds ``capability``."""
    if not coordinator.is_active or not getattr(coordinator, capability):
        logger.warning(f"Coordinator {coordinator.id} lacks {capability} for {action}")
        raise PermissionDeniedError(f"You do not have permission to {action}")


def ensure_in_scope(coordinator: Coordinator, department: str, what: str = "student") -> None:
    if not is_authorized(coordinator, department):
        logger.warning(f"Coordinator {coordinator.id} denied access to {what} in {department}")
        raise PermissionDeniedError(f"You are not authorized to access {what}s in {department} department")
