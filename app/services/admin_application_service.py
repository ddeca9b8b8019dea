"""
Admin Application Service
TPO administrator gate, after department approval

PENDING_ADMIN applications are forwarded to the recruiter, flagged for a
closer look, or rejected. Applications held by a department can also be
rejected here as the appeal path.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import (
    BatchTooLargeError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from app.models.application import JobApplication
from app.models.job import JobPosting
from app.models.resume import Resume
from app.models.student import StudentProfile
from app.services import notification_service as events
from app.services.notification_service import LoggingNotifier, Notifier
from app.services.statistics_service import admin_application_stats
from app.utils.constants import ApplicationStatus
from app.utils.helpers import is_blank, unique_ids, utcnow

logger = logging.getLogger(__name__)

ADMIN_REJECTABLE = (ApplicationStatus.PENDING_ADMIN.value, ApplicationStatus.HOLD.value)


class AdminApplicationService:
    def __init__(self, db: AsyncSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier or LoggingNotifier()

    async def _get_application(self, application_id: UUID, *options) -> JobApplication:
        query = select(JobApplication).where(JobApplication.id == application_id)
        if options:
            query = query.options(*options)
        result = await self.db.execute(query)
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError("application", "Application not found")
        return application

    @staticmethod
    def _require_status(application: JobApplication, allowed, action: str) -> None:
        if application.status not in allowed:
            raise PreconditionFailedError(
                f"Cannot {action} an application in {application.status} status"
            )

    def _mark_reviewed(self, application: JobApplication, admin_id: UUID, status: ApplicationStatus, notes) -> None:
        application.status = status.value
        application.reviewed_by_admin = admin_id
        application.reviewed_by_admin_at = utcnow()
        application.admin_review_notes = notes

    async def _notify(self, event: str, application: JobApplication, **extra) -> None:
        payload = {"application_id": str(application.id), "job_posting_id": str(application.job_posting_id)}
        payload.update(extra)
        await self.notifier.notify(event, f"student:{application.student_id}", payload)

    async def list_pending(self, status: ApplicationStatus = ApplicationStatus.PENDING_ADMIN) -> Dict[str, Any]:
        """Applications waiting at the admin gate, oldest first."""
        result = await self.db.execute(
            select(JobApplication)
            .where(JobApplication.status == status.value)
            .options(
                selectinload(JobApplication.student),
                selectinload(JobApplication.job_posting).selectinload(JobPosting.organization),
            )
            .order_by(JobApplication.created_at.asc())
        )
        applications = list(result.scalars().all())
        return {"success": True, "data": applications, "total": len(applications)}

    async def get_detail(self, application_id: UUID) -> Dict[str, Any]:
        """Application with its posting, student record and resume."""
        application = await self._get_application(
            application_id,
            selectinload(JobApplication.student).selectinload(StudentProfile.semester_marks),
            selectinload(JobApplication.job_posting).selectinload(JobPosting.organization),
        )
        resume = None
        if application.resume_id:
            resume = await self.db.get(Resume, application.resume_id)

        return {
            "success": True,
            "data": {
                "application": application,
                "job_posting": application.job_posting,
                "student": application.student,
                "resume": resume,
                "consent": None,
            },
        }

    async def stats(self) -> Dict[str, Any]:
        return {"success": True, "data": await admin_application_stats(self.db)}

    async def forward(self, admin_id: UUID, application_id: UUID, notes: Optional[str] = None) -> Dict[str, Any]:
        application = await self._get_application(application_id)
        self._require_status(application, (ApplicationStatus.PENDING_ADMIN.value,), "forward")

        self._mark_reviewed(application, admin_id, ApplicationStatus.FORWARDED, notes)
        await self.db.commit()

        logger.info(f"Application {application.id} forwarded to recruiter by admin {admin_id}")
        await self._notify(events.APPLICATION_FORWARDED, application)
        return {"success": True, "message": "Application forwarded to recruiter", "data": application}

    async def reject(self, admin_id: UUID, application_id: UUID, reason: str) -> Dict[str, Any]:
        if is_blank(reason):
            raise ValidationError("Rejection reason is required")

        application = await self._get_application(application_id)
        self._require_status(application, ADMIN_REJECTABLE, "reject")

        self._mark_reviewed(application, admin_id, ApplicationStatus.REJECTED, reason)
        application.rejection_reason = reason
        application.rejected_by = admin_id
        application.rejected_at = application.reviewed_by_admin_at
        await self.db.commit()

        logger.info(f"Application {application.id} rejected by admin {admin_id}")
        await self._notify(events.APPLICATION_ADMIN_REJECTED, application, reason=reason)
        return {"success": True, "message": "Application rejected", "data": application}

    async def flag(self, admin_id: UUID, application_id: UUID, reason: str) -> Dict[str, Any]:
        if is_blank(reason):
            raise ValidationError("Flag reason is required")

        application = await self._get_application(application_id)
        self._require_status(application, (ApplicationStatus.PENDING_ADMIN.value,), "flag")

        self._mark_reviewed(application, admin_id, ApplicationStatus.FLAGGED, application.admin_review_notes)
        application.flag_reason = reason
        await self.db.commit()

        logger.warning(f"Application {application.id} flagged by admin {admin_id}: {reason}")
        await self._notify(events.APPLICATION_FLAGGED, application, reason=reason)
        return {"success": True, "message": "Application flagged for review", "data": application}

    async def bulk_forward(
        self, admin_id: UUID, application_ids: List[UUID], notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """Forward many PENDING_ADMIN applications in one update."""
        limit = settings.ADMIN_BULK_LIMIT
        if not application_ids:
            raise ValidationError("No applications selected")
        if len(application_ids) > limit:
            raise BatchTooLargeError(len(application_ids), limit, "applications", "forward")

        ids = unique_ids(application_ids)
        result = await self.db.execute(select(JobApplication).where(JobApplication.id.in_(ids)))
        applications = list(result.scalars().all())

        missing = len(ids) - len(applications)
        if missing:
            raise NotFoundError("application", f"{missing} application(s) not found")

        not_pending = [a for a in applications if a.status != ApplicationStatus.PENDING_ADMIN.value]
        if not_pending:
            raise PreconditionFailedError(
                f"{len(not_pending)} application(s) are not in PENDING_ADMIN status"
            )

        now = utcnow()
        await self.db.execute(
            update(JobApplication)
            .where(JobApplication.id.in_(ids))
            .values(
                status=ApplicationStatus.FORWARDED.value,
                reviewed_by_admin=admin_id,
                reviewed_by_admin_at=now,
                admin_review_notes=notes,
                updated_at=now,
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()

        logger.info(f"Bulk forwarded {len(ids)} application(s) by admin {admin_id}")
        for application in applications:
            await self._notify(events.APPLICATION_BULK_FORWARDED, application)

        return {
            "success": True,
            "message": f"Successfully forwarded {len(ids)} application(s)",
            "data": {"count": len(ids)},
        }
