"""
Application Review Service
Department gate on job applications

Coordinators review SUBMITTED applications from students in their
departments. Approval requires a verified profile and a student who meets
the posting's eligibility criteria; approved applications move on to the
TPO administrator as PENDING_ADMIN.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import (
    BatchTooLargeError,
    NotFoundError,
    PermissionDeniedError,
    PreconditionFailedError,
    ValidationError,
)
from app.models.application import JobApplication
from app.models.consent import Consent
from app.models.coordinator import Coordinator
from app.models.job import JobPosting
from app.models.resume import Resume
from app.models.student import StudentProfile
from app.schemas.application import ApplicationFilters
from app.services import notification_service as events
from app.services.access_scope import (
    PROCESS_APPLICATIONS,
    authorized_departments,
    ensure_in_scope,
    get_coordinator,
    is_authorized,
    require_capability,
)
from app.services.eligibility_service import EligibilityResult, evaluate
from app.services.notification_service import LoggingNotifier, Notifier, student_ref
from app.services.statistics_service import application_review_stats
from app.utils.constants import ApplicationStatus
from app.utils.helpers import is_blank, unique_ids, utcnow

logger = logging.getLogger(__name__)

UNVERIFIED_MESSAGE = "Student profile must be verified before approving application"


class ApplicationReviewService:
    """Department coordinator review of job applications."""

    def __init__(self, db: AsyncSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier or LoggingNotifier()

    async def _coordinator(self, user_id: UUID, action: str) -> Coordinator:
        coordinator = await get_coordinator(self.db, user_id)
        require_capability(coordinator, PROCESS_APPLICATIONS, action)
        return coordinator

    async def _get_application(self, application_id: UUID, *options) -> JobApplication:
        query = select(JobApplication).where(JobApplication.id == application_id)
        if options:
            query = query.options(*options)
        result = await self.db.execute(query)
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError("application", "Application not found")
        return application

    async def _get_student(self, student_id: UUID, *options) -> StudentProfile:
        query = select(StudentProfile).where(
            StudentProfile.id == student_id,
            StudentProfile.deleted_at.is_(None),
        )
        if options:
            query = query.options(*options)
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()
        if student is None:
            raise NotFoundError("student", "Student not found")
        return student

    async def _load_for_review(self, user_id: UUID, application_id: UUID, action: str):
        """Common prelude: coordinator, application, student, scope, SUBMITTED."""
        coordinator = await self._coordinator(user_id, action)
        application = await self._get_application(application_id, selectinload(JobApplication.job_posting))
        student = await self._get_student(application.student_id)
        ensure_in_scope(coordinator, student.department, "application")

        if application.status != ApplicationStatus.SUBMITTED.value:
            raise PreconditionFailedError(
                f"Only submitted applications can be reviewed (current status: {application.status})"
            )
        return coordinator, application, student

    def _mark_reviewed(
        self, application: JobApplication, coordinator: Coordinator, status: ApplicationStatus, notes: Optional[str]
    ) -> None:
        application.status = status.value
        application.reviewed_by_dept = coordinator.user_id
        application.reviewed_by_dept_at = utcnow()
        application.dept_review_notes = notes

    @staticmethod
    def _check_eligibility(application: JobApplication, student: StudentProfile) -> EligibilityResult:
        try:
            return evaluate(student, application.job_posting.eligibility_criteria)
        except SchemaValidationError as e:
            logger.warning(f"Job posting {application.job_posting_id} has invalid eligibility criteria: {e}")
            raise PreconditionFailedError(
                f"Job posting has invalid eligibility criteria: {e.errors()[0]['msg']}"
            )

    async def _notify(self, event: str, application: JobApplication, student: StudentProfile, **extra) -> None:
        payload = {
            "application_id": str(application.id),
            "job_posting_id": str(application.job_posting_id),
        }
        payload.update(extra)
        await self.notifier.notify(event, student_ref(student), payload)

    # ==================== Queries ====================

    async def list_queue(self, user_id: UUID, filters: Optional[ApplicationFilters] = None) -> Dict[str, Any]:
        """
        Review queue for the coordinator's departments, oldest first.

        CGPA bounds only narrow the list; students without a recorded CGPA
        are kept. Eligibility is enforced at approval.
        """
        filters = filters or ApplicationFilters()
        coordinator = await self._coordinator(user_id, "process applications")
        departments = authorized_departments(coordinator)

        query = (
            select(JobApplication)
            .join(StudentProfile, JobApplication.student_id == StudentProfile.id)
            .where(
                StudentProfile.department.in_(list(departments)),
                StudentProfile.deleted_at.is_(None),
                JobApplication.status == filters.status.value,
            )
            .options(
                selectinload(JobApplication.student),
                selectinload(JobApplication.job_posting).selectinload(JobPosting.organization),
            )
        )

        if filters.job_posting_id:
            query = query.where(JobApplication.job_posting_id == filters.job_posting_id)
        if filters.date_from:
            query = query.where(JobApplication.created_at >= filters.date_from)
        if filters.date_to:
            query = query.where(JobApplication.created_at <= filters.date_to)
        if filters.cgpa_min is not None:
            query = query.where(or_(StudentProfile.cgpi.is_(None), StudentProfile.cgpi >= filters.cgpa_min))
        if filters.cgpa_max is not None:
            query = query.where(or_(StudentProfile.cgpi.is_(None), StudentProfile.cgpi <= filters.cgpa_max))
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            query = query.where(or_(
                StudentProfile.first_name.ilike(pattern),
                StudentProfile.last_name.ilike(pattern),
                (StudentProfile.first_name + " " + StudentProfile.last_name).ilike(pattern),
                StudentProfile.enrollment_number.ilike(pattern),
            ))

        query = query.order_by(JobApplication.created_at.asc())

        result = await self.db.execute(query)
        applications = list(result.scalars().all())

        return {"success": True, "data": applications, "total": len(applications)}

    async def get_detail(self, user_id: UUID, application_id: UUID) -> Dict[str, Any]:
        """Application with posting, student record, resume and latest consent."""
        coordinator = await self._coordinator(user_id, "process applications")
        application = await self._get_application(
            application_id,
            selectinload(JobApplication.job_posting).selectinload(JobPosting.organization),
        )

        student = await self._get_student(application.student_id, selectinload(StudentProfile.semester_marks))
        ensure_in_scope(coordinator, student.department, "application")

        resume = None
        if application.resume_id:
            resume = await self.db.get(Resume, application.resume_id)

        result = await self.db.execute(
            select(Consent)
            .where(
                Consent.student_id == application.student_id,
                Consent.job_posting_id == application.job_posting_id,
                Consent.consent_given.is_(True),
                Consent.revoked.is_(False),
            )
            .order_by(Consent.created_at.desc())
            .limit(1)
        )
        consent = result.scalar_one_or_none()

        return {
            "success": True,
            "data": {
                "application": application,
                "job_posting": application.job_posting,
                "student": student,
                "resume": resume,
                "consent": {
                    "given_at": consent.created_at,
                    "expires_at": consent.access_expiry,
                    "data_shared": consent.data_shared or [],
                } if consent else None,
            },
        }

    async def stats(self, user_id: UUID) -> Dict[str, Any]:
        coordinator = await self._coordinator(user_id, "view application statistics")
        data = await application_review_stats(self.db, authorized_departments(coordinator))
        return {"success": True, "data": data}

    # ==================== Review actions ====================

    async def approve(self, user_id: UUID, application_id: UUID, notes: Optional[str] = None) -> Dict[str, Any]:
        """Approve and forward to the TPO administrator."""
        coordinator, application, student = await self._load_for_review(
            user_id, application_id, "approve applications"
        )

        if not student.tpo_dept_verified:
            raise PreconditionFailedError(UNVERIFIED_MESSAGE)

        result = self._check_eligibility(application, student)
        if not result.eligible:
            logger.warning(
                f"Application {application.id} failed eligibility: {result.messages}"
            )
            raise PreconditionFailedError("; ".join(result.messages), failures=result.messages)

        self._mark_reviewed(application, coordinator, ApplicationStatus.PENDING_ADMIN, notes)
        await self.db.commit()

        logger.info(f"Application {application.id} approved by {coordinator.coordinator_name}")
        await self._notify(events.APPLICATION_APPROVED, application, student, notes=notes)

        return {
            "success": True,
            "message": "Application approved and forwarded to TPO Admin",
            "data": application,
        }

    async def hold(self, user_id: UUID, application_id: UUID, issues: str) -> Dict[str, Any]:
        """Put an application on hold; eligibility is not checked."""
        if is_blank(issues):
            raise ValidationError("Issues description is required")

        coordinator, application, student = await self._load_for_review(
            user_id, application_id, "process applications"
        )

        self._mark_reviewed(application, coordinator, ApplicationStatus.HOLD, issues)
        await self.db.commit()

        logger.info(f"Application {application.id} put on hold by {coordinator.coordinator_name}")
        await self._notify(events.APPLICATION_HOLD, application, student, issues=issues)

        return {"success": True, "message": "Application put on hold", "data": application}

    async def reject(self, user_id: UUID, application_id: UUID, reason: str) -> Dict[str, Any]:
        """Reject an application. The student may appeal to the TPO administrator."""
        if is_blank(reason):
            raise ValidationError("Rejection reason is required")

        coordinator, application, student = await self._load_for_review(
            user_id, application_id, "reject applications"
        )

        self._mark_reviewed(application, coordinator, ApplicationStatus.REJECTED, reason)
        application.rejection_reason = reason
        application.rejected_by = coordinator.user_id
        application.rejected_at = application.reviewed_by_dept_at
        await self.db.commit()

        logger.info(f"Application {application.id} rejected by {coordinator.coordinator_name}")
        await self._notify(events.APPLICATION_REJECTED, application, student, reason=reason)

        return {"success": True, "message": "Application rejected", "data": application}

    async def batch_approve(
        self, user_id: UUID, application_ids: List[UUID], notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Approve many applications at once.

        Every application must be SUBMITTED, belong to an in-scope verified
        student and, when BATCH_APPROVE_ENFORCES_ELIGIBILITY is on, pass the
        posting's eligibility criteria. Nothing is written unless all pass.
        """
        limit = settings.APPLICATION_BATCH_LIMIT
        if not application_ids:
            raise ValidationError("No applications selected")
        if len(application_ids) > limit:
            raise BatchTooLargeError(len(application_ids), limit, "applications", "approve")

        coordinator = await self._coordinator(user_id, "approve applications")
        ids = unique_ids(application_ids)

        result = await self.db.execute(
            select(JobApplication)
            .where(JobApplication.id.in_(ids))
            .options(selectinload(JobApplication.student), selectinload(JobApplication.job_posting))
        )
        applications = [
            a for a in result.scalars().all()
            if a.student is not None and a.student.deleted_at is None
        ]

        missing = len(ids) - len(applications)
        if missing:
            raise NotFoundError("application", f"{missing} application(s) not found")

        not_submitted = [a for a in applications if a.status != ApplicationStatus.SUBMITTED.value]
        if not_submitted:
            raise PreconditionFailedError(f"{len(not_submitted)} application(s) are not in SUBMITTED status")

        out_of_scope = [a for a in applications if not is_authorized(coordinator, a.student.department)]
        if out_of_scope:
            logger.warning(
                f"Batch approve by {coordinator.coordinator_name} rejected: "
                f"{len(out_of_scope)} application(s) outside assigned departments"
            )
            raise PermissionDeniedError(
                f"{len(out_of_scope)} application(s) are from students outside your authorized departments"
            )

        unverified = [a for a in applications if not a.student.tpo_dept_verified]
        if unverified:
            raise PreconditionFailedError(f"{len(unverified)} application(s) are from unverified students")

        if settings.BATCH_APPROVE_ENFORCES_ELIGIBILITY:
            failures = []
            for application in applications:
                outcome = self._check_eligibility(application, application.student)
                if not outcome.eligible:
                    failures.append(
                        f"{application.student.enrollment_number}: {'; '.join(outcome.messages)}"
                    )
            if failures:
                raise PreconditionFailedError(
                    f"{len(failures)} application(s) do not meet eligibility criteria",
                    failures=failures,
                )

        now = utcnow()
        await self.db.execute(
            update(JobApplication)
            .where(JobApplication.id.in_(ids))
            .values(
                status=ApplicationStatus.PENDING_ADMIN.value,
                reviewed_by_dept=coordinator.user_id,
                reviewed_by_dept_at=now,
                dept_review_notes=notes,
                updated_at=now,
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()

        logger.info(f"Batch approved {len(ids)} application(s) by {coordinator.coordinator_name}")
        for application in applications:
            await self._notify(events.APPLICATION_BATCH_APPROVED, application, application.student, notes=notes)

        return {
            "success": True,
            "message": f"Successfully approved {len(ids)} application(s)",
            "data": {"count": len(ids)},
        }
