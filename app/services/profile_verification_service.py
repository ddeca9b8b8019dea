"""
Profile Verification Service
Department gate on student profiles

Coordinators verify, hold or reject profiles of students in the departments
they are assigned to. Every review action appends one row to the profile's
review log; rows are never edited afterwards.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

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
from app.models.coordinator import Coordinator
from app.models.resume import Resume
from app.models.student import ProfileReviewNote, StudentDocument, StudentProfile
from app.schemas.student import ProfileVerificationFilters
from app.services import notification_service as events
from app.services.access_scope import (
    VERIFY_PROFILES,
    authorized_departments,
    ensure_in_scope,
    get_coordinator,
    is_authorized,
    require_capability,
)
from app.services.eligibility_service import meets_completion_threshold
from app.services.notification_service import LoggingNotifier, Notifier, student_ref
from app.services.statistics_service import profile_verification_stats
from app.utils.constants import ProfileStatus, ReviewAction, VerificationBucket
from app.utils.helpers import is_blank, unique_ids, utcnow

logger = logging.getLogger(__name__)

COMPLETION_MESSAGE = "Profile completion must be at least {threshold}% before verification"


class ProfileVerificationService:
    """Verify, hold and reject student profiles on behalf of a coordinator."""

    def __init__(self, db: AsyncSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier or LoggingNotifier()

    async def _coordinator(self, user_id: UUID, action: str) -> Coordinator:
        coordinator = await get_coordinator(self.db, user_id)
        require_capability(coordinator, VERIFY_PROFILES, action)
        return coordinator

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

    def _add_note(
        self, coordinator: Coordinator, student_id: UUID, action: ReviewAction, notes: Optional[str]
    ) -> None:
        self.db.add(ProfileReviewNote(
            student_id=student_id,
            action=action.value,
            notes=notes,
            actor_id=coordinator.user_id,
            actor_name=coordinator.coordinator_name,
        ))

    # ==================== Queries ====================

    async def list_candidates(
        self, user_id: UUID, filters: Optional[ProfileVerificationFilters] = None
    ) -> Dict[str, Any]:
        """
        Students awaiting (or past) department review.

        Unverified profiles come first, then higher completion, then
        enrollment number. Stats are computed over the returned rows.
        """
        filters = filters or ProfileVerificationFilters()
        coordinator = await self._coordinator(user_id, "view student profiles")
        departments = authorized_departments(coordinator)

        query = select(StudentProfile).where(
            StudentProfile.department.in_(list(departments)),
            StudentProfile.deleted_at.is_(None),
        )

        if filters.verification_status == VerificationBucket.PENDING:
            query = query.where(
                StudentProfile.tpo_dept_verified.is_(False),
                StudentProfile.profile_status != ProfileStatus.REJECTED.value,
            )
        elif filters.verification_status == VerificationBucket.VERIFIED:
            query = query.where(StudentProfile.tpo_dept_verified.is_(True))
        elif filters.verification_status == VerificationBucket.REJECTED:
            query = query.where(StudentProfile.profile_status == ProfileStatus.REJECTED.value)

        if filters.profile_completion_min is not None:
            query = query.where(StudentProfile.profile_complete_percent >= filters.profile_completion_min)
        if filters.profile_completion_max is not None:
            query = query.where(StudentProfile.profile_complete_percent <= filters.profile_completion_max)
        if filters.graduation_year is not None:
            query = query.where(StudentProfile.expected_graduation_year == filters.graduation_year)
        if filters.semester is not None:
            query = query.where(StudentProfile.current_semester == filters.semester)
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            query = query.where(or_(
                StudentProfile.first_name.ilike(pattern),
                StudentProfile.last_name.ilike(pattern),
                StudentProfile.enrollment_number.ilike(pattern),
            ))

        query = query.order_by(
            StudentProfile.tpo_dept_verified.asc(),
            StudentProfile.profile_complete_percent.desc(),
            StudentProfile.enrollment_number.asc(),
        )

        result = await self.db.execute(query)
        students = list(result.scalars().all())

        total = len(students)
        verified = sum(1 for s in students if s.tpo_dept_verified)
        rejected = sum(1 for s in students if s.profile_status == ProfileStatus.REJECTED.value)
        pending = sum(
            1 for s in students
            if not s.tpo_dept_verified and s.profile_status != ProfileStatus.REJECTED.value
        )
        avg_completion = (
            round(sum(s.profile_complete_percent or 0 for s in students) / total) if total else 0
        )

        return {
            "success": True,
            "data": students,
            "stats": {
                "total": total,
                "pending": pending,
                "verified": verified,
                "rejected": rejected,
                "avg_profile_completion": avg_completion,
            },
        }

    async def get_detail(self, user_id: UUID, student_id: UUID) -> Dict[str, Any]:
        """Profile with review log, semester marks, active resumes and documents."""
        coordinator = await self._coordinator(user_id, "view student profiles")
        student = await self._get_student(
            student_id,
            selectinload(StudentProfile.review_notes),
            selectinload(StudentProfile.semester_marks),
        )
        ensure_in_scope(coordinator, student.department)

        resumes = await self.db.execute(
            select(Resume)
            .where(Resume.student_id == student.id, Resume.is_active.is_(True))
            .order_by(Resume.version.desc())
        )
        documents = await self.db.execute(
            select(StudentDocument)
            .where(StudentDocument.student_id == student.id)
            .order_by(StudentDocument.created_at.desc())
        )

        return {
            "success": True,
            "data": student,
            "resumes": list(resumes.scalars().all()),
            "documents": list(documents.scalars().all()),
        }

    async def stats(self, user_id: UUID) -> Dict[str, Any]:
        coordinator = await self._coordinator(user_id, "view verification statistics")
        data = await profile_verification_stats(self.db, authorized_departments(coordinator))
        return {"success": True, "data": data}

    # ==================== Review actions ====================

    async def verify(self, user_id: UUID, student_id: UUID, notes: Optional[str] = None) -> Dict[str, Any]:
        """
        Mark a profile as verified by the department.

        Re-verifying a VERIFIED profile is allowed and logs another entry.
        REJECTED profiles cannot be verified.
        """
        coordinator = await self._coordinator(user_id, "verify profiles")
        student = await self._get_student(student_id)
        ensure_in_scope(coordinator, student.department)

        if student.profile_status == ProfileStatus.REJECTED.value:
            raise PreconditionFailedError("Rejected profiles cannot be verified")

        threshold = settings.PROFILE_VERIFICATION_MIN_COMPLETION
        if not meets_completion_threshold(student.profile_complete_percent, threshold):
            logger.warning(
                f"Verification blocked for {student.enrollment_number}: "
                f"completion {student.profile_complete_percent}% < {threshold}%"
            )
            raise PreconditionFailedError(COMPLETION_MESSAGE.format(threshold=threshold))

        student.tpo_dept_verified = True
        student.tpo_dept_verified_at = utcnow()
        student.tpo_dept_verified_by = coordinator.user_id
        student.profile_status = ProfileStatus.VERIFIED.value
        self._add_note(coordinator, student.id, ReviewAction.VERIFIED, notes)
        await self.db.commit()

        logger.info(f"Profile {student.enrollment_number} verified by {coordinator.coordinator_name}")
        await self.notifier.notify(events.PROFILE_VERIFIED, student_ref(student), {
            "student_id": str(student.id),
            "student_name": student.full_name,
            "notes": notes,
        })

        return {"success": True, "message": "Student profile verified successfully", "data": student}

    async def hold(self, user_id: UUID, student_id: UUID, issues: str) -> Dict[str, Any]:
        """Send a profile back to the student with a list of issues to fix."""
        if is_blank(issues):
            raise ValidationError("Issues description is required")

        coordinator = await self._coordinator(user_id, "verify profiles")
        student = await self._get_student(student_id)
        ensure_in_scope(coordinator, student.department)
        self._ensure_reviewable(student, "put on hold")

        student.tpo_dept_verified = False
        student.profile_status = ProfileStatus.HOLD.value
        self._add_note(coordinator, student.id, ReviewAction.HOLD, issues)
        await self.db.commit()

        logger.info(f"Profile {student.enrollment_number} put on hold by {coordinator.coordinator_name}")
        await self.notifier.notify(events.PROFILE_HOLD, student_ref(student), {
            "student_id": str(student.id),
            "student_name": student.full_name,
            "issues": issues,
        })

        return {"success": True, "message": "Student profile put on hold", "data": student}

    async def reject(self, user_id: UUID, student_id: UUID, reason: str) -> Dict[str, Any]:
        """Reject a profile. The student may appeal to the TPO administrator."""
        if is_blank(reason):
            raise ValidationError("Rejection reason is required")

        coordinator = await self._coordinator(user_id, "verify profiles")
        student = await self._get_student(student_id)
        ensure_in_scope(coordinator, student.department)
        self._ensure_reviewable(student, "rejected")

        student.tpo_dept_verified = False
        student.profile_status = ProfileStatus.REJECTED.value
        self._add_note(coordinator, student.id, ReviewAction.REJECTED, reason)
        await self.db.commit()

        logger.info(f"Profile {student.enrollment_number} rejected by {coordinator.coordinator_name}")
        await self.notifier.notify(events.PROFILE_REJECTED, student_ref(student), {
            "student_id": str(student.id),
            "student_name": student.full_name,
            "reason": reason,
        })

        return {"success": True, "message": "Student profile rejected", "data": student}

    @staticmethod
    def _ensure_reviewable(student: StudentProfile, verb: str) -> None:
        if student.profile_status not in (ProfileStatus.PENDING.value, ProfileStatus.HOLD.value):
            raise PreconditionFailedError(
                f"A {student.profile_status.lower()} profile cannot be {verb}"
            )

    async def batch_verify(
        self, user_id: UUID, student_ids: List[UUID], notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Verify many profiles at once.

        All-or-nothing: every id is validated before anything is written,
        and any failure leaves every profile untouched.
        """
        limit = settings.PROFILE_BATCH_LIMIT
        if not student_ids:
            raise ValidationError("No students selected")
        if len(student_ids) > limit:
            raise BatchTooLargeError(len(student_ids), limit, "students", "verify")

        coordinator = await self._coordinator(user_id, "verify profiles")
        ids = unique_ids(student_ids)

        result = await self.db.execute(
            select(StudentProfile).where(
                StudentProfile.id.in_(ids),
                StudentProfile.deleted_at.is_(None),
            )
        )
        students = list(result.scalars().all())

        missing = len(ids) - len(students)
        if missing:
            raise NotFoundError("student", f"{missing} student(s) not found")

        out_of_scope = [s for s in students if not is_authorized(coordinator, s.department)]
        if out_of_scope:
            logger.warning(
                f"Batch verify by {coordinator.coordinator_name} rejected: "
                f"{len(out_of_scope)} student(s) outside assigned departments"
            )
            raise PermissionDeniedError(
                f"{len(out_of_scope)} student(s) are not in your authorized departments"
            )

        threshold = settings.PROFILE_VERIFICATION_MIN_COMPLETION
        incomplete = [s for s in students if not meets_completion_threshold(s.profile_complete_percent, threshold)]
        if incomplete:
            raise PreconditionFailedError(
                f"{len(incomplete)} student(s) have profile completion below {threshold}%"
            )

        rejected = [s for s in students if s.profile_status == ProfileStatus.REJECTED.value]
        if rejected:
            raise PreconditionFailedError(f"{len(rejected)} student(s) have rejected profiles")

        now = utcnow()
        await self.db.execute(
            update(StudentProfile)
            .where(StudentProfile.id.in_(ids))
            .values(
                tpo_dept_verified=True,
                tpo_dept_verified_at=now,
                tpo_dept_verified_by=coordinator.user_id,
                profile_status=ProfileStatus.VERIFIED.value,
                updated_at=now,
            )
            .execution_options(synchronize_session="fetch")
        )
        for student_id in ids:
            self._add_note(coordinator, student_id, ReviewAction.VERIFIED, notes)
        await self.db.commit()

        logger.info(f"Batch verified {len(ids)} profile(s) by {coordinator.coordinator_name}")
        for student in students:
            await self.notifier.notify(events.PROFILE_BATCH_VERIFIED, student_ref(student), {
                "student_id": str(student.id),
                "notes": notes,
            })

        return {
            "success": True,
            "message": f"Successfully verified {len(ids)} student profile(s)",
            "data": {"count": len(ids)},
        }
