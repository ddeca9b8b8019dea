"""Count queries behind the department and admin dashboards."""

from typing import Dict, Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import JobApplication
from app.models.job import JobPosting
from app.models.student import StudentProfile
from app.utils.constants import DEPT_APPROVED_STATUSES, ApplicationStatus, JobPostingStatus, ProfileStatus
from app.utils.helpers import format_percentage, utcnow


def format_rate(count: int, total: int) -> str:
    """``"NN.NN%"`` string; ``"0.00%"`` when there is nothing to count."""
    return format_percentage(count, total)


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar() or 0


async def _status_counts(db: AsyncSession, status_column) -> Dict[str, int]:
    result = await db.execute(select(status_column, func.count()).group_by(status_column))
    return {status: count for status, count in result.all()}


def _month_start():
    return utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)


async def profile_verification_stats(db: AsyncSession, departments: Iterable[str]) -> Dict:
    """Verification counters over live profiles in ``departments``."""
    base = select(func.count(StudentProfile.id)).where(
        StudentProfile.department.in_(list(departments)),
        StudentProfile.deleted_at.is_(None),
    )

    total = await _count(db, base)
    verified = await _count(db, base.where(StudentProfile.tpo_dept_verified.is_(True)))
    pending = await _count(db, base.where(
        StudentProfile.tpo_dept_verified.is_(False),
        StudentProfile.profile_status != ProfileStatus.REJECTED.value,
    ))
    rejected = await _count(db, base.where(StudentProfile.profile_status == ProfileStatus.REJECTED.value))
    hold = await _count(db, base.where(StudentProfile.profile_status == ProfileStatus.HOLD.value))

    return {
        "total": total,
        "pending": pending,
        "verified": verified,
        "rejected": rejected,
        "hold": hold,
        "verification_rate": format_rate(verified, total),
    }


async def application_review_stats(db: AsyncSession, departments: Iterable[str]) -> Dict:
    """Department-gate counters over applications from students in ``departments``."""
    base = (
        select(func.count(JobApplication.id))
        .join(StudentProfile, JobApplication.student_id == StudentProfile.id)
        .where(
            StudentProfile.department.in_(list(departments)),
            StudentProfile.deleted_at.is_(None),
        )
    )

    total = await _count(db, base)
    pending_review = await _count(db, base.where(JobApplication.status == ApplicationStatus.SUBMITTED.value))
    approved = await _count(db, base.where(JobApplication.status.in_(DEPT_APPROVED_STATUSES)))
    rejected = await _count(db, base.where(JobApplication.status == ApplicationStatus.REJECTED.value))
    hold = await _count(db, base.where(JobApplication.status == ApplicationStatus.HOLD.value))

    return {
        "total": total,
        "pending_review": pending_review,
        "approved": approved,
        "rejected": rejected,
        "hold": hold,
        "approval_rate": format_rate(approved, total),
    }


async def admin_application_stats(db: AsyncSession) -> Dict:
    """Institution-wide application counters for the admin gate."""
    counts = await _status_counts(db, JobApplication.status)
    forwarded_this_month = await _count(db, select(func.count(JobApplication.id)).where(
        JobApplication.status == ApplicationStatus.FORWARDED.value,
        JobApplication.reviewed_by_admin_at >= _month_start(),
    ))

    return {
        "total": sum(counts.values()),
        "pending_dept": counts.get(ApplicationStatus.SUBMITTED.value, 0),
        "pending_admin": counts.get(ApplicationStatus.PENDING_ADMIN.value, 0),
        "forwarded": counts.get(ApplicationStatus.FORWARDED.value, 0),
        "rejected": counts.get(ApplicationStatus.REJECTED.value, 0),
        "flagged": counts.get(ApplicationStatus.FLAGGED.value, 0),
        "hold": counts.get(ApplicationStatus.HOLD.value, 0),
        "forwarded_this_month": forwarded_this_month,
    }


async def job_posting_stats(db: AsyncSession) -> Dict:
    """Job posting counters per lifecycle status."""
    counts = await _status_counts(db, JobPosting.status)
    approved_this_month = await _count(db, select(func.count(JobPosting.id)).where(
        JobPosting.approved_at >= _month_start(),
    ))

    return {
        "total": sum(counts.values()),
        "pending_approval": counts.get(JobPostingStatus.PENDING_APPROVAL.value, 0),
        "active": counts.get(JobPostingStatus.ACTIVE.value, 0),
        "rejected": counts.get(JobPostingStatus.REJECTED.value, 0),
        "closed": counts.get(JobPostingStatus.CLOSED.value, 0),
        "approved_this_month": approved_this_month,
    }
