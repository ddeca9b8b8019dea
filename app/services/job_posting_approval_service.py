"""
Job Posting Approval Service
TPO administrator gate on recruiter postings

Lifecycle: PENDING_APPROVAL -> ACTIVE | REJECTED, ACTIVE -> CLOSED.
Eligibility criteria are frozen once a posting goes ACTIVE so every
application to it is judged by the same rules.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError, PreconditionFailedError, ValidationError
from app.models.application import JobApplication
from app.models.job import JobPosting
from app.models.student import StudentProfile
from app.schemas.job import EligibilityCriteria
from app.services import notification_service as events
from app.services.eligibility_service import evaluate, parse_criteria
from app.services.notification_service import LoggingNotifier, Notifier, organization_ref
from app.services.statistics_service import job_posting_stats
from app.utils.constants import JobPostingStatus
from app.utils.helpers import is_blank, utcnow

logger = logging.getLogger(__name__)


class JobPostingApprovalService:
    """Approve, reject and close job postings."""

    def __init__(self, db: AsyncSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier or LoggingNotifier()

    async def _get_posting(self, posting_id: UUID) -> JobPosting:
        result = await self.db.execute(
            select(JobPosting)
            .where(JobPosting.id == posting_id)
            .options(selectinload(JobPosting.organization))
        )
        posting = result.scalar_one_or_none()
        if posting is None:
            raise NotFoundError("job posting", "Job posting not found")
        return posting

    @staticmethod
    def _require_status(posting: JobPosting, expected: JobPostingStatus, action: str) -> None:
        if posting.status != expected.value:
            raise PreconditionFailedError(
                f"Cannot {action} a job posting in {posting.status} status"
            )

    @staticmethod
    def _validated_criteria(raw) -> EligibilityCriteria:
        try:
            return parse_criteria(raw)
        except SchemaValidationError as e:
            raise ValidationError(f"Invalid eligibility criteria: {e.errors()[0]['msg']}")

    async def list_postings(
        self, status: Optional[JobPostingStatus] = None, search: Optional[str] = None
    ) -> Dict[str, Any]:
        query = select(JobPosting).options(selectinload(JobPosting.organization))
        if status:
            query = query.where(JobPosting.status == status.value)
        if search:
            query = query.where(JobPosting.job_title.ilike(f"%{search.strip()}%"))
        query = query.order_by(JobPosting.created_at.desc())

        result = await self.db.execute(query)
        postings = list(result.scalars().all())
        return {"success": True, "data": postings, "total": len(postings)}

    async def get_detail(self, posting_id: UUID) -> Dict[str, Any]:
        """Posting with application counts per status."""
        posting = await self._get_posting(posting_id)

        result = await self.db.execute(
            select(JobApplication.status, func.count(JobApplication.id))
            .where(JobApplication.job_posting_id == posting.id)
            .group_by(JobApplication.status)
        )
        by_status = {status: count for status, count in result.all()}

        return {
            "success": True,
            "data": posting,
            "applications_count": sum(by_status.values()),
            "applications_by_status": by_status,
        }

    async def stats(self) -> Dict[str, Any]:
        return {"success": True, "data": await job_posting_stats(self.db)}

    async def approve(self, admin_id: UUID, posting_id: UUID) -> Dict[str, Any]:
        """Publish a posting to students."""
        posting = await self._get_posting(posting_id)
        self._require_status(posting, JobPostingStatus.PENDING_APPROVAL, "approve")
        self._validated_criteria(posting.eligibility_criteria)

        posting.status = JobPostingStatus.ACTIVE.value
        posting.approved_by = admin_id
        posting.approved_at = utcnow()
        await self.db.commit()

        logger.info(f"Job posting {posting.id} ({posting.job_title}) approved by admin {admin_id}")
        await self.notifier.notify(events.JOB_POSTING_APPROVED, organization_ref(posting.org_id), {
            "job_posting_id": str(posting.id),
            "job_title": posting.job_title,
        })
        return {"success": True, "message": "Job posting approved", "data": posting}

    async def reject(self, admin_id: UUID, posting_id: UUID, reason: str) -> Dict[str, Any]:
        if is_blank(reason):
            raise ValidationError("Rejection reason is required")

        posting = await self._get_posting(posting_id)
        self._require_status(posting, JobPostingStatus.PENDING_APPROVAL, "reject")

        posting.status = JobPostingStatus.REJECTED.value
        posting.rejection_reason = reason
        await self.db.commit()

        logger.info(f"Job posting {posting.id} rejected by admin {admin_id}")
        await self.notifier.notify(events.JOB_POSTING_REJECTED, organization_ref(posting.org_id), {
            "job_posting_id": str(posting.id),
            "reason": reason,
        })
        return {"success": True, "message": "Job posting rejected", "data": posting}

    async def request_modifications(self, admin_id: UUID, posting_id: UUID, modifications: str) -> Dict[str, Any]:
        if is_blank(modifications):
            raise ValidationError("Requested modifications are required")

        posting = await self._get_posting(posting_id)
        self._require_status(posting, JobPostingStatus.PENDING_APPROVAL, "request modifications for")

        posting.modifications_requested = modifications
        await self.db.commit()

        logger.info(f"Modifications requested on job posting {posting.id} by admin {admin_id}")
        await self.notifier.notify(
            events.JOB_POSTING_MODIFICATIONS_REQUESTED,
            organization_ref(posting.org_id),
            {"job_posting_id": str(posting.id), "modifications": modifications},
        )
        return {"success": True, "message": "Modifications requested", "data": posting}

    async def update_criteria(self, posting_id: UUID, criteria) -> Dict[str, Any]:
        """Replace eligibility criteria; only while the posting awaits approval."""
        parsed = self._validated_criteria(criteria)
        posting = await self._get_posting(posting_id)
        if posting.status != JobPostingStatus.PENDING_APPROVAL.value:
            raise PreconditionFailedError(
                f"Eligibility criteria cannot be changed once a posting is {posting.status}"
            )

        posting.eligibility_criteria = parsed.model_dump()
        await self.db.commit()
        return {"success": True, "message": "Eligibility criteria updated", "data": posting}

    async def close(self, admin_id: UUID, posting_id: UUID) -> Dict[str, Any]:
        posting = await self._get_posting(posting_id)
        self._require_status(posting, JobPostingStatus.ACTIVE, "close")

        posting.status = JobPostingStatus.CLOSED.value
        await self.db.commit()

        logger.info(f"Job posting {posting.id} closed by admin {admin_id}")
        await self.notifier.notify(events.JOB_POSTING_CLOSED, organization_ref(posting.org_id), {
            "job_posting_id": str(posting.id),
        })
        return {"success": True, "message": "Job posting closed", "data": posting}

    async def eligibility_preview(self, posting_id: UUID) -> Dict[str, Any]:
        """
        How many verified students would be eligible, per department.

        Runs the full rule set including graduation year.
        """
        posting = await self._get_posting(posting_id)
        criteria = self._validated_criteria(posting.eligibility_criteria)

        result = await self.db.execute(
            select(StudentProfile).where(
                StudentProfile.tpo_dept_verified.is_(True),
                StudentProfile.deleted_at.is_(None),
            )
        )
        students = list(result.scalars().all())

        totals = defaultdict(int)
        eligible = defaultdict(int)
        for student in students:
            totals[student.department] += 1
            if evaluate(student, criteria, check_graduation_year=True, open_branches=True).eligible:
                eligible[student.department] += 1

        breakdown = [
            {
                "department": department,
                "eligible": eligible[department],
                "total": totals[department],
                "percentage": round(eligible[department] / totals[department] * 100),
            }
            for department in sorted(totals)
        ]

        return {
            "success": True,
            "total_students": len(students),
            "total_eligible": sum(eligible.values()),
            "department_breakdown": breakdown,
        }
