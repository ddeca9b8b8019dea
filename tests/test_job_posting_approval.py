from uuid import uuid4

import pytest

from app.core.exceptions import NotFoundError, PreconditionFailedError, ValidationError
from app.models import JobPosting
from app.schemas.job import EligibilityCriteria
from app.services.job_posting_approval_service import JobPostingApprovalService
from app.utils.constants import ApplicationStatus, JobPostingStatus
from tests.conftest import reload


@pytest.fixture
def service(db, notifier):
    return JobPostingApprovalService(db, notifier)


@pytest.fixture
def admin_id():
    return uuid4()


async def test_approve_publishes_posting(db, service, notifier, make_posting, admin_id):
    posting = await make_posting(status=JobPostingStatus.PENDING_APPROVAL)

    await service.approve(admin_id, posting.id)

    fresh = await reload(db, JobPosting, posting.id)
    assert fresh.status == JobPostingStatus.ACTIVE.value
    assert fresh.approved_by == admin_id
    assert fresh.approved_at is not None
    assert notifier.sent[0]["event"] == "job_posting.approved"
    assert notifier.sent[0]["recipient"] == f"organization:{posting.org_id}"


async def test_approve_rejects_invalid_criteria(service, make_posting, admin_id):
    posting = await make_posting({"cgpa_min": 14}, status=JobPostingStatus.PENDING_APPROVAL)
    with pytest.raises(ValidationError, match="eligibility criteria"):
        await service.approve(admin_id, posting.id)


async def test_approve_only_pending(service, make_posting, admin_id):
    posting = await make_posting(status=JobPostingStatus.ACTIVE)
    with pytest.raises(PreconditionFailedError):
        await service.approve(admin_id, posting.id)


async def test_reject_and_request_modifications(db, service, make_posting, admin_id):
    posting = await make_posting(status=JobPostingStatus.PENDING_APPROVAL)

    with pytest.raises(ValidationError):
        await service.reject(admin_id, posting.id, " ")

    await service.request_modifications(admin_id, posting.id, "Add a CTC range")
    fresh = await reload(db, JobPosting, posting.id)
    assert fresh.modifications_requested == "Add a CTC range"
    assert fresh.status == JobPostingStatus.PENDING_APPROVAL.value

    await service.reject(admin_id, posting.id, "Unpaid internship")
    fresh = await reload(db, JobPosting, posting.id)
    assert fresh.status == JobPostingStatus.REJECTED.value
    assert fresh.rejection_reason == "Unpaid internship"


async def test_criteria_frozen_once_active(db, service, make_posting, admin_id):
    posting = await make_posting(status=JobPostingStatus.PENDING_APPROVAL)

    await service.update_criteria(posting.id, {"cgpa_min": 6.5, "allowed_branches": ["CSE"]})
    fresh = await reload(db, JobPosting, posting.id)
    assert fresh.eligibility_criteria["cgpa_min"] == 6.5

    await service.approve(admin_id, posting.id)
    with pytest.raises(PreconditionFailedError):
        await service.update_criteria(posting.id, EligibilityCriteria(cgpa_min=5.0))


async def test_close_only_active(db, service, make_posting, admin_id):
    pending = await make_posting(status=JobPostingStatus.PENDING_APPROVAL)
    with pytest.raises(PreconditionFailedError):
        await service.close(admin_id, pending.id)

    active = await make_posting(status=JobPostingStatus.ACTIVE)
    await service.close(admin_id, active.id)
    fresh = await reload(db, JobPosting, active.id)
    assert fresh.status == JobPostingStatus.CLOSED.value


async def test_list_postings_filters(service, make_posting):
    await make_posting(status=JobPostingStatus.ACTIVE, title="Backend Engineer")
    pending = await make_posting(status=JobPostingStatus.PENDING_APPROVAL, title="Data Analyst")

    result = await service.list_postings(status=JobPostingStatus.PENDING_APPROVAL)
    assert [p.id for p in result["data"]] == [pending.id]

    result = await service.list_postings(search="backend")
    assert result["total"] == 1


async def test_unknown_posting(service, admin_id):
    with pytest.raises(NotFoundError):
        await service.approve(admin_id, uuid4())


async def test_eligibility_preview(service, make_posting, make_student):
    posting = await make_posting({
        "cgpa_min": 7.0,
        "max_backlogs": 0,
        "allowed_branches": ["CSE", "IT"],
        "graduation_years": [2026],
    })
    await make_student(department="CSE", verified=True, cgpi=8.0)
    await make_student(department="CSE", verified=True, cgpi=6.0)
    await make_student(department="CSE", verified=True, graduation_year=2027)
    await make_student(department="IT", verified=True, cgpi=9.0)
    await make_student(department="ECE", verified=True, cgpi=9.0)
    await make_student(department="CSE", verified=False, cgpi=9.0)

    result = await service.eligibility_preview(posting.id)

    assert result["total_students"] == 5
    assert result["total_eligible"] == 2
    assert result["department_breakdown"] == [
        {"department": "CSE", "eligible": 1, "total": 3, "percentage": 33},
        {"department": "ECE", "eligible": 0, "total": 1, "percentage": 0},
        {"department": "IT", "eligible": 1, "total": 1, "percentage": 100},
    ]


async def test_eligibility_preview_with_open_branch_list(service, make_posting, make_student):
    posting = await make_posting({"cgpa_min": 7.0, "allowed_branches": []})
    await make_student(department="CSE", verified=True)
    await make_student(department="MECH", verified=True)

    result = await service.eligibility_preview(posting.id)
    assert result["total_eligible"] == 2


async def test_stats_count_each_status(service, make_posting, admin_id):
    first = await make_posting(status=JobPostingStatus.PENDING_APPROVAL)
    await make_posting(status=JobPostingStatus.PENDING_APPROVAL)
    await make_posting(status=JobPostingStatus.CLOSED)
    await service.approve(admin_id, first.id)

    result = await service.stats()

    assert result["data"] == {
        "total": 3,
        "pending_approval": 1,
        "active": 1,
        "rejected": 0,
        "closed": 1,
        "approved_this_month": 1,
    }


async def test_get_detail_counts_applications(service, make_posting, make_student, make_application):
    posting = await make_posting()
    await make_application(await make_student(), posting)
    await make_application(await make_student(), posting, status=ApplicationStatus.PENDING_ADMIN)
    await make_application(await make_student(), posting, status=ApplicationStatus.PENDING_ADMIN)
    await make_application(await make_student(), await make_posting())

    result = await service.get_detail(posting.id)

    assert result["data"].id == posting.id
    assert result["applications_count"] == 3
    assert result["applications_by_status"] == {
        ApplicationStatus.SUBMITTED.value: 1,
        ApplicationStatus.PENDING_ADMIN.value: 2,
    }


async def test_get_detail_unknown(service):
    with pytest.raises(NotFoundError):
        await service.get_detail(uuid4())
