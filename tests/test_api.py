"""HTTP surface: auth, routing, envelopes and error mapping."""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.deps import get_notifier
from app.core.security import create_access_token
from app.db.session import get_db
from app.main import app
from app.utils.constants import ApplicationStatus, JobPostingStatus


@pytest.fixture
async def client(db, notifier):
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth(user_id):
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def coordinator(make_coordinator):
    return await make_coordinator(primary="CSE", assigned=["IT"])


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_requires_token(client):
    response = await client.get("/api/v1/dept/students")
    assert response.status_code in (401, 403)


async def test_student_role_cannot_use_department_routes(client, make_user):
    student_user = await make_user("student")
    response = await client.get("/api/v1/dept/students", headers=auth(student_user.id))
    assert response.status_code == 403


async def test_list_and_verify_student(client, coordinator, make_student):
    student = await make_student(department="CSE", completion=85)
    headers = auth(coordinator.user_id)

    response = await client.get("/api/v1/dept/students", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["stats"]["pending"] == 1
    assert body["data"][0]["id"] == str(student.id)

    response = await client.put(f"/api/v1/dept/students/{student.id}/verify", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["tpo_dept_verified"] is True
    assert response.json()["data"]["profile_status"] == "VERIFIED"


async def test_verify_out_of_scope_is_403(client, coordinator, make_student):
    student = await make_student(department="ECE", completion=95)
    response = await client.put(f"/api/v1/dept/students/{student.id}/verify", headers=auth(coordinator.user_id))
    assert response.status_code == 403
    assert response.json()["error"] == "permission_denied"


async def test_verify_incomplete_profile_is_409(client, coordinator, make_student):
    student = await make_student(completion=60)
    response = await client.put(f"/api/v1/dept/students/{student.id}/verify", headers=auth(coordinator.user_id))
    assert response.status_code == 409
    assert response.json()["message"] == "Profile completion must be at least 80% before verification"


async def test_hold_with_blank_issues_is_400(client, coordinator, make_student):
    student = await make_student()
    response = await client.put(
        f"/api/v1/dept/students/{student.id}/hold",
        json={"issues": "  "},
        headers=auth(coordinator.user_id),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


async def test_batch_verify_over_limit_is_400(client, coordinator):
    response = await client.post(
        "/api/v1/dept/students/batch-verify",
        json={"student_ids": [str(uuid4()) for _ in range(51)]},
        headers=auth(coordinator.user_id),
    )
    assert response.status_code == 400
    assert "50" in response.json()["message"]


async def test_student_detail_and_stats(client, coordinator, make_student, add_review_extras):
    student = await make_student()
    await add_review_extras(student)
    headers = auth(coordinator.user_id)

    response = await client.get(f"/api/v1/dept/students/{student.id}", headers=headers)
    assert response.status_code == 200
    assert [r["version"] for r in response.json()["resumes"]] == [2]

    response = await client.get("/api/v1/dept/students/stats", headers=headers)
    assert response.json()["data"]["verification_rate"] == "0.00%"


async def test_unknown_student_is_404(client, coordinator):
    response = await client.get(f"/api/v1/dept/students/{uuid4()}", headers=auth(coordinator.user_id))
    assert response.status_code == 404


async def test_application_queue_and_approve(client, coordinator, make_student, make_posting, make_application):
    student = await make_student(verified=True, cgpi=8.4)
    application = await make_application(student, await make_posting())
    headers = auth(coordinator.user_id)

    response = await client.get("/api/v1/dept/applications", headers=headers)
    assert response.status_code == 200
    item = response.json()["data"][0]
    assert item["student"]["enrollment_number"] == student.enrollment_number
    assert item["job_posting"]["eligibility_criteria"]["cgpa_min"] == 7.0

    response = await client.put(
        f"/api/v1/dept/applications/{application.id}/approve",
        json={"notes": "Looks good"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == ApplicationStatus.PENDING_ADMIN.value


async def test_approve_ineligible_returns_failures(client, coordinator, make_student, make_posting, make_application):
    student = await make_student(verified=True, cgpi=6.5)
    application = await make_application(student, await make_posting())

    response = await client.put(
        f"/api/v1/dept/applications/{application.id}/approve", headers=auth(coordinator.user_id)
    )
    assert response.status_code == 409
    assert response.json()["failures"] == ["Student CGPA (6.5) is below minimum requirement (7.0)"]


async def test_reject_application_with_empty_reason(client, coordinator):
    response = await client.put(
        f"/api/v1/dept/applications/{uuid4()}/reject",
        json={"reason": ""},
        headers=auth(coordinator.user_id),
    )
    assert response.status_code == 400


async def test_queue_rejects_inverted_cgpa_range(client, coordinator):
    response = await client.get(
        "/api/v1/dept/applications",
        params={"cgpa_min": 8, "cgpa_max": 6},
        headers=auth(coordinator.user_id),
    )
    assert response.status_code == 422


async def test_admin_gate_flow(client, make_user, make_student, make_posting, make_application):
    admin = await make_user("tpo_admin")
    posting = await make_posting(status=JobPostingStatus.PENDING_APPROVAL)
    headers = auth(admin.id)

    response = await client.put(f"/api/v1/admin/job-postings/{posting.id}/approve", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == JobPostingStatus.ACTIVE.value

    application = await make_application(
        await make_student(verified=True), posting, status=ApplicationStatus.PENDING_ADMIN
    )
    response = await client.get("/api/v1/admin/applications", headers=headers)
    assert [a["id"] for a in response.json()["data"]] == [str(application.id)]

    response = await client.put(f"/api/v1/admin/applications/{application.id}/forward", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == ApplicationStatus.FORWARDED.value

    response = await client.get(f"/api/v1/admin/job-postings/{posting.id}/eligibility-preview", headers=headers)
    assert response.json()["total_eligible"] == 1


async def test_coordinator_cannot_use_admin_routes(client, coordinator, make_posting):
    posting = await make_posting(status=JobPostingStatus.PENDING_APPROVAL)
    response = await client.put(
        f"/api/v1/admin/job-postings/{posting.id}/approve", headers=auth(coordinator.user_id)
    )
    assert response.status_code == 403


async def test_admin_detail_and_stats_routes(client, make_user, make_student, make_posting, make_application):
    admin = await make_user("tpo_admin")
    headers = auth(admin.id)
    posting = await make_posting()
    application = await make_application(
        await make_student(verified=True), posting, status=ApplicationStatus.PENDING_ADMIN
    )

    response = await client.get("/api/v1/admin/applications/stats", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["pending_admin"] == 1

    response = await client.get(f"/api/v1/admin/applications/{application.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["application"]["id"] == str(application.id)

    response = await client.get("/api/v1/admin/job-postings/stats", headers=headers)
    assert response.json()["data"]["active"] == 1

    response = await client.get(f"/api/v1/admin/job-postings/{posting.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["applications_by_status"] == {"PENDING_ADMIN": 1}

    response = await client.get(f"/api/v1/admin/job-postings/{uuid4()}", headers=headers)
    assert response.status_code == 404
