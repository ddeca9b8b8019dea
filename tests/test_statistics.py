import pytest

from app.services.statistics_service import (
    application_review_stats,
    format_rate,
    profile_verification_stats,
)
from app.utils.constants import ProfileStatus


@pytest.mark.parametrize(
    "count, total, expected",
    [(0, 0, "0.00%"), (5, 0, "0.00%"), (1, 3, "33.33%"), (2, 3, "66.67%"), (4, 4, "100.00%")],
)
def test_format_rate(count, total, expected):
    assert format_rate(count, total) == expected


async def test_profile_stats_ignore_deleted_and_other_departments(db, make_student):
    await make_student(department="CSE", verified=True)
    await make_student(department="CSE", deleted=True, verified=True)
    await make_student(department="MECH", verified=True)
    await make_student(department="IT", status=ProfileStatus.HOLD)

    stats = await profile_verification_stats(db, {"CSE", "IT"})

    assert stats["total"] == 2
    assert stats["verified"] == 1
    assert stats["hold"] == 1
    assert stats["verification_rate"] == "50.00%"


async def test_empty_department_set(db):
    stats = await application_review_stats(db, set())
    assert stats["total"] == 0
    assert stats["approval_rate"] == "0.00%"
