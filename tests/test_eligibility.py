"""Eligibility rules are pure: exercise them with plain objects."""

from types import SimpleNamespace

import pytest

from app.schemas.job import EligibilityCriteria
from app.services.eligibility_service import (
    EligibilityReason,
    evaluate,
    meets_completion_threshold,
)

CRITERIA = {"cgpa_min": 7.0, "max_backlogs": 0, "allowed_branches": ["CSE", "IT"]}


def student(**overrides):
    values = {
        "cgpi": 8.2,
        "active_backlogs": False,
        "department": "CSE",
        "expected_graduation_year": 2026,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_eligible_student_passes_every_rule():
    result = evaluate(student(), CRITERIA)
    assert result.eligible
    assert result.failures == []


def test_low_cgpa_names_both_values():
    result = evaluate(student(cgpi=6.5), CRITERIA)
    assert not result.eligible
    assert [f.reason for f in result.failures] == [EligibilityReason.CGPA_TOO_LOW]
    assert result.messages == ["Student CGPA (6.5) is below minimum requirement (7.0)"]


def test_cgpa_equal_to_minimum_passes():
    assert evaluate(student(cgpi=7.0), CRITERIA).eligible


def test_missing_cgpa_skips_cgpa_rule():
    assert evaluate(student(cgpi=None), CRITERIA).eligible
    assert not evaluate(student(cgpi=None, department="ECE"), CRITERIA).eligible


def test_backlogs_fail_only_when_zero_allowed():
    result = evaluate(student(active_backlogs=True), CRITERIA)
    assert result.messages == ["Student has active backlogs but job requires 0 backlogs"]

    relaxed = dict(CRITERIA, max_backlogs=2)
    assert evaluate(student(active_backlogs=True), relaxed).eligible

    no_rule = dict(CRITERIA, max_backlogs=None)
    assert evaluate(student(active_backlogs=True), no_rule).eligible


def test_department_outside_allowed_branches():
    result = evaluate(student(department="ECE"), CRITERIA)
    assert result.messages == ["Student department (ECE) is not in allowed branches"]


def test_empty_allowed_branches_admits_nobody():
    result = evaluate(student(department="CSE"), dict(CRITERIA, allowed_branches=[]))
    assert result.messages == ["Student department (CSE) is not in allowed branches"]


def test_open_branches_treats_empty_list_as_any_department():
    criteria = dict(CRITERIA, allowed_branches=[])
    assert evaluate(student(department="MECH"), criteria, open_branches=True).eligible

    result = evaluate(student(department="MECH"), CRITERIA, open_branches=True)
    assert [f.reason for f in result.failures] == [EligibilityReason.DEPARTMENT_NOT_ALLOWED]


def test_every_failure_is_reported():
    result = evaluate(student(cgpi=5.0, active_backlogs=True, department="ECE"), CRITERIA)
    assert {f.reason for f in result.failures} == {
        EligibilityReason.CGPA_TOO_LOW,
        EligibilityReason.HAS_BACKLOGS,
        EligibilityReason.DEPARTMENT_NOT_ALLOWED,
    }


def test_graduation_year_checked_only_on_request():
    criteria = dict(CRITERIA, graduation_years=[2025])
    assert evaluate(student(expected_graduation_year=2026), criteria).eligible

    result = evaluate(student(expected_graduation_year=2026), criteria, check_graduation_year=True)
    assert [f.reason for f in result.failures] == [EligibilityReason.GRADUATION_YEAR_NOT_ALLOWED]


def test_empty_criteria_only_restricts_department():
    result = evaluate(student(cgpi=4.0, active_backlogs=True, department="CIVIL"), {})
    assert [f.reason for f in result.failures] == [EligibilityReason.DEPARTMENT_NOT_ALLOWED]
    assert evaluate(student(), None, open_branches=True).eligible


def test_legacy_single_graduation_year_is_accepted():
    criteria = EligibilityCriteria.model_validate({"graduation_year": 2025, "unknown_key": 1})
    assert criteria.graduation_years == [2025]


@pytest.mark.parametrize(
    "percent, expected",
    [(79.999, False), (79, False), (80, True), (100, True), (None, False)],
)
def test_completion_threshold(percent, expected):
    assert meets_completion_threshold(percent) is expected
