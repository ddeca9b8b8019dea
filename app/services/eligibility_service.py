"""
Eligibility Service
Checks a student's academic record against a job posting's criteria

Pure functions, no database access. Every failed rule yields its own
message so reviewers can see exactly which condition blocked approval.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from app.config import settings
from app.schemas.job import EligibilityCriteria


class EligibilityReason(str, Enum):
    CGPA_TOO_LOW = "CGPA_TOO_LOW"
    HAS_BACKLOGS = "HAS_BACKLOGS"
    DEPARTMENT_NOT_ALLOWED = "DEPARTMENT_NOT_ALLOWED"
    GRADUATION_YEAR_NOT_ALLOWED = "GRADUATION_YEAR_NOT_ALLOWED"


@dataclass
class EligibilityFailure:
    reason: EligibilityReason
    message: str


@dataclass
class EligibilityResult:
    eligible: bool
    failures: List[EligibilityFailure] = field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [failure.message for failure in self.failures]


def parse_criteria(raw: Union[EligibilityCriteria, Dict[str, Any], None]) -> EligibilityCriteria:
    """Validate stored JSON criteria; ``None`` means no restrictions."""
    if isinstance(raw, EligibilityCriteria):
        return raw
    return EligibilityCriteria.model_validate(raw or {})


def evaluate(
    student,
    criteria: Union[EligibilityCriteria, Dict[str, Any], None],
    check_graduation_year: bool = False,
    open_branches: bool = False,
) -> EligibilityResult:
    """
    Evaluate ``student`` against ``criteria``.

    Rules:
    - CGPA must be at least ``cgpa_min``; skipped when either side is unset
    - Active backlogs fail only when ``max_backlogs`` is 0
    - Department must be listed in ``allowed_branches``
    - Graduation year is checked only on request (eligibility preview)

    Args:
        student: Object with ``cgpi``, ``active_backlogs``, ``department``
            and ``expected_graduation_year`` attributes
        criteria: Posting criteria, parsed or raw JSON
        check_graduation_year: Also enforce ``graduation_years``
        open_branches: Treat an empty ``allowed_branches`` as admitting
            every department (eligibility preview)

    Returns:
        EligibilityResult listing every failed rule
    """
    rules = parse_criteria(criteria)
    failures: List[EligibilityFailure] = []

    cgpi = student.cgpi
    if rules.cgpa_min is not None and cgpi is not None and cgpi < rules.cgpa_min:
        failures.append(EligibilityFailure(
            EligibilityReason.CGPA_TOO_LOW,
            f"Student CGPA ({cgpi}) is below minimum requirement ({rules.cgpa_min})",
        ))

    if rules.max_backlogs == 0 and student.active_backlogs:
        failures.append(EligibilityFailure(
            EligibilityReason.HAS_BACKLOGS,
            "Student has active backlogs but job requires 0 backlogs",
        ))

    branches_open = open_branches and not rules.allowed_branches
    if not branches_open and student.department not in rules.allowed_branches:
        failures.append(EligibilityFailure(
            EligibilityReason.DEPARTMENT_NOT_ALLOWED,
            f"Student department ({student.department}) is not in allowed branches",
        ))

    if check_graduation_year and rules.graduation_years:
        year = student.expected_graduation_year
        if year not in rules.graduation_years:
            failures.append(EligibilityFailure(
                EligibilityReason.GRADUATION_YEAR_NOT_ALLOWED,
                f"Student graduation year ({year}) is not in allowed years",
            ))

    return EligibilityResult(eligible=not failures, failures=failures)


def meets_completion_threshold(percent: Optional[float], threshold: Optional[float] = None) -> bool:
    """True when a profile is complete enough to be verified."""
    if percent is None:
        return False
    if threshold is None:
        threshold = settings.PROFILE_VERIFICATION_MIN_COMPLETION
    return percent >= threshold
