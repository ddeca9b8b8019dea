"""Common constants."""

from enum import Enum


class ProfileStatus(str, Enum):
    """Student profile verification status."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    HOLD = "HOLD"
    REJECTED = "REJECTED"


class VerificationBucket(str, Enum):
    """Verification buckets used by the department student list.

    Computed from ``tpo_dept_verified`` and ``profile_status`` together,
    not stored directly.
    """

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class ReviewAction(str, Enum):
    """Actions recorded in the profile review log."""

    VERIFIED = "VERIFIED"
    HOLD = "HOLD"
    REJECTED = "REJECTED"


class ApplicationStatus(str, Enum):
    """Job application pipeline status."""

    SUBMITTED = "SUBMITTED"
    PENDING_ADMIN = "PENDING_ADMIN"
    FORWARDED = "FORWARDED"
    HOLD = "HOLD"
    REJECTED = "REJECTED"
    FLAGGED = "FLAGGED"


class JobPostingStatus(str, Enum):
    """Job posting lifecycle status."""

    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    CLOSED = "CLOSED"


# Statuses counted as "approved" by the department gate
DEPT_APPROVED_STATUSES = [
    ApplicationStatus.PENDING_ADMIN.value,
    ApplicationStatus.FORWARDED.value,
]
