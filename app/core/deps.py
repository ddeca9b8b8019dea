"""Dependency functions for FastAPI routes."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.rate_limit import RateLimiter, build_counter_store
from app.core.security import Role, require_role
from app.db.session import get_db
from app.services.admin_application_service import AdminApplicationService
from app.services.application_review_service import ApplicationReviewService
from app.services.job_posting_approval_service import JobPostingApprovalService
from app.services.notification_service import LoggingNotifier, Notifier
from app.services.profile_verification_service import ProfileVerificationService

# Role gates
require_coordinator = require_role(Role.TPO_DEPT)
require_admin = require_role(Role.TPO_ADMIN)

# Rate limiters share one counter store; batch endpoints get the stricter limit
_counter_store = build_counter_store(settings)

api_rate_limit = RateLimiter(
    _counter_store,
    max_requests=settings.RATE_LIMIT_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    scope="api",
    enabled=settings.RATE_LIMIT_ENABLED,
)

batch_rate_limit = RateLimiter(
    _counter_store,
    max_requests=settings.RATE_LIMIT_STRICT_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    scope="batch",
    enabled=settings.RATE_LIMIT_ENABLED,
)

_notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    """Notification dispatcher; override in tests."""
    return _notifier


def get_profile_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> ProfileVerificationService:
    return ProfileVerificationService(db, notifier)


def get_application_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> ApplicationReviewService:
    return ApplicationReviewService(db, notifier)


def get_admin_application_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> AdminApplicationService:
    return AdminApplicationService(db, notifier)


def get_job_posting_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> JobPostingApprovalService:
    return JobPostingApprovalService(db, notifier)
