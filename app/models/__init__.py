"""Database models."""

# Import all models in dependency order to ensure proper relationship initialization

# Base models (no foreign keys)
from app.models.user import User
from app.models.company import Organization

# Models with foreign keys to base models
from app.models.coordinator import Coordinator
from app.models.student import StudentProfile, ProfileReviewNote, SemesterMark, StudentDocument
from app.models.resume import Resume
from app.models.job import JobPosting

# Models with foreign keys to other models
from app.models.application import JobApplication
from app.models.consent import Consent

# Export all models
__all__ = [
    "User",
    "Organization",
    "Coordinator",
    "StudentProfile",
    "ProfileReviewNote",
    "SemesterMark",
    "StudentDocument",
    "Resume",
    "JobPosting",
    "JobApplication",
    "Consent",
]
