"""Shared fixtures: in-memory SQLite database and record factories."""

from datetime import timedelta
from typing import Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db.base import Base
from app.models import (
    Consent,
    Coordinator,
    JobApplication,
    JobPosting,
    Organization,
    ProfileReviewNote,
    Resume,
    SemesterMark,
    StudentProfile,
    User,
)
from app.services.notification_service import RecordingNotifier
from app.utils.constants import ApplicationStatus, JobPostingStatus, ProfileStatus
from app.utils.helpers import utcnow

DEFAULT_CRITERIA = {"cgpa_min": 7.0, "max_backlogs": 0, "allowed_branches": ["CSE", "IT"]}


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_user(db):
    async def _make(role: str = "tpo_dept", is_active: bool = True) -> User:
        user = User(email=f"{role}-{uuid4().hex[:8]}@college.edu", role=role, is_active=is_active)
        db.add(user)
        await db.commit()
        return user
    return _make


@pytest.fixture
def make_coordinator(db, make_user):
    async def _make(
        primary: str = "CSE",
        assigned=("IT",),
        can_verify_profiles: bool = True,
        can_process_applications: bool = True,
        is_active: bool = True,
    ) -> Coordinator:
        user = await make_user("tpo_dept")
        coordinator = Coordinator(
            user_id=user.id,
            coordinator_name=f"Coordinator {primary}",
            primary_department=primary,
            assigned_departments=list(assigned),
            can_verify_profiles=can_verify_profiles,
            can_process_applications=can_process_applications,
            is_active=is_active,
        )
        db.add(coordinator)
        await db.commit()
        return coordinator
    return _make


@pytest.fixture
def make_student(db):
    async def _make(
        department: str = "CSE",
        completion: int = 85,
        cgpi: Optional[float] = 8.0,
        active_backlogs: bool = False,
        verified: bool = False,
        status: Optional[ProfileStatus] = None,
        graduation_year: int = 2026,
        semester: int = 7,
        first_name: str = "Asha",
        last_name: str = "Patil",
        deleted: bool = False,
    ) -> StudentProfile:
        if status is None:
            status = ProfileStatus.VERIFIED if verified else ProfileStatus.PENDING
        student = StudentProfile(
            enrollment_number=f"EN{uuid4().hex[:8].upper()}",
            first_name=first_name,
            last_name=last_name,
            department=department,
            degree="B.Tech",
            current_semester=semester,
            expected_graduation_year=graduation_year,
            cgpi=cgpi,
            active_backlogs=active_backlogs,
            profile_complete_percent=completion,
            tpo_dept_verified=verified,
            profile_status=status.value,
            deleted_at=utcnow() if deleted else None,
        )
        db.add(student)
        await db.commit()
        return student
    return _make


@pytest.fixture
def make_posting(db):
    async def _make(
        criteria: Optional[dict] = None,
        status: JobPostingStatus = JobPostingStatus.ACTIVE,
        title: str = "Graduate Engineer Trainee",
    ) -> JobPosting:
        org = Organization(org_name=f"Acme {uuid4().hex[:4]}", industry="Software")
        db.add(org)
        await db.flush()
        posting = JobPosting(
            org_id=org.id,
            job_title=title,
            employment_type="FULL_TIME",
            work_location="Pune",
            eligibility_criteria=DEFAULT_CRITERIA if criteria is None else criteria,
            status=status.value,
        )
        db.add(posting)
        await db.commit()
        return posting
    return _make


@pytest.fixture
def make_application(db):
    async def _make(
        student: StudentProfile,
        posting: JobPosting,
        status: ApplicationStatus = ApplicationStatus.SUBMITTED,
        age_minutes: int = 0,
    ) -> JobApplication:
        application = JobApplication(
            student_id=student.id,
            job_posting_id=posting.id,
            status=status.value,
            created_at=utcnow() - timedelta(minutes=age_minutes),
        )
        db.add(application)
        await db.commit()
        return application
    return _make


@pytest.fixture
def add_review_extras(db):
    """Resume, semester marks and consent for detail screens."""
    async def _add(student: StudentProfile, posting: Optional[JobPosting] = None):
        resume = Resume(student_id=student.id, file_name="resume_v2.pdf", version=2, is_primary=True)
        old_resume = Resume(student_id=student.id, file_name="resume_v1.pdf", version=1, is_active=False)
        db.add_all([
            resume,
            old_resume,
            SemesterMark(student_id=student.id, semester=2, sgpa=8.1),
            SemesterMark(student_id=student.id, semester=1, sgpa=7.9),
        ])
        if posting is not None:
            db.add(Consent(
                student_id=student.id,
                job_posting_id=posting.id,
                data_shared=["resume", "cgpi"],
                access_expiry=utcnow() + timedelta(days=90),
            ))
        await db.commit()
        return resume
    return _add


async def reload(db: AsyncSession, model, obj_id):
    """Fetch a fresh copy after a bulk UPDATE."""
    return await db.get(model, obj_id, populate_existing=True)


async def note_count(db: AsyncSession, student_id) -> int:
    result = await db.execute(
        select(func.count(ProfileReviewNote.id)).where(ProfileReviewNote.student_id == student_id)
    )
    return result.scalar()
