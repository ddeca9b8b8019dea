"""API v1 routes."""

from fastapi import APIRouter, Depends

from app.api.v1 import admin_applications, admin_job_postings, dept_applications, dept_students
from app.core.deps import api_rate_limit

api_router = APIRouter(dependencies=[Depends(api_rate_limit)])

# Department gate (TPO_Dept)
api_router.include_router(dept_students.router, prefix="/dept/students", tags=["Dept - Student Verification"])
api_router.include_router(dept_applications.router, prefix="/dept/applications", tags=["Dept - Application Review"])

# Admin gate (TPO_Admin)
api_router.include_router(admin_job_postings.router, prefix="/admin/job-postings", tags=["Admin - Job Postings"])
api_router.include_router(admin_applications.router, prefix="/admin/applications", tags=["Admin - Applications"])
