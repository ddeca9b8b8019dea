"""Initial TPO workflow schema

Revision ID: tpo_workflow_v1
Revises:
Create Date: 2026-02-02 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'tpo_workflow_v1'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    # Users
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Organizations
    op.create_table(
        'organizations',
        *_base_columns(),
        sa.Column('org_name', sa.String(length=255), nullable=False),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('industry', sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_organizations_id', 'organizations', ['id'])
    op.create_index('ix_organizations_org_name', 'organizations', ['org_name'])

    # Department coordinators
    op.create_table(
        'tpo_dept_coordinators',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('coordinator_name', sa.String(length=255), nullable=False),
        sa.Column('primary_department', sa.String(length=100), nullable=False),
        sa.Column('assigned_departments', postgresql.JSONB(astext_type=sa.Text()), nullable=False,
                  server_default='[]'),
        sa.Column('can_verify_profiles', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('can_process_applications', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tpo_dept_coordinators_id', 'tpo_dept_coordinators', ['id'])
    op.create_index('ix_tpo_dept_coordinators_user_id', 'tpo_dept_coordinators', ['user_id'], unique=True)

    # Student profiles
    op.create_table(
        'student_profiles',
        *_base_columns(),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('enrollment_number', sa.String(length=50), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('middle_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=False),
        sa.Column('degree', sa.String(length=50), nullable=True),
        sa.Column('current_semester', sa.Integer(), nullable=True),
        sa.Column('expected_graduation_year', sa.Integer(), nullable=True),
        sa.Column('cgpi', sa.Float(), nullable=True),
        sa.Column('active_backlogs', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('profile_complete_percent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tpo_dept_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('tpo_dept_verified_at', sa.DateTime(), nullable=True),
        sa.Column('tpo_dept_verified_by', sa.Uuid(), nullable=True),
        sa.Column('profile_status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('ix_student_profiles_id', 'student_profiles', ['id'])
    op.create_index('ix_student_profiles_enrollment_number', 'student_profiles', ['enrollment_number'], unique=True)
    op.create_index('ix_student_profiles_department', 'student_profiles', ['department'])
    op.create_index('ix_student_profiles_expected_graduation_year', 'student_profiles', ['expected_graduation_year'])
    op.create_index('ix_student_profiles_tpo_dept_verified', 'student_profiles', ['tpo_dept_verified'])
    op.create_index('ix_student_profiles_profile_status', 'student_profiles', ['profile_status'])

    # Review log
    op.create_table(
        'profile_review_notes',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('actor_id', sa.Uuid(), nullable=False),
        sa.Column('actor_name', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['student_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_profile_review_notes_id', 'profile_review_notes', ['id'])
    op.create_index('ix_profile_review_notes_student_id', 'profile_review_notes', ['student_id'])

    op.create_table(
        'semester_marks',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('semester', sa.Integer(), nullable=False),
        sa.Column('sgpa', sa.Float(), nullable=True),
        sa.Column('backlogs', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['student_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_semester_marks_id', 'semester_marks', ['id'])
    op.create_index('ix_semester_marks_student_id', 'semester_marks', ['student_id'])

    op.create_table(
        'student_documents',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('document_type', sa.String(length=50), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['student_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_student_documents_id', 'student_documents', ['id'])
    op.create_index('ix_student_documents_student_id', 'student_documents', ['student_id'])

    op.create_table(
        'resumes',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('watermark_applied', sa.Boolean(), nullable=False, server_default='false'),
        sa.ForeignKeyConstraint(['student_id'], ['student_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_resumes_id', 'resumes', ['id'])
    op.create_index('ix_resumes_student_id', 'resumes', ['student_id'])

    # Job postings
    op.create_table(
        'job_postings',
        *_base_columns(),
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('job_title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('employment_type', sa.String(length=50), nullable=True),
        sa.Column('work_location', sa.String(length=255), nullable=True),
        sa.Column('eligibility_criteria', postgresql.JSONB(astext_type=sa.Text()), nullable=False,
                  server_default='{}'),
        sa.Column('application_deadline', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING_APPROVAL'),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('approved_by', sa.Uuid(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('modifications_requested', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_job_postings_id', 'job_postings', ['id'])
    op.create_index('ix_job_postings_org_id', 'job_postings', ['org_id'])
    op.create_index('ix_job_postings_job_title', 'job_postings', ['job_title'])
    op.create_index('ix_job_postings_status', 'job_postings', ['status'])

    # Applications
    op.create_table(
        'job_applications',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('job_posting_id', sa.Uuid(), nullable=False),
        sa.Column('resume_id', sa.Uuid(), nullable=True),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='SUBMITTED'),
        sa.Column('reviewed_by_dept', sa.Uuid(), nullable=True),
        sa.Column('reviewed_by_dept_at', sa.DateTime(), nullable=True),
        sa.Column('dept_review_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by_admin', sa.Uuid(), nullable=True),
        sa.Column('reviewed_by_admin_at', sa.DateTime(), nullable=True),
        sa.Column('admin_review_notes', sa.Text(), nullable=True),
        sa.Column('flag_reason', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('rejected_by', sa.Uuid(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['student_profiles.id']),
        sa.ForeignKeyConstraint(['job_posting_id'], ['job_postings.id']),
        sa.ForeignKeyConstraint(['resume_id'], ['resumes.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'job_posting_id', name='unique_student_job_application'),
    )
    op.create_index('ix_job_applications_id', 'job_applications', ['id'])
    op.create_index('ix_job_applications_student_id', 'job_applications', ['student_id'])
    op.create_index('ix_job_applications_job_posting_id', 'job_applications', ['job_posting_id'])
    op.create_index('ix_job_applications_status', 'job_applications', ['status'])
    # FIFO review queue
    op.create_index('ix_job_applications_status_created', 'job_applications', ['status', 'created_at'])

    # Consents
    op.create_table(
        'consents',
        *_base_columns(),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('job_posting_id', sa.Uuid(), nullable=False),
        sa.Column('consent_given', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('access_expiry', sa.DateTime(), nullable=True),
        sa.Column('data_shared', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['student_profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['job_posting_id'], ['job_postings.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_consents_id', 'consents', ['id'])
    op.create_index('ix_consents_student_id', 'consents', ['student_id'])
    op.create_index('ix_consents_job_posting_id', 'consents', ['job_posting_id'])


def downgrade() -> None:
    op.drop_table('consents')
    op.drop_table('job_applications')
    op.drop_table('job_postings')
    op.drop_table('resumes')
    op.drop_table('student_documents')
    op.drop_table('semester_marks')
    op.drop_table('profile_review_notes')
    op.drop_table('student_profiles')
    op.drop_table('tpo_dept_coordinators')
    op.drop_table('organizations')
    op.drop_table('users')
