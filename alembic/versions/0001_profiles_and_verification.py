"""Profiles and college verification tables

Revision ID: 0001_profiles_and_verification
Revises:
Create Date: 2026-09-14

- profiles: one row per auth.users principal, keyed by the auth id
- user_verifications: at most one verification record per principal
- college_verification_codes: codes issued by college admins
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001_profiles_and_verification'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, server_default=''),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('email', sa.String(255)),
        sa.Column('avatar_url', sa.Text),
        sa.Column('bio', sa.String(500)),

        # Startup fields
        sa.Column('company_name', sa.String(200)),
        sa.Column('company_description', sa.Text),
        sa.Column('industry', sa.Text),
        sa.Column('company_size', sa.Text),
        sa.Column('founded', sa.Text),
        sa.Column('website', sa.Text),
        sa.Column('stage', sa.Text),
        sa.Column('project_needs', postgresql.ARRAY(sa.Text)),

        # Student fields
        sa.Column('skills', postgresql.ARRAY(sa.Text)),
        sa.Column('education', postgresql.JSONB),
        sa.Column('portfolio_url', sa.Text),
        sa.Column('resume_url', sa.Text),
        sa.Column('github_url', sa.Text),
        sa.Column('linkedin_url', sa.Text),
        sa.Column('availability', sa.Text),
        sa.Column('interests', postgresql.ARRAY(sa.Text)),
        sa.Column('experience_level', sa.Text),
        sa.Column('preferred_categories', postgresql.ARRAY(sa.Text)),
        sa.Column('college', sa.String(200)),
        sa.Column('graduation_year', sa.Text),
        sa.Column('major', sa.String(100)),

        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "role IN ('student', 'startup', 'college_admin', 'platform_admin')",
            name='ck_profiles_role',
        ),
    )
    op.execute("""
        ALTER TABLE public.profiles
        ADD CONSTRAINT profiles_id_fkey
        FOREIGN KEY (id) REFERENCES auth.users (id) ON DELETE CASCADE
    """)
    op.create_index('ix_profiles_role', 'profiles', ['role'])
    op.create_index('ix_profiles_email', 'profiles', ['email'])

    op.create_table(
        'user_verifications',
        sa.Column('id', sa.UUID(), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('college_id', sa.UUID(), nullable=False),
        sa.Column('is_verified', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('verified_at', sa.DateTime(timezone=True)),
    )
    # upsert(on_conflict="user_id") needs a unique index
    op.create_index('ix_user_verifications_user_id', 'user_verifications', ['user_id'], unique=True)

    op.create_table(
        'college_verification_codes',
        sa.Column('id', sa.UUID(), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('college_id', sa.UUID(), nullable=False),
        sa.Column('code', sa.String(16), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='SET NULL')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        'ix_college_verification_codes_college_code',
        'college_verification_codes',
        ['college_id', 'code'],
    )


def downgrade() -> None:
    op.drop_index('ix_college_verification_codes_college_code', table_name='college_verification_codes')
    op.drop_table('college_verification_codes')
    op.drop_index('ix_user_verifications_user_id', table_name='user_verifications')
    op.drop_table('user_verifications')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_index('ix_profiles_role', table_name='profiles')
    op.drop_table('profiles')
