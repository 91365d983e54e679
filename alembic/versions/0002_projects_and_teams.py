"""Projects, teams, applications, milestones and tasks

Revision ID: 0002_projects_and_teams
Revises: 0001_profiles_and_verification
Create Date: 2026-09-14

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0002_projects_and_teams'
down_revision: Union[str, None] = '0001_profiles_and_verification'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column('id', sa.UUID(), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'teams',
        _id_column(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('skills', postgresql.ARRAY(sa.String), server_default='{}'),
        sa.Column('portfolio_url', sa.Text),
        sa.Column('achievements', postgresql.JSONB),
        sa.Column('lead_id', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True),
        *_timestamps(),
    )

    op.create_table(
        'team_members',
        _id_column(),
        sa.Column('team_id', sa.UUID(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='member'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_members_team_user'),
        sa.CheckConstraint("role IN ('lead', 'member')", name='ck_team_members_role'),
        sa.CheckConstraint("status IN ('active', 'pending')", name='ck_team_members_status'),
    )

    op.create_table(
        'projects',
        _id_column(),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('category', sa.String(40), nullable=False),
        sa.Column('required_skills', postgresql.ARRAY(sa.String), server_default='{}'),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('team_size', sa.Integer, nullable=False),
        sa.Column('payment_model', sa.String(20), nullable=False),
        sa.Column('stipend_amount', sa.Numeric(12, 2)),
        sa.Column('deliverables', postgresql.ARRAY(sa.String), server_default='{}'),
        sa.Column('status', sa.String(20), nullable=False, server_default='open'),
        sa.Column('created_by', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('selected_team', sa.UUID(), sa.ForeignKey('teams.id', ondelete='SET NULL')),
        *_timestamps(),
        sa.CheckConstraint('end_date >= start_date', name='ck_projects_dates'),
        sa.CheckConstraint('team_size >= 1', name='ck_projects_team_size'),
        sa.CheckConstraint(
            "status IN ('open', 'in_progress', 'completed', 'cancelled')",
            name='ck_projects_status',
        ),
    )
    op.create_index('ix_projects_status_created', 'projects', ['status', 'created_at'])

    op.create_table(
        'applications',
        _id_column(),
        sa.Column('project_id', sa.UUID(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('team_id', sa.UUID(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('cover_letter', sa.Text, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name='ck_applications_status',
        ),
    )

    op.create_table(
        'project_milestones',
        _id_column(),
        sa.Column('project_id', sa.UUID(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('due_date', sa.Date),
        sa.Column('status', sa.String(20), nullable=False, server_default='not_started'),
        sa.Column('assigned_team_id', sa.UUID(), sa.ForeignKey('teams.id', ondelete='SET NULL')),
        *_timestamps(),
    )

    op.create_table(
        'project_tasks',
        _id_column(),
        sa.Column('project_id', sa.UUID(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('milestone_id', sa.UUID(), sa.ForeignKey('project_milestones.id', ondelete='CASCADE'), index=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('status', sa.String(20), nullable=False, server_default='todo'),
        sa.Column('due_date', sa.Date),
        sa.Column('assigned_to', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='SET NULL')),
        sa.Column('created_by', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='SET NULL')),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('project_tasks')
    op.drop_table('project_milestones')
    op.drop_table('applications')
    op.drop_index('ix_projects_status_created', table_name='projects')
    op.drop_table('projects')
    op.drop_table('team_members')
    op.drop_table('teams')
