"""Canonical task status values

Revision ID: 0005_canonical_task_status
Revises: 0004_rls_policies
Create Date: 2026-10-05

Rewrites task rows that still carry the older status names and then
constrains the column to the canonical set.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0005_canonical_task_status'
down_revision: Union[str, None] = '0004_rls_policies'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("UPDATE public.project_tasks SET status = 'todo' WHERE status = 'not_started'")
    op.execute("UPDATE public.project_tasks SET status = 'completed' WHERE status = 'done'")
    op.create_check_constraint(
        'ck_project_tasks_status',
        'project_tasks',
        "status IN ('todo', 'in_progress', 'review', 'completed', 'blocked')",
    )


def downgrade() -> None:
    op.drop_constraint('ck_project_tasks_status', 'project_tasks', type_='check')
