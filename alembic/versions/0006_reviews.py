"""Project reviews

Revision ID: 0006_reviews
Revises: 0005_canonical_task_status
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0006_reviews'
down_revision: Union[str, None] = '0005_canonical_task_status'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'reviews',
        sa.Column('id', sa.UUID(), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('project_id', sa.UUID(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewer_id', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewee_id', sa.UUID(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.SmallInteger, nullable=False),
        sa.Column('comment', sa.String(2000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_reviews_rating_range'),
        sa.CheckConstraint('reviewer_id <> reviewee_id', name='ck_reviews_not_self'),
        sa.UniqueConstraint('project_id', 'reviewer_id', 'reviewee_id', name='uq_reviews_once_per_project'),
    )
    op.create_index('ix_reviews_project_created', 'reviews', ['project_id', 'created_at'])
    op.create_index('ix_reviews_reviewee_created', 'reviews', ['reviewee_id', 'created_at'])

    op.execute("ALTER TABLE public.reviews ENABLE ROW LEVEL SECURITY")
    op.execute("""
        CREATE POLICY reviews_select_policy ON public.reviews
        FOR SELECT TO authenticated USING (true)
    """)
    op.execute("""
        CREATE POLICY reviews_insert_policy ON public.reviews
        FOR INSERT WITH CHECK (reviewer_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY reviews_update_policy ON public.reviews
        FOR UPDATE USING (reviewer_id = auth.uid()) WITH CHECK (reviewer_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY reviews_delete_policy ON public.reviews
        FOR DELETE USING (reviewer_id = auth.uid())
    """)


def downgrade() -> None:
    for action in ("delete", "update", "insert", "select"):
        op.execute(f"DROP POLICY IF EXISTS reviews_{action}_policy ON public.reviews")
    op.drop_index('ix_reviews_reviewee_created', table_name='reviews')
    op.drop_index('ix_reviews_project_created', table_name='reviews')
    op.drop_table('reviews')
