"""Row level security policies

Revision ID: 0004_rls_policies
Revises: 0003_messages_and_notifications
Create Date: 2026-09-28

The API uses the service role and enforces ownership itself. These
policies cover clients that talk to Supabase directly with a user JWT:
- profiles, projects, teams, team_members (authenticated read, owner write)
- applications (applicant or project owner)
- milestones, tasks, messages (project or team participants)
- notifications (recipient only)
- verification tables (no direct client access)
"""

from alembic import op


revision = '0004_rls_policies'
down_revision = '0003_messages_and_notifications'
branch_labels = None
depends_on = None


IS_TEAM_MEMBER = """
    EXISTS (
        SELECT 1 FROM public.team_members tm
        WHERE tm.team_id = {team} AND tm.user_id = auth.uid() AND tm.status = 'active'
    )
"""

IS_PROJECT_PARTICIPANT = """
    EXISTS (
        SELECT 1 FROM public.projects p
        WHERE p.id = {project} AND p.created_by = auth.uid()
    )
    OR EXISTS (
        SELECT 1 FROM public.applications a
        JOIN public.team_members tm ON tm.team_id = a.team_id
        WHERE a.project_id = {project}
          AND a.status = 'accepted'
          AND tm.user_id = auth.uid()
          AND tm.status = 'active'
    )
"""

TABLES = (
    "profiles",
    "user_verifications",
    "college_verification_codes",
    "teams",
    "team_members",
    "projects",
    "applications",
    "project_milestones",
    "project_tasks",
    "project_messages",
    "team_messages",
    "notifications",
)


def upgrade() -> None:
    for table in TABLES:
        op.execute(f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY")

    # =========================================================================
    # 1. PROFILES (authenticated read, self write)
    # =========================================================================
    op.execute("""
        CREATE POLICY profiles_select_policy ON public.profiles
        FOR SELECT TO authenticated USING (true)
    """)
    op.execute("""
        CREATE POLICY profiles_insert_policy ON public.profiles
        FOR INSERT WITH CHECK (id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY profiles_update_policy ON public.profiles
        FOR UPDATE USING (id = auth.uid()) WITH CHECK (id = auth.uid())
    """)

    # =========================================================================
    # 2. VERIFICATION (own record readable, writes through the service role)
    # =========================================================================
    op.execute("""
        CREATE POLICY user_verifications_select_policy ON public.user_verifications
        FOR SELECT USING (user_id = auth.uid())
    """)

    # =========================================================================
    # 3. PROJECTS (authenticated read, owner write)
    # =========================================================================
    op.execute("""
        CREATE POLICY projects_select_policy ON public.projects
        FOR SELECT TO authenticated USING (true)
    """)
    op.execute("""
        CREATE POLICY projects_insert_policy ON public.projects
        FOR INSERT WITH CHECK (created_by = auth.uid())
    """)
    op.execute("""
        CREATE POLICY projects_update_policy ON public.projects
        FOR UPDATE USING (created_by = auth.uid()) WITH CHECK (created_by = auth.uid())
    """)
    op.execute("""
        CREATE POLICY projects_delete_policy ON public.projects
        FOR DELETE USING (created_by = auth.uid())
    """)

    # =========================================================================
    # 4. TEAMS AND MEMBERS
    # =========================================================================
    op.execute("""
        CREATE POLICY teams_select_policy ON public.teams
        FOR SELECT TO authenticated USING (true)
    """)
    op.execute("""
        CREATE POLICY teams_insert_policy ON public.teams
        FOR INSERT WITH CHECK (lead_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY teams_update_policy ON public.teams
        FOR UPDATE USING (lead_id = auth.uid()) WITH CHECK (lead_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY teams_delete_policy ON public.teams
        FOR DELETE USING (lead_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY team_members_select_policy ON public.team_members
        FOR SELECT TO authenticated USING (true)
    """)
    op.execute("""
        CREATE POLICY team_members_insert_policy ON public.team_members
        FOR INSERT WITH CHECK (
            user_id = auth.uid()
            OR EXISTS (SELECT 1 FROM public.teams t WHERE t.id = team_id AND t.lead_id = auth.uid())
        )
    """)
    op.execute("""
        CREATE POLICY team_members_delete_policy ON public.team_members
        FOR DELETE USING (
            user_id = auth.uid()
            OR EXISTS (SELECT 1 FROM public.teams t WHERE t.id = team_id AND t.lead_id = auth.uid())
        )
    """)

    # =========================================================================
    # 5. APPLICATIONS (applicant or project owner)
    # =========================================================================
    op.execute("""
        CREATE POLICY applications_select_policy ON public.applications
        FOR SELECT USING (
            user_id = auth.uid()
            OR EXISTS (SELECT 1 FROM public.projects p WHERE p.id = project_id AND p.created_by = auth.uid())
        )
    """)
    op.execute("""
        CREATE POLICY applications_insert_policy ON public.applications
        FOR INSERT WITH CHECK (user_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY applications_update_policy ON public.applications
        FOR UPDATE USING (
            EXISTS (SELECT 1 FROM public.projects p WHERE p.id = project_id AND p.created_by = auth.uid())
        )
    """)
    op.execute("""
        CREATE POLICY applications_delete_policy ON public.applications
        FOR DELETE USING (user_id = auth.uid())
    """)

    # =========================================================================
    # 6. MILESTONES, TASKS AND MESSAGES (participants)
    # =========================================================================
    for table in ("project_milestones", "project_tasks", "project_messages"):
        participant = IS_PROJECT_PARTICIPANT.format(project="project_id")
        op.execute(f"""
            CREATE POLICY {table}_select_policy ON public.{table}
            FOR SELECT USING ({participant})
        """)
        op.execute(f"""
            CREATE POLICY {table}_insert_policy ON public.{table}
            FOR INSERT WITH CHECK ({participant})
        """)
    member = IS_TEAM_MEMBER.format(team="team_id")
    op.execute(f"""
        CREATE POLICY team_messages_select_policy ON public.team_messages
        FOR SELECT USING ({member})
    """)
    op.execute(f"""
        CREATE POLICY team_messages_insert_policy ON public.team_messages
        FOR INSERT WITH CHECK (sender_id = auth.uid() AND {member})
    """)

    # =========================================================================
    # 7. NOTIFICATIONS (recipient only)
    # =========================================================================
    op.execute("""
        CREATE POLICY notifications_select_policy ON public.notifications
        FOR SELECT USING (user_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY notifications_update_policy ON public.notifications
        FOR UPDATE USING (user_id = auth.uid()) WITH CHECK (user_id = auth.uid())
    """)
    op.execute("""
        CREATE POLICY notifications_delete_policy ON public.notifications
        FOR DELETE USING (user_id = auth.uid())
    """)


def downgrade() -> None:
    policies = {
        "profiles": ("select", "insert", "update"),
        "user_verifications": ("select",),
        "projects": ("select", "insert", "update", "delete"),
        "teams": ("select", "insert", "update", "delete"),
        "team_members": ("select", "insert", "delete"),
        "applications": ("select", "insert", "update", "delete"),
        "project_milestones": ("select", "insert"),
        "project_tasks": ("select", "insert"),
        "project_messages": ("select", "insert"),
        "team_messages": ("select", "insert"),
        "notifications": ("select", "update", "delete"),
    }
    for table, actions in policies.items():
        for action in actions:
            op.execute(f"DROP POLICY IF EXISTS {table}_{action}_policy ON public.{table}")
    for table in TABLES:
        op.execute(f"ALTER TABLE public.{table} DISABLE ROW LEVEL SECURITY")
