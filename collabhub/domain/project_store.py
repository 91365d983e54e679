"""
Project Store

Cached projects, teams and applications for one principal, with CRUD for
projects, teams, applications, milestones and tasks.

Cache rules:
- fetch-all operations replace a collection wholesale
- create operations append the server-confirmed row
- update operations merge the server-confirmed row into the cached record
- delete operations filter the record out

Every operation sets `loading` while it runs. A failure sets `error`, emits
an error notice and raises; nothing is retried.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Sequence, Set, Type, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel, ValidationError as PydanticValidationError
from supabase import Client

from collabhub.domain.identity import IdentityStore
from collabhub.domain.models import ApplicationStatus, TaskStatus, TeamMemberRole, TeamMemberStatus
from collabhub.domain.notifier import Notifier
from collabhub.domain.validation import validate_project
from collabhub.infrastructure.db.models.application import ApplicationRead
from collabhub.infrastructure.db.models.base import utcnow
from collabhub.infrastructure.db.models.project import (
    MilestoneCreate,
    MilestoneRead,
    MilestoneUpdate,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
    TaskCreate,
    TaskRead,
    TaskUpdate,
)
from collabhub.infrastructure.db.models.team import (
    TeamCreate,
    TeamMemberRead,
    TeamRead,
    TeamUpdate,
)
from collabhub.infrastructure.exceptions import (
    AuthenticationRequiredError,
    CollabHubError,
    DatabaseError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from collabhub.infrastructure.services.notification_service import NotificationService


logger = logging.getLogger(__name__)

PROJECTS = "projects"
MILESTONES = "project_milestones"
TASKS = "project_tasks"
TEAMS = "teams"
TEAM_MEMBERS = "team_members"
APPLICATIONS = "applications"
PROFILES = "profiles"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: Type[ModelT], data: Union[ModelT, Dict[str, Any]]) -> ModelT:
    """Validate request data into `model`, raising the domain ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {model.__name__} data",
            details={"errors": e.errors(include_url=False, include_context=False)},
            original_error=e,
        )


def _merge(items: List[ModelT], row: Dict[str, Any], model: Type[ModelT]) -> ModelT:
    """Merge a server row into the cached record with the same id."""
    for index, item in enumerate(items):
        if str(getattr(item, "id")) == str(row.get("id")):
            merged = model.model_validate({**item.model_dump(), **row})
            items[index] = merged
            return merged
    return model.model_validate(row)


def _first(result: Any, operation: str, table: str, missing: str) -> Dict[str, Any]:
    if not result.data:
        raise NotFoundError(missing, operation=operation, table=table)
    return result.data[0]


class ProjectStore:
    """Domain data store for one principal."""

    def __init__(
        self,
        client: Client,
        identity: IdentityStore,
        notifier: Notifier,
        notifications: Optional[NotificationService] = None,
    ):
        self._client = client
        self._identity = identity
        self._notifier = notifier
        self._notifications = notifications or NotificationService(client)

        self.projects: List[ProjectRead] = []
        self.teams: List[TeamRead] = []
        self.applications: List[ApplicationRead] = []
        self.loading: bool = False
        self.error: Optional[str] = None

    @asynccontextmanager
    async def _operation(self, description: str, operation: str, table: str):
        self.loading = True
        self.error = None
        try:
            yield
        except CollabHubError as e:
            self.error = e.message
            self._notifier.error(e.message)
            logger.error(f"Error {description}: {e.message}")
            raise
        except Exception as e:
            self.error = str(e) or f"Error {description}"
            self._notifier.error(self.error)
            logger.error(f"Error {description}: {e}")
            raise DatabaseError(
                f"Error {description}: {str(e)}",
                operation=operation,
                table=table,
                original_error=e,
            )
        finally:
            self.loading = False

    def _require_user(self, action: str) -> UUID:
        user_id = self._identity.user_id
        if user_id is None:
            raise AuthenticationRequiredError(f"You must be signed in to {action}")
        return user_id

    def _table(self, name: str):
        return self._client.table(name)

    # =========================================================================
    # Projects
    # =========================================================================

    async def fetch_projects(self) -> List[ProjectRead]:
        async with self._operation("fetching projects", "select", PROJECTS):
            result = self._table(PROJECTS).select("*").order("created_at", desc=True).execute()
            self.projects = [ProjectRead.model_validate(row) for row in result.data or []]
        return self.projects

    async def fetch_project(self, project_id: UUID) -> ProjectRead:
        """Fetch one project with its milestones and tasks."""
        async with self._operation("fetching project", "select", PROJECTS):
            result = self._table(PROJECTS).select("*").eq(
                "id", str(project_id)
            ).maybe_single().execute()
            data = result.data if result else None
            if not data:
                raise NotFoundError(
                    f"Project {project_id} not found", operation="select", table=PROJECTS
                )

            milestones = self._table(MILESTONES).select("*").eq(
                "project_id", str(project_id)
            ).order("created_at").execute()
            tasks = self._table(TASKS).select("*").eq(
                "project_id", str(project_id)
            ).order("created_at").execute()

            task_rows = [TaskRead.model_validate(row) for row in tasks.data or []]
            milestone_rows = [
                MilestoneRead.model_validate({
                    **row,
                    "tasks": [t for t in task_rows if str(t.milestone_id) == str(row["id"])],
                })
                for row in milestones.data or []
            ]
            project = ProjectRead.model_validate(
                {**data, "milestones": milestone_rows, "tasks": task_rows}
            )

            for index, cached in enumerate(self.projects):
                if cached.id == project.id:
                    self.projects[index] = project
                    break
        return project

    async def create_project(
        self,
        data: Union[ProjectCreate, Dict[str, Any]],
        milestones: Optional[Sequence[Union[MilestoneCreate, Dict[str, Any]]]] = None,
    ) -> ProjectRead:
        """
        Validate and insert a project, then any initial milestones.

        The server assigns id, status and timestamps. A milestone failure
        leaves the project in place.
        """
        async with self._operation("creating project", "insert", PROJECTS):
            user_id = self._require_user("create a project")

            form = data.model_dump() if isinstance(data, ProjectCreate) else dict(data)
            validation = validate_project(form)
            if not validation.is_valid:
                raise ValidationError(
                    "Please fix the errors in the project form",
                    details={"errors": validation.errors},
                )
            project_data = _parse(ProjectCreate, data)

            payload = project_data.model_dump(mode="json")
            payload["created_by"] = str(user_id)
            result = self._table(PROJECTS).insert(payload).execute()
            project = ProjectRead.model_validate(
                _first(result, "insert", PROJECTS, "Project creation failed")
            )
            self.projects.append(project)

            if milestones:
                rows = []
                for milestone in milestones:
                    row = _parse(MilestoneCreate, milestone).model_dump(mode="json")
                    row["project_id"] = str(project.id)
                    rows.append(row)
                created = self._table(MILESTONES).insert(rows).execute()
                project.milestones.extend(
                    MilestoneRead.model_validate(row) for row in created.data or []
                )

        self._notifier.success("Project created successfully!")
        return project

    async def update_project(
        self, project_id: UUID, data: Union[ProjectUpdate, Dict[str, Any]]
    ) -> ProjectRead:
        async with self._operation("updating project", "update", PROJECTS):
            payload = _parse(ProjectUpdate, data).model_dump(mode="json", exclude_unset=True)
            payload["updated_at"] = utcnow().isoformat()
            result = self._table(PROJECTS).update(payload).eq("id", str(project_id)).execute()
            row = _first(result, "update", PROJECTS, f"Project {project_id} not found")
            project = _merge(self.projects, row, ProjectRead)
        self._notifier.success("Project updated successfully!")
        return project

    async def delete_project(self, project_id: UUID) -> None:
        async with self._operation("deleting project", "delete", PROJECTS):
            self._table(PROJECTS).delete().eq("id", str(project_id)).execute()
            self.projects = [p for p in self.projects if p.id != project_id]
        self._notifier.success("Project deleted successfully!")

    def get_user_projects(self) -> List[ProjectRead]:
        """Cached projects created by the current principal."""
        user_id = self._identity.user_id
        if user_id is None:
            return []
        return [p for p in self.projects if p.created_by == user_id]

    async def get_message_projects(self) -> List[ProjectRead]:
        """Projects the principal owns or has an accepted application for."""
        async with self._operation("fetching message projects", "select", PROJECTS):
            user_id = self._require_user("view messages")

            owned = self._table(PROJECTS).select("*").eq("created_by", str(user_id)).execute()
            memberships = self._table(TEAM_MEMBERS).select("team_id").eq(
                "user_id", str(user_id)
            ).eq("status", TeamMemberStatus.ACTIVE.value).execute()
            team_ids = {str(row["team_id"]) for row in memberships.data or []}

            accepted = self._table(APPLICATIONS).select("*").eq(
                "status", ApplicationStatus.ACCEPTED.value
            ).execute()
            project_ids = {
                str(row["project_id"])
                for row in accepted.data or []
                if str(row["user_id"]) == str(user_id) or str(row["team_id"]) in team_ids
            }

            projects = {str(row["id"]): row for row in owned.data or []}
            missing = sorted(project_ids - projects.keys())
            if missing:
                joined = self._table(PROJECTS).select("*").in_("id", missing).execute()
                projects.update({str(row["id"]): row for row in joined.data or []})

        return [ProjectRead.model_validate(row) for row in projects.values()]

    async def get_project_participants(self, project_id: UUID) -> Set[UUID]:
        """The owner plus active members of teams accepted onto the project."""
        async with self._operation("fetching project participants", "select", APPLICATIONS):
            project = self._table(PROJECTS).select("created_by").eq(
                "id", str(project_id)
            ).maybe_single().execute()
            data = project.data if project else None
            if not data:
                raise NotFoundError(
                    f"Project {project_id} not found", operation="select", table=PROJECTS
                )
            participants = {UUID(str(data["created_by"]))}

            accepted = self._table(APPLICATIONS).select("team_id").eq(
                "project_id", str(project_id)
            ).eq("status", ApplicationStatus.ACCEPTED.value).execute()
            team_ids = sorted({str(row["team_id"]) for row in accepted.data or []})
            if team_ids:
                members = self._table(TEAM_MEMBERS).select("user_id").in_(
                    "team_id", team_ids
                ).eq("status", TeamMemberStatus.ACTIVE.value).execute()
                participants.update(UUID(str(row["user_id"])) for row in members.data or [])
        return participants

    # =========================================================================
    # Milestones and tasks
    # =========================================================================

    def _cached_project(self, project_id: Any) -> Optional[ProjectRead]:
        for project in self.projects:
            if str(project.id) == str(project_id):
                return project
        return None

    async def add_milestone(
        self, project_id: UUID, data: Union[MilestoneCreate, Dict[str, Any]]
    ) -> MilestoneRead:
        async with self._operation("adding milestone", "insert", MILESTONES):
            payload = _parse(MilestoneCreate, data).model_dump(mode="json")
            payload["project_id"] = str(project_id)
            result = self._table(MILESTONES).insert(payload).execute()
            milestone = MilestoneRead.model_validate(
                _first(result, "insert", MILESTONES, "Milestone creation failed")
            )
            project = self._cached_project(project_id)
            if project is not None:
                project.milestones.append(milestone)
        self._notifier.success("Milestone added successfully!")
        return milestone

    async def update_milestone(
        self, milestone_id: UUID, data: Union[MilestoneUpdate, Dict[str, Any]]
    ) -> MilestoneRead:
        async with self._operation("updating milestone", "update", MILESTONES):
            payload = _parse(MilestoneUpdate, data).model_dump(mode="json", exclude_unset=True)
            payload["updated_at"] = utcnow().isoformat()
            result = self._table(MILESTONES).update(payload).eq("id", str(milestone_id)).execute()
            row = _first(result, "update", MILESTONES, f"Milestone {milestone_id} not found")
            project = self._cached_project(row.get("project_id"))
            if project is not None:
                milestone = _merge(project.milestones, row, MilestoneRead)
            else:
                milestone = MilestoneRead.model_validate(row)
        self._notifier.success("Milestone updated successfully!")
        return milestone

    async def _get_row(self, table: str, row_id: UUID, what: str) -> Dict[str, Any]:
        async with self._operation(f"fetching {what}", "select", table):
            result = self._table(table).select("*").eq("id", str(row_id)).maybe_single().execute()
            data = result.data if result else None
            if not data:
                raise NotFoundError(
                    f"{what.capitalize()} {row_id} not found", operation="select", table=table
                )
        return data

    async def get_milestone(self, milestone_id: UUID) -> MilestoneRead:
        return MilestoneRead.model_validate(await self._get_row(MILESTONES, milestone_id, "milestone"))

    async def get_task(self, task_id: UUID) -> TaskRead:
        return TaskRead.model_validate(await self._get_row(TASKS, task_id, "task"))

    async def delete_milestone(self, milestone_id: UUID) -> None:
        async with self._operation("deleting milestone", "delete", MILESTONES):
            self._table(MILESTONES).delete().eq("id", str(milestone_id)).execute()
            for project in self.projects:
                project.milestones = [m for m in project.milestones if m.id != milestone_id]
        self._notifier.success("Milestone deleted successfully!")

    async def add_task(
        self,
        project_id: UUID,
        data: Union[TaskCreate, Dict[str, Any]],
        milestone_id: Optional[UUID] = None,
    ) -> TaskRead:
        async with self._operation("adding task", "insert", TASKS):
            task_data = _parse(TaskCreate, data)
            payload = task_data.model_dump(mode="json")
            payload["project_id"] = str(project_id)
            if milestone_id is not None:
                payload["milestone_id"] = str(milestone_id)
            if self._identity.user_id is not None:
                payload["created_by"] = str(self._identity.user_id)

            result = self._table(TASKS).insert(payload).execute()
            task = TaskRead.model_validate(_first(result, "insert", TASKS, "Task creation failed"))

            project = self._cached_project(project_id)
            if project is not None:
                project.tasks.append(task)
                for milestone in project.milestones:
                    if task.milestone_id is not None and milestone.id == task.milestone_id:
                        milestone.tasks.append(task)
        self._notifier.success("Task added successfully!")
        return task

    async def update_task(
        self, task_id: UUID, data: Union[TaskUpdate, Dict[str, Any]]
    ) -> TaskRead:
        async with self._operation("updating task", "update", TASKS):
            payload = _parse(TaskUpdate, data).model_dump(mode="json", exclude_unset=True)
            payload["updated_at"] = utcnow().isoformat()
            result = self._table(TASKS).update(payload).eq("id", str(task_id)).execute()
            row = _first(result, "update", TASKS, f"Task {task_id} not found")

            task = TaskRead.model_validate(row)
            for project in self.projects:
                if any(t.id == task_id for t in project.tasks):
                    task = _merge(project.tasks, row, TaskRead)
                for milestone in project.milestones:
                    if any(t.id == task_id for t in milestone.tasks):
                        _merge(milestone.tasks, row, TaskRead)
        self._notifier.success("Task updated successfully!")
        return task

    async def update_task_status(self, task_id: UUID, status: Union[TaskStatus, str]) -> TaskRead:
        return await self.update_task(task_id, {"status": status})

    async def delete_task(self, task_id: UUID) -> None:
        async with self._operation("deleting task", "delete", TASKS):
            self._table(TASKS).delete().eq("id", str(task_id)).execute()
            for project in self.projects:
                project.tasks = [t for t in project.tasks if t.id != task_id]
                for milestone in project.milestones:
                    milestone.tasks = [t for t in milestone.tasks if t.id != task_id]
        self._notifier.success("Task deleted successfully!")

    # =========================================================================
    # Teams
    # =========================================================================

    def _with_members(self, team_rows: List[Dict[str, Any]]) -> List[TeamRead]:
        """Attach members (and their names) to team rows with in-list queries."""
        if not team_rows:
            return []
        team_ids = [str(row["id"]) for row in team_rows]
        members = self._table(TEAM_MEMBERS).select("*").in_("team_id", team_ids).execute()
        member_rows = members.data or []

        names: Dict[str, str] = {}
        user_ids = sorted({str(row["user_id"]) for row in member_rows})
        if user_ids:
            profiles = self._table(PROFILES).select("id,name").in_("id", user_ids).execute()
            names = {str(row["id"]): row.get("name") or "" for row in profiles.data or []}

        teams = []
        for row in team_rows:
            team_members = [
                TeamMemberRead.model_validate({**m, "name": names.get(str(m["user_id"]), "")})
                for m in member_rows
                if str(m["team_id"]) == str(row["id"])
            ]
            teams.append(TeamRead.model_validate({**row, "members": team_members}))
        return teams

    def _cached_team(self, team_id: Any) -> Optional[TeamRead]:
        for team in self.teams:
            if str(team.id) == str(team_id):
                return team
        return None

    async def fetch_teams(self) -> List[TeamRead]:
        async with self._operation("fetching teams", "select", TEAMS):
            result = self._table(TEAMS).select("*").order("created_at", desc=True).execute()
            self.teams = self._with_members(result.data or [])
        return self.teams

    async def get_team(self, team_id: UUID) -> TeamRead:
        """One team with its members."""
        row = await self._get_row(TEAMS, team_id, "team")
        async with self._operation("fetching team members", "select", TEAM_MEMBERS):
            team = self._with_members([row])[0]
        return team

    async def fetch_user_teams(self) -> List[TeamRead]:
        """Teams the current principal belongs to."""
        async with self._operation("fetching your teams", "select", TEAMS):
            user_id = self._require_user("view your teams")
            memberships = self._table(TEAM_MEMBERS).select("team_id").eq(
                "user_id", str(user_id)
            ).execute()
            team_ids = sorted({str(row["team_id"]) for row in memberships.data or []})
            if not team_ids:
                return []
            result = self._table(TEAMS).select("*").in_("id", team_ids).execute()
            teams = self._with_members(result.data or [])
        return teams

    async def create_team(self, data: Union[TeamCreate, Dict[str, Any]]) -> TeamRead:
        """Create a team led by the current principal."""
        async with self._operation("creating team", "insert", TEAMS):
            user_id = self._require_user("create a team")
            payload = _parse(TeamCreate, data).model_dump(mode="json")
            payload["lead_id"] = str(user_id)

            result = self._table(TEAMS).insert(payload).execute()
            row = _first(result, "insert", TEAMS, "Team creation failed")

            member = self._table(TEAM_MEMBERS).insert({
                "team_id": str(row["id"]),
                "user_id": str(user_id),
                "role": TeamMemberRole.LEAD.value,
                "status": TeamMemberStatus.ACTIVE.value,
            }).execute()
            lead_name = self._identity.profile.name if self._identity.profile else ""
            members = [
                TeamMemberRead.model_validate({**m, "name": lead_name})
                for m in member.data or []
            ]
            team = TeamRead.model_validate({**row, "members": members})
            self.teams.append(team)
        self._notifier.success("Team created successfully!")
        return team

    async def update_team(
        self, team_id: UUID, data: Union[TeamUpdate, Dict[str, Any]]
    ) -> TeamRead:
        async with self._operation("updating team", "update", TEAMS):
            payload = _parse(TeamUpdate, data).model_dump(mode="json", exclude_unset=True)
            payload["updated_at"] = utcnow().isoformat()
            result = self._table(TEAMS).update(payload).eq("id", str(team_id)).execute()
            row = _first(result, "update", TEAMS, f"Team {team_id} not found")
            team = _merge(self.teams, row, TeamRead)
        self._notifier.success("Team updated successfully!")
        return team

    async def delete_team(self, team_id: UUID) -> None:
        async with self._operation("deleting team", "delete", TEAMS):
            self._table(TEAMS).delete().eq("id", str(team_id)).execute()
            self.teams = [t for t in self.teams if t.id != team_id]
        self._notifier.success("Team deleted successfully!")

    async def join_team(self, team_id: UUID) -> TeamMemberRead:
        """Join a team, or accept a pending invitation to it."""
        async with self._operation("joining team", "insert", TEAM_MEMBERS):
            user_id = self._require_user("join a team")
            existing = self._table(TEAM_MEMBERS).select("*").eq(
                "team_id", str(team_id)
            ).eq("user_id", str(user_id)).execute()
            row = existing.data[0] if existing.data else None
            if row is not None and row.get("status") != TeamMemberStatus.PENDING.value:
                raise DuplicateError(
                    "You are already a member of this team",
                    operation="insert",
                    table=TEAM_MEMBERS,
                )

            if row is not None:
                result = self._table(TEAM_MEMBERS).update(
                    {"status": TeamMemberStatus.ACTIVE.value}
                ).eq("id", str(row["id"])).execute()
                notice = "Team invitation accepted!"
            else:
                result = self._table(TEAM_MEMBERS).insert({
                    "team_id": str(team_id),
                    "user_id": str(user_id),
                    "role": TeamMemberRole.MEMBER.value,
                    "status": TeamMemberStatus.ACTIVE.value,
                }).execute()
                notice = "Joined team successfully!"
            name = self._identity.profile.name if self._identity.profile else ""
            member = TeamMemberRead.model_validate({
                **_first(result, "insert", TEAM_MEMBERS, "Could not join team"),
                "name": name,
            })
            team = self._cached_team(team_id)
            if team is not None:
                team.members = [m for m in team.members if m.user_id != user_id]
                team.members.append(member)
        self._notifier.success(notice)
        return member

    async def leave_team(self, team_id: UUID) -> None:
        async with self._operation("leaving team", "delete", TEAM_MEMBERS):
            user_id = self._require_user("leave a team")
            self._table(TEAM_MEMBERS).delete().eq(
                "team_id", str(team_id)
            ).eq("user_id", str(user_id)).execute()
            team = self._cached_team(team_id)
            if team is not None:
                team.members = [m for m in team.members if m.user_id != user_id]
        self._notifier.success("Left team successfully!")

    async def add_team_member(self, team_id: UUID, email: str) -> TeamMemberRead:
        """Invite a user by email as a pending member."""
        async with self._operation("adding team member", "insert", TEAM_MEMBERS):
            profile = self._table(PROFILES).select("id,name").eq(
                "email", email.strip()
            ).maybe_single().execute()
            data = profile.data if profile else None
            if not data:
                raise NotFoundError(
                    "User not found with that email", operation="select", table=PROFILES
                )

            result = self._table(TEAM_MEMBERS).insert({
                "team_id": str(team_id),
                "user_id": str(data["id"]),
                "role": TeamMemberRole.MEMBER.value,
                "status": TeamMemberStatus.PENDING.value,
            }).execute()
            member = TeamMemberRead.model_validate({
                **_first(result, "insert", TEAM_MEMBERS, "Could not add team member"),
                "name": data.get("name") or email.split("@")[0],
            })
            team = self._cached_team(team_id)
            if team is not None:
                team.members.append(member)
        self._notifier.success("Team member invited successfully!")
        return member

    async def remove_team_member(self, team_id: UUID, member_id: UUID) -> None:
        async with self._operation("removing team member", "delete", TEAM_MEMBERS):
            self._table(TEAM_MEMBERS).delete().eq("id", str(member_id)).eq(
                "team_id", str(team_id)
            ).execute()
            team = self._cached_team(team_id)
            if team is not None:
                team.members = [m for m in team.members if m.id != member_id]
        self._notifier.success("Team member removed successfully!")

    # =========================================================================
    # Applications
    # =========================================================================

    async def fetch_applications(self, project_id: Optional[UUID] = None) -> List[ApplicationRead]:
        async with self._operation("fetching applications", "select", APPLICATIONS):
            query = self._table(APPLICATIONS).select("*")
            if project_id is not None:
                query = query.eq("project_id", str(project_id))
            result = query.order("created_at", desc=True).execute()
            self.applications = [ApplicationRead.model_validate(row) for row in result.data or []]
        return self.applications

    async def get_application(self, application_id: UUID) -> ApplicationRead:
        async with self._operation("fetching application", "select", APPLICATIONS):
            result = self._table(APPLICATIONS).select("*").eq(
                "id", str(application_id)
            ).maybe_single().execute()
            data = result.data if result else None
            if not data:
                raise NotFoundError(
                    f"Application {application_id} not found",
                    operation="select",
                    table=APPLICATIONS,
                )
        return ApplicationRead.model_validate(data)

    async def _project_summary(self, project_id: Any) -> Optional[Dict[str, Any]]:
        cached = self._cached_project(project_id)
        if cached is not None:
            return {"title": cached.title, "created_by": cached.created_by}
        try:
            result = self._table(PROJECTS).select("id,title,created_by").eq(
                "id", str(project_id)
            ).maybe_single().execute()
        except Exception as e:
            logger.warning(f"Could not load project {project_id} for notification: {e}")
            return None
        return result.data if result else None

    async def apply_to_project(
        self, project_id: UUID, team_id: UUID, cover_letter: str
    ) -> ApplicationRead:
        """Submit a pending application on behalf of a team."""
        async with self._operation("applying to project", "insert", APPLICATIONS):
            user_id = self._require_user("apply to a project")
            if not cover_letter or not cover_letter.strip():
                raise ValidationError(
                    "A cover letter is required",
                    details={"errors": {"cover_letter": "Cover letter is required"}},
                )

            result = self._table(APPLICATIONS).insert({
                "project_id": str(project_id),
                "team_id": str(team_id),
                "user_id": str(user_id),
                "cover_letter": cover_letter,
                "status": ApplicationStatus.PENDING.value,
            }).execute()
            application = ApplicationRead.model_validate(
                _first(result, "insert", APPLICATIONS, "Application submission failed")
            )
            self.applications.append(application)

        self._notifier.success("Application submitted successfully!")
        project = await self._project_summary(project_id)
        if project:
            await self._notifications.notify_application_received(
                project["created_by"], project["title"]
            )
        return application

    async def update_application_status(
        self, application_id: UUID, status: Union[ApplicationStatus, str]
    ) -> ApplicationRead:
        """
        Set an application's status.

        Project status is never touched; accepting an application leaves
        the project open.
        """
        async with self._operation("updating application status", "update", APPLICATIONS):
            try:
                new_status = ApplicationStatus(status)
            except ValueError:
                raise ValidationError(
                    f"Invalid application status: {status}",
                    details={"status": str(status)},
                )
            result = self._table(APPLICATIONS).update({
                "status": new_status.value,
                "updated_at": utcnow().isoformat(),
            }).eq("id", str(application_id)).execute()
            row = _first(result, "update", APPLICATIONS, f"Application {application_id} not found")
            application = _merge(self.applications, row, ApplicationRead)

        self._notifier.success("Application status updated successfully!")
        project = await self._project_summary(application.project_id)
        if project:
            await self._notifications.notify_application_status(
                application.user_id, project["title"], new_status
            )
        return application

    async def withdraw_application(self, application_id: UUID) -> None:
        async with self._operation("withdrawing application", "delete", APPLICATIONS):
            user_id = self._require_user("withdraw an application")
            self._table(APPLICATIONS).delete().eq("id", str(application_id)).eq(
                "user_id", str(user_id)
            ).execute()
            self.applications = [a for a in self.applications if a.id != application_id]
        self._notifier.success("Application withdrawn")

    def snapshot(self) -> Dict[str, Any]:
        return {"loading": self.loading, "error": self.error}
