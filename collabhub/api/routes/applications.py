"""
Application Routes

Teams apply to projects; project owners accept or reject.

The store sets any status it is given. This layer refuses to move an
application out of a terminal status.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from collabhub.api.dependencies import ContextDep, ensure_owner, require_permission
from collabhub.domain.context import ClientContext
from collabhub.domain.models import ApplicationStatus, Permission
from collabhub.infrastructure.db.models.application import ApplicationRead
from collabhub.infrastructure.exceptions import InvalidTransitionError, PermissionDeniedError


router = APIRouter()


class ApplyRequest(BaseModel):
    project_id: UUID
    team_id: UUID
    cover_letter: str = Field(..., min_length=1)


class StatusRequest(BaseModel):
    status: ApplicationStatus


@router.get("/applications", response_model=List[ApplicationRead])
async def list_applications(context: ContextDep, project_id: Optional[UUID] = None):
    """
    Applications visible to the caller.

    With `project_id`, all applications for a project the caller owns.
    Without it, the caller's own applications plus those received by the
    caller's projects.
    """
    store = context.projects
    if project_id is not None:
        context.authorization.require(Permission.VIEW_APPLICATIONS)
        project = await store.fetch_project(project_id)
        ensure_owner(context, project.created_by, "project")
        return await store.fetch_applications(project_id)

    await store.fetch_projects()
    owned = {p.id for p in store.get_user_projects()}
    applications = await store.fetch_applications()
    return [
        a for a in applications
        if a.user_id == context.principal_id or a.project_id in owned
    ]


@router.post("/applications", response_model=ApplicationRead, status_code=201)
async def apply_to_project(
    request: ApplyRequest,
    context: ClientContext = Depends(require_permission(Permission.SUBMIT_APPLICATION)),
):
    team = await context.projects.get_team(request.team_id)
    if not team.has_member(context.principal_id):
        raise PermissionDeniedError("You can only apply on behalf of a team you belong to")
    return await context.projects.apply_to_project(
        request.project_id, request.team_id, request.cover_letter
    )


@router.patch("/applications/{application_id}/status", response_model=ApplicationRead)
async def update_status(
    application_id: UUID,
    request: StatusRequest,
    context: ClientContext = Depends(require_permission(Permission.MANAGE_APPLICATIONS)),
):
    """Accept or reject a pending application for one of the caller's projects."""
    application = await context.projects.get_application(application_id)
    project = await context.projects.fetch_project(application.project_id)
    ensure_owner(context, project.created_by, "project")

    if not application.status.can_transition_to(request.status):
        raise InvalidTransitionError(application.status.value, request.status.value)
    return await context.projects.update_application_status(application_id, request.status)


@router.delete("/applications/{application_id}", status_code=204)
async def withdraw_application(application_id: UUID, context: ContextDep):
    application = await context.projects.get_application(application_id)
    ensure_owner(context, application.user_id, "application")
    await context.projects.withdraw_application(application_id)
