"""
Message Routes

Project threads are open to the owner and accepted teams; team threads to
team members.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from collabhub.api.dependencies import ContextDep
from collabhub.domain.context import ClientContext
from collabhub.domain.models import Role
from collabhub.infrastructure.db.models.message import MessageRead
from collabhub.infrastructure.db.models.project import ProjectRead
from collabhub.infrastructure.exceptions import PermissionDeniedError
from collabhub.infrastructure.services.message_service import MAX_LENGTH, MessageService


router = APIRouter()


class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=MAX_LENGTH)


async def _ensure_project_thread(context: ClientContext, project_id: UUID) -> None:
    if context.authorization.role == Role.PLATFORM_ADMIN:
        return
    projects = await context.projects.get_message_projects()
    if not any(p.id == project_id for p in projects):
        raise PermissionDeniedError("You are not part of this project's conversation")


async def _ensure_team_thread(context: ClientContext, team_id: UUID) -> None:
    if context.authorization.role == Role.PLATFORM_ADMIN:
        return
    team = await context.projects.get_team(team_id)
    if not team.has_member(context.principal_id):
        raise PermissionDeniedError("You are not a member of this team")


@router.get("/messages/projects", response_model=List[ProjectRead])
async def list_message_projects(context: ContextDep):
    """Projects whose conversation the caller can join."""
    return await context.projects.get_message_projects()


@router.get("/messages/projects/{project_id}", response_model=List[MessageRead])
async def get_project_messages(project_id: UUID, context: ContextDep):
    await _ensure_project_thread(context, project_id)
    return await MessageService(context.client).get_project_messages(project_id)


@router.post("/messages/projects/{project_id}", response_model=MessageRead, status_code=201)
async def send_project_message(project_id: UUID, request: SendMessageRequest, context: ContextDep):
    await _ensure_project_thread(context, project_id)
    return await MessageService(context.client).send_project_message(
        project_id, context.principal_id, request.content
    )


@router.get("/messages/teams/{team_id}", response_model=List[MessageRead])
async def get_team_messages(team_id: UUID, context: ContextDep):
    await _ensure_team_thread(context, team_id)
    return await MessageService(context.client).get_team_messages(team_id)


@router.post("/messages/teams/{team_id}", response_model=MessageRead, status_code=201)
async def send_team_message(team_id: UUID, request: SendMessageRequest, context: ContextDep):
    await _ensure_team_thread(context, team_id)
    return await MessageService(context.client).send_team_message(
        team_id, context.principal_id, request.content
    )
