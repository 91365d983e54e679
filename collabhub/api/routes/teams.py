"""
Team Routes

Team formation and membership.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from collabhub.api.dependencies import ContextDep, ensure_owner, require_permission
from collabhub.domain.context import ClientContext
from collabhub.domain.models import Permission
from collabhub.infrastructure.db.models.team import (
    TeamCreate,
    TeamMemberRead,
    TeamRead,
    TeamUpdate,
)


router = APIRouter()


class AddMemberRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)


def _ensure_team_manager(context: ClientContext, team: TeamRead) -> None:
    """Team leads manage their own team; holders of the permission manage any."""
    if context.authorization.has_permission(Permission.MANAGE_TEAM_MEMBERS):
        return
    ensure_owner(context, team.lead_id, "team")


@router.get("/teams", response_model=List[TeamRead])
async def list_teams(context: ContextDep):
    return await context.projects.fetch_teams()


@router.get("/teams/mine", response_model=List[TeamRead])
async def list_my_teams(context: ContextDep):
    return await context.projects.fetch_user_teams()


@router.get("/teams/{team_id}", response_model=TeamRead)
async def get_team(team_id: UUID, context: ContextDep):
    return await context.projects.get_team(team_id)


@router.post("/teams", response_model=TeamRead, status_code=201)
async def create_team(
    request: TeamCreate,
    context: ClientContext = Depends(require_permission(Permission.CREATE_TEAM)),
):
    return await context.projects.create_team(request)


@router.patch("/teams/{team_id}", response_model=TeamRead)
async def update_team(
    team_id: UUID,
    request: TeamUpdate,
    context: ClientContext = Depends(require_permission(Permission.EDIT_TEAM)),
):
    team = await context.projects.get_team(team_id)
    ensure_owner(context, team.lead_id, "team")
    return await context.projects.update_team(team_id, request)


@router.delete("/teams/{team_id}", status_code=204)
async def delete_team(team_id: UUID, context: ContextDep):
    """Leads delete their own team; holders of delete_team delete any."""
    team = await context.projects.get_team(team_id)
    if not context.authorization.has_permission(Permission.DELETE_TEAM):
        ensure_owner(context, team.lead_id, "team")
    await context.projects.delete_team(team_id)


@router.post("/teams/{team_id}/join", response_model=TeamMemberRead, status_code=201)
async def join_team(
    team_id: UUID,
    context: ClientContext = Depends(require_permission(Permission.JOIN_TEAM)),
):
    await context.projects.get_team(team_id)
    return await context.projects.join_team(team_id)


@router.post("/teams/{team_id}/leave", status_code=204)
async def leave_team(
    team_id: UUID,
    context: ClientContext = Depends(require_permission(Permission.LEAVE_TEAM)),
):
    await context.projects.leave_team(team_id)


@router.post("/teams/{team_id}/members", response_model=TeamMemberRead, status_code=201)
async def add_member(team_id: UUID, request: AddMemberRequest, context: ContextDep):
    """Invite a user by email; they join as a pending member."""
    team = await context.projects.get_team(team_id)
    _ensure_team_manager(context, team)
    return await context.projects.add_team_member(team_id, request.email)


@router.delete("/teams/{team_id}/members/{member_id}", status_code=204)
async def remove_member(team_id: UUID, member_id: UUID, context: ContextDep):
    team = await context.projects.get_team(team_id)
    _ensure_team_manager(context, team)
    await context.projects.remove_team_member(team_id, member_id)
