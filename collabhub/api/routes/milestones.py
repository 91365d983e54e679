"""
Milestone and Task Routes

Milestones are managed by the project owner. Tasks can be managed by
anyone taking part in the project: the owner, or a member of a team whose
application was accepted.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from collabhub.api.dependencies import ContextDep, ensure_owner, require_permission
from collabhub.domain.context import ClientContext
from collabhub.domain.models import Permission, Role, TaskStatus
from collabhub.infrastructure.db.models.project import (
    MilestoneCreate,
    MilestoneRead,
    MilestoneUpdate,
    TaskCreate,
    TaskRead,
    TaskUpdate,
)
from collabhub.infrastructure.exceptions import PermissionDeniedError


router = APIRouter()


class TaskStatusRequest(BaseModel):
    status: TaskStatus


async def _ensure_project_owner(context: ClientContext, project_id: UUID) -> None:
    project = await context.projects.fetch_project(project_id)
    ensure_owner(context, project.created_by, "project")


async def _ensure_participant(context: ClientContext, project_id: UUID) -> None:
    if context.authorization.role == Role.PLATFORM_ADMIN:
        return
    projects = await context.projects.get_message_projects()
    if not any(p.id == project_id for p in projects):
        raise PermissionDeniedError("You are not taking part in this project")


# ============================================================================
# Milestones
# ============================================================================

@router.post("/projects/{project_id}/milestones", response_model=MilestoneRead, status_code=201)
async def add_milestone(
    project_id: UUID,
    request: MilestoneCreate,
    context: ClientContext = Depends(require_permission(Permission.EDIT_PROJECT)),
):
    await _ensure_project_owner(context, project_id)
    return await context.projects.add_milestone(project_id, request)


@router.patch("/milestones/{milestone_id}", response_model=MilestoneRead)
async def update_milestone(
    milestone_id: UUID,
    request: MilestoneUpdate,
    context: ClientContext = Depends(require_permission(Permission.EDIT_PROJECT)),
):
    milestone = await context.projects.get_milestone(milestone_id)
    await _ensure_project_owner(context, milestone.project_id)
    return await context.projects.update_milestone(milestone_id, request)


@router.delete("/milestones/{milestone_id}", status_code=204)
async def delete_milestone(
    milestone_id: UUID,
    context: ClientContext = Depends(require_permission(Permission.EDIT_PROJECT)),
):
    milestone = await context.projects.get_milestone(milestone_id)
    await _ensure_project_owner(context, milestone.project_id)
    await context.projects.delete_milestone(milestone_id)


# ============================================================================
# Tasks
# ============================================================================

@router.post("/projects/{project_id}/tasks", response_model=TaskRead, status_code=201)
async def add_task(project_id: UUID, request: TaskCreate, context: ContextDep):
    await _ensure_participant(context, project_id)
    return await context.projects.add_task(project_id, request, request.milestone_id)


@router.patch("/tasks/{task_id}", response_model=TaskRead)
async def update_task(task_id: UUID, request: TaskUpdate, context: ContextDep):
    task = await context.projects.get_task(task_id)
    await _ensure_participant(context, task.project_id)
    return await context.projects.update_task(task_id, request)


@router.patch("/tasks/{task_id}/status", response_model=TaskRead)
async def update_task_status(task_id: UUID, request: TaskStatusRequest, context: ContextDep):
    task = await context.projects.get_task(task_id)
    await _ensure_participant(context, task.project_id)
    return await context.projects.update_task_status(task_id, request.status)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(task_id: UUID, context: ContextDep):
    task = await context.projects.get_task(task_id)
    await _ensure_participant(context, task.project_id)
    await context.projects.delete_task(task_id)
