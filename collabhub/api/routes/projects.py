"""
Project Routes

Project listing, posting, editing and deletion, plus templates and files.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, UploadFile
from pydantic import BaseModel

from collabhub.api.dependencies import ContextDep, ensure_owner, require_permission
from collabhub.domain.context import ClientContext
from collabhub.domain.models import Permission
from collabhub.domain.progress import (
    is_project_overdue,
    milestone_progress,
    project_progress,
    remaining_days,
)
from collabhub.domain.validation import (
    CATEGORIES,
    PAYMENT_MODELS,
    PROJECT_TEMPLATES,
    CatalogOption,
    ProjectTemplate,
)
from collabhub.infrastructure.db.models.project import ProjectRead, ProjectUpdate
from collabhub.infrastructure.services.storage_service import StorageService


router = APIRouter()


class ProjectCatalog(BaseModel):
    templates: List[ProjectTemplate]
    categories: List[CatalogOption]
    payment_models: List[CatalogOption]


class ProjectProgress(BaseModel):
    progress: int
    remaining_days: int
    overdue: bool
    milestones: Dict[str, int]


class ProjectDetail(BaseModel):
    project: ProjectRead
    progress: ProjectProgress


class FileUploadResponse(BaseModel):
    url: str


@router.get("/projects", response_model=List[ProjectRead])
async def list_projects(context: ContextDep):
    return await context.projects.fetch_projects()


@router.get("/projects/mine", response_model=List[ProjectRead])
async def list_my_projects(context: ContextDep):
    """Projects posted by the current principal."""
    await context.projects.fetch_projects()
    return context.projects.get_user_projects()


@router.get("/projects/templates", response_model=ProjectCatalog)
async def get_templates():
    return ProjectCatalog(
        templates=PROJECT_TEMPLATES,
        categories=CATEGORIES,
        payment_models=PAYMENT_MODELS,
    )


@router.get("/projects/{project_id}", response_model=ProjectDetail)
async def get_project(project_id: UUID, context: ContextDep):
    """One project with milestones, tasks and progress."""
    project = await context.projects.fetch_project(project_id)
    return ProjectDetail(
        project=project,
        progress=ProjectProgress(
            progress=project_progress(project.milestones),
            remaining_days=remaining_days(project.end_date),
            overdue=is_project_overdue(project),
            milestones={str(m.id): milestone_progress(m.tasks) for m in project.milestones},
        ),
    )


@router.post("/projects", response_model=ProjectRead, status_code=201)
async def create_project(
    payload: Dict[str, Any] = Body(...),
    context: ClientContext = Depends(require_permission(Permission.CREATE_PROJECT)),
):
    """
    Post a project.

    The body is the project form; an optional `milestones` list is created
    right after the project. Form errors come back as 400 with per-field
    messages.
    """
    form = dict(payload)
    milestones: Optional[List[Dict[str, Any]]] = form.pop("milestones", None)
    return await context.projects.create_project(form, milestones=milestones)


@router.patch("/projects/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: UUID,
    request: ProjectUpdate,
    context: ClientContext = Depends(require_permission(Permission.EDIT_PROJECT)),
):
    project = await context.projects.fetch_project(project_id)
    ensure_owner(context, project.created_by, "project")
    return await context.projects.update_project(project_id, request)


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project(
    project_id: UUID,
    context: ClientContext = Depends(require_permission(Permission.DELETE_PROJECT)),
):
    project = await context.projects.fetch_project(project_id)
    ensure_owner(context, project.created_by, "project")
    await context.projects.delete_project(project_id)


@router.post("/projects/{project_id}/files", response_model=FileUploadResponse, status_code=201)
async def upload_project_file(
    project_id: UUID,
    file: UploadFile = File(...),
    context: ClientContext = Depends(require_permission(Permission.EDIT_PROJECT)),
):
    project = await context.projects.fetch_project(project_id)
    ensure_owner(context, project.created_by, "project")
    url = await StorageService(context.client).upload_project_file(
        project_id, file.filename or "file", await file.read(), file.content_type
    )
    return FileUploadResponse(url=url)
