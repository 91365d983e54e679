"""
Project SQLModels for CollabHub

Projects are posted by startups. Milestones and tasks hang off a project;
a task may optionally belong to a milestone.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import field_validator
from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import ARRAY
from sqlmodel import Field, SQLModel

from collabhub.domain.models import (
    MilestoneStatus,
    PaymentModel,
    ProjectCategory,
    ProjectStatus,
    TaskStatus,
    normalize_string_list,
)
from collabhub.infrastructure.db.models.base import ReadModel, TimestampMixin, UUIDMixin


def coerce_task_status(value: Any) -> Any:
    """Map legacy task statuses onto the canonical enumeration."""
    if isinstance(value, str):
        return TaskStatus(value)
    return value


# =============================================================================
# Project
# =============================================================================

class ProjectBase(SQLModel):
    title: str = Field(..., max_length=200)
    description: str
    category: ProjectCategory
    required_skills: List[str] = Field(
        default_factory=list, sa_column=Column(ARRAY(String))
    )
    start_date: date
    end_date: date
    team_size: int = Field(..., ge=1)
    payment_model: PaymentModel
    stipend_amount: Optional[Decimal] = Field(default=None, ge=0)
    deliverables: List[str] = Field(
        default_factory=list, sa_column=Column(ARRAY(String))
    )


class Project(UUIDMixin, TimestampMixin, ProjectBase, table=True):
    __tablename__ = "projects"

    status: ProjectStatus = Field(default=ProjectStatus.OPEN)
    created_by: UUID = Field(..., foreign_key="profiles.id", index=True)
    selected_team: Optional[UUID] = Field(default=None, foreign_key="teams.id")


class ProjectCreate(ProjectBase):
    """Payload for posting a project. Status is left to the server default."""

    @field_validator("required_skills", "deliverables", mode="before")
    @classmethod
    def normalize_lists(cls, v: Any) -> List[str]:
        return normalize_string_list(v) or []


class ProjectUpdate(SQLModel):
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    category: Optional[ProjectCategory] = None
    required_skills: Optional[List[str]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    team_size: Optional[int] = Field(default=None, ge=1)
    payment_model: Optional[PaymentModel] = None
    stipend_amount: Optional[Decimal] = Field(default=None, ge=0)
    deliverables: Optional[List[str]] = None
    status: Optional[ProjectStatus] = None
    selected_team: Optional[UUID] = None

    @field_validator("required_skills", "deliverables", mode="before")
    @classmethod
    def normalize_lists(cls, v: Any) -> Optional[List[str]]:
        return normalize_string_list(v)


# =============================================================================
# Milestones and tasks
# =============================================================================

class MilestoneBase(SQLModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = None
    due_date: Optional[date] = None
    status: MilestoneStatus = MilestoneStatus.NOT_STARTED
    assigned_team_id: Optional[UUID] = None


class ProjectMilestone(UUIDMixin, TimestampMixin, MilestoneBase, table=True):
    __tablename__ = "project_milestones"

    project_id: UUID = Field(..., foreign_key="projects.id", index=True)


class MilestoneCreate(MilestoneBase):
    pass


class MilestoneUpdate(SQLModel):
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    due_date: Optional[date] = None
    status: Optional[MilestoneStatus] = None
    assigned_team_id: Optional[UUID] = None


class TaskBase(SQLModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[date] = None
    assigned_to: Optional[UUID] = None

    @field_validator("status", mode="before")
    @classmethod
    def canonical_status(cls, v: Any) -> Any:
        return coerce_task_status(v)


class ProjectTask(UUIDMixin, TimestampMixin, TaskBase, table=True):
    __tablename__ = "project_tasks"

    project_id: UUID = Field(..., foreign_key="projects.id", index=True)
    milestone_id: Optional[UUID] = Field(default=None, foreign_key="project_milestones.id")
    created_by: Optional[UUID] = Field(default=None, foreign_key="profiles.id")


class TaskCreate(TaskBase):
    milestone_id: Optional[UUID] = None


class TaskUpdate(SQLModel):
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    assigned_to: Optional[UUID] = None
    milestone_id: Optional[UUID] = None

    @field_validator("status", mode="before")
    @classmethod
    def canonical_status(cls, v: Any) -> Any:
        return coerce_task_status(v)


class TaskRead(TaskBase, ReadModel):
    id: UUID
    project_id: UUID
    milestone_id: Optional[UUID] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MilestoneRead(MilestoneBase, ReadModel):
    id: UUID
    project_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tasks: List[TaskRead] = Field(default_factory=list)


class ProjectRead(ProjectBase, ReadModel):
    id: UUID
    status: ProjectStatus
    created_by: UUID
    selected_team: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    milestones: List[MilestoneRead] = Field(default_factory=list)
    tasks: List[TaskRead] = Field(default_factory=list)

    @field_validator("required_skills", "deliverables", mode="before")
    @classmethod
    def default_lists(cls, v: Any) -> List[str]:
        return normalize_string_list(v) or []
