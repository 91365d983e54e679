"""
Application SQLModel for CollabHub

An application links a student team to a project.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from collabhub.domain.models import ApplicationStatus
from collabhub.infrastructure.db.models.base import ReadModel, TimestampMixin, UUIDMixin


class ApplicationBase(SQLModel):
    project_id: UUID
    team_id: UUID
    cover_letter: str = Field(..., min_length=1)


class Application(UUIDMixin, TimestampMixin, ApplicationBase, table=True):
    __tablename__ = "applications"

    project_id: UUID = Field(..., foreign_key="projects.id", index=True)
    team_id: UUID = Field(..., foreign_key="teams.id", index=True)
    user_id: UUID = Field(..., foreign_key="profiles.id", index=True)
    status: ApplicationStatus = Field(default=ApplicationStatus.PENDING)


class ApplicationCreate(ApplicationBase):
    pass


class ApplicationRead(ApplicationBase, ReadModel):
    id: UUID
    user_id: UUID
    status: ApplicationStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
