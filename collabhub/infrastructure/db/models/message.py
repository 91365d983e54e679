"""
Message SQLModels for project and team threads.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from collabhub.infrastructure.db.models.base import ReadModel, UUIDMixin, utcnow


class MessageBase(SQLModel):
    sender_id: UUID
    content: str = Field(..., min_length=1, max_length=4000)


class ProjectMessage(UUIDMixin, MessageBase, table=True):
    __tablename__ = "project_messages"

    project_id: UUID = Field(..., foreign_key="projects.id", index=True)
    sender_id: UUID = Field(..., foreign_key="profiles.id")
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


class TeamMessage(UUIDMixin, MessageBase, table=True):
    __tablename__ = "team_messages"

    team_id: UUID = Field(..., foreign_key="teams.id", index=True)
    sender_id: UUID = Field(..., foreign_key="profiles.id")
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


class MessageRead(MessageBase, ReadModel):
    id: UUID
    project_id: Optional[UUID] = None
    team_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
