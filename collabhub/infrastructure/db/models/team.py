"""
Team SQLModels for CollabHub

Teams are formed by students. The creator is the team lead and is also
stored as an active member with the lead role.
"""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import field_validator
from sqlalchemy import Column, JSON, String
from sqlalchemy.dialects.postgresql import ARRAY
from sqlmodel import Field, SQLModel

from collabhub.domain.models import (
    TeamMemberRole,
    TeamMemberStatus,
    normalize_string_list,
)
from collabhub.infrastructure.db.models.base import ReadModel, TimestampMixin, UUIDMixin, utcnow


class TeamBase(SQLModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: str = ""
    skills: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(String)))
    portfolio_url: Optional[str] = None
    achievements: Optional[Any] = Field(default=None, sa_column=Column(JSON))


class Team(UUIDMixin, TimestampMixin, TeamBase, table=True):
    __tablename__ = "teams"

    lead_id: UUID = Field(..., foreign_key="profiles.id", index=True)


class TeamCreate(TeamBase):
    @field_validator("skills", mode="before")
    @classmethod
    def normalize_skills(cls, v: Any) -> List[str]:
        return normalize_string_list(v) or []


class TeamUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = None
    skills: Optional[List[str]] = None
    portfolio_url: Optional[str] = None
    achievements: Optional[Any] = None

    @field_validator("skills", mode="before")
    @classmethod
    def normalize_skills(cls, v: Any) -> Optional[List[str]]:
        return normalize_string_list(v)


class TeamMemberBase(SQLModel):
    team_id: UUID
    user_id: UUID
    role: TeamMemberRole = TeamMemberRole.MEMBER
    status: TeamMemberStatus = TeamMemberStatus.ACTIVE


class TeamMember(UUIDMixin, TeamMemberBase, table=True):
    __tablename__ = "team_members"

    team_id: UUID = Field(..., foreign_key="teams.id", index=True)
    user_id: UUID = Field(..., foreign_key="profiles.id", index=True)
    joined_at: datetime = Field(default_factory=utcnow, nullable=False)


class TeamMemberRead(TeamMemberBase, ReadModel):
    id: UUID
    joined_at: Optional[datetime] = None
    name: str = ""


class TeamRead(TeamBase, ReadModel):
    id: UUID
    lead_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    members: List[TeamMemberRead] = Field(default_factory=list)

    @field_validator("skills", mode="before")
    @classmethod
    def default_skills(cls, v: Any) -> List[str]:
        return normalize_string_list(v) or []

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> str:
        return v or ""

    def has_member(self, user_id: UUID) -> bool:
        """Active members only. Pending invitees have not joined yet."""
        return any(
            member.user_id == user_id and member.status == TeamMemberStatus.ACTIVE
            for member in self.members
        )
