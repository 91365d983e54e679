"""
Profile SQLModel for CollabHub

Database model for the application-owned profile record, one per
principal. Student and startup fields share one table; which ones are
required depends on the role.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import field_validator
from sqlalchemy import Column, JSON, String
from sqlalchemy.dialects.postgresql import ARRAY
from sqlmodel import Field, SQLModel

from collabhub.domain.models import (
    Role,
    is_profile_complete,
    missing_profile_fields,
    normalize_string_list,
    parse_education,
)
from collabhub.infrastructure.db.models.base import ReadModel


LIST_FIELDS = ("skills", "interests", "preferred_categories", "project_needs")


class ProfileBase(SQLModel):
    """
    Base schema for Profile (shared between table and read models).
    """

    name: str = Field(default="", max_length=100)
    role: Role = Field(..., description="Role chosen at sign-up or granted by an admin")
    email: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=500)

    # Startup fields
    company_name: Optional[str] = Field(default=None, max_length=200)
    company_description: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    founded: Optional[str] = None
    website: Optional[str] = None
    stage: Optional[str] = None
    project_needs: Optional[List[str]] = Field(
        default=None, sa_column=Column(ARRAY(String))
    )

    # Student fields
    skills: Optional[List[str]] = Field(
        default=None, sa_column=Column(ARRAY(String))
    )
    education: Optional[List[Dict[str, Any]]] = Field(
        default=None, sa_column=Column(JSON)
    )
    portfolio_url: Optional[str] = None
    resume_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    availability: Optional[str] = None
    interests: Optional[List[str]] = Field(
        default=None, sa_column=Column(ARRAY(String))
    )
    experience_level: Optional[str] = None
    preferred_categories: Optional[List[str]] = Field(
        default=None, sa_column=Column(ARRAY(String))
    )
    college: Optional[str] = Field(default=None, max_length=200)
    graduation_year: Optional[str] = None
    major: Optional[str] = Field(default=None, max_length=100)


class Profile(ProfileBase, table=True):
    """
    Profile database table model.

    The primary key is the auth provider's user id.
    """

    __tablename__ = "profiles"

    id: UUID = Field(..., primary_key=True, description="auth.users id")
    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)


class ProfileCreate(SQLModel):
    """Placeholder row written at sign-up (or by the repair action)."""

    id: UUID
    name: str = ""
    role: Role
    email: Optional[str] = None


class ProfileUpdate(SQLModel):
    """
    Schema for updating a profile (all fields optional).

    List fields accept comma-separated strings; education accepts a JSON
    string, a mapping or a list and falls back to an empty list.
    """

    name: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    company_name: Optional[str] = Field(default=None, max_length=200)
    company_description: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    founded: Optional[str] = None
    website: Optional[str] = None
    stage: Optional[str] = None
    project_needs: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    education: Optional[List[Dict[str, Any]]] = None
    portfolio_url: Optional[str] = None
    resume_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    availability: Optional[str] = None
    interests: Optional[List[str]] = None
    experience_level: Optional[str] = None
    preferred_categories: Optional[List[str]] = None
    college: Optional[str] = Field(default=None, max_length=200)
    graduation_year: Optional[str] = None
    major: Optional[str] = Field(default=None, max_length=100)

    @field_validator(*LIST_FIELDS, mode="before")
    @classmethod
    def normalize_lists(cls, v: Any) -> Optional[List[str]]:
        return normalize_string_list(v)

    @field_validator("education", mode="before")
    @classmethod
    def normalize_education(cls, v: Any) -> Optional[List[Dict[str, Any]]]:
        if v is None:
            return None
        return parse_education(v)

    @field_validator("graduation_year", mode="before")
    @classmethod
    def stringify_year(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v).strip()


class ProfileRead(ProfileBase, ReadModel):
    """Profile row as returned by the backend."""

    id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator(*LIST_FIELDS, mode="before")
    @classmethod
    def default_lists(cls, v: Any) -> List[str]:
        return normalize_string_list(v) or []

    @field_validator("education", mode="before")
    @classmethod
    def default_education(cls, v: Any) -> List[Dict[str, Any]]:
        return parse_education(v)

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> str:
        return v or ""

    @property
    def missing_fields(self) -> List[str]:
        return missing_profile_fields(self.role, self.name, self.company_name, self.college)

    @property
    def is_complete(self) -> bool:
        return is_profile_complete(self)
