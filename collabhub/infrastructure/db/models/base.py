"""
Base Model for SQLModel ORM

Provides common fields and behavior for all database models.
Rows arrive from PostgREST as JSON, so read schemas rely on pydantic
coercion for UUIDs, timestamps and enums.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from pydantic import ConfigDict
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class TimestampMixin(SQLModel):
    """
    Mixin providing timestamp fields for models.

    Values are assigned by the database; the application never treats
    client-side timestamps as authoritative.
    """

    created_at: Optional[datetime] = Field(
        default_factory=utcnow,
        nullable=False,
        description="Record creation timestamp (UTC)"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": utcnow},
        description="Last update timestamp (UTC)"
    )


class UUIDMixin(SQLModel):
    """Mixin providing UUID primary key."""

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
        description="Unique identifier (UUID v4)"
    )


class ReadModel(SQLModel):
    """Base for schemas validated from PostgREST rows."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")
