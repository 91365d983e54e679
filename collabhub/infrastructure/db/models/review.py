"""
Review SQLModels

Participants of a project rate each other from 1 to 5 once the work is
under way. Each reviewer reviews a given person at most once per project.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from collabhub.infrastructure.db.models.base import ReadModel, TimestampMixin, UUIDMixin


MIN_RATING = 1
MAX_RATING = 5


class ReviewBase(SQLModel):
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    comment: Optional[str] = Field(default=None, max_length=2000)


class Review(UUIDMixin, TimestampMixin, ReviewBase, table=True):
    __tablename__ = "reviews"

    project_id: UUID = Field(..., foreign_key="projects.id", index=True)
    reviewer_id: UUID = Field(..., foreign_key="profiles.id")
    reviewee_id: UUID = Field(..., foreign_key="profiles.id", index=True)


class ReviewCreate(ReviewBase):
    reviewee_id: UUID


class ReviewUpdate(SQLModel):
    rating: Optional[int] = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewRead(ReviewBase, ReadModel):
    id: UUID
    project_id: UUID
    reviewer_id: UUID
    reviewee_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reviewer_name: str = ""
    project_title: Optional[str] = None


class UserRating(SQLModel):
    user_id: UUID
    rating: float
    review_count: int
