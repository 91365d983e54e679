"""
Notification SQLModel

Persisted, per-user notifications with read/unread state.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from collabhub.domain.models import NotificationType
from collabhub.infrastructure.db.models.base import ReadModel, UUIDMixin, utcnow


class NotificationBase(SQLModel):
    user_id: UUID
    title: str = Field(..., max_length=200)
    message: str
    type: NotificationType
    read: bool = False


class Notification(UUIDMixin, NotificationBase, table=True):
    __tablename__ = "notifications"

    user_id: UUID = Field(..., foreign_key="profiles.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


class NotificationCreate(NotificationBase):
    pass


class NotificationRead(NotificationBase, ReadModel):
    id: UUID
    created_at: Optional[datetime] = None
