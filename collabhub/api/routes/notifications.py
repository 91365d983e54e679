"""
Notification Routes

The caller's persisted notifications.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from collabhub.api.dependencies import ContextDep
from collabhub.infrastructure.db.models.notification import NotificationRead


router = APIRouter()


class UnreadCount(BaseModel):
    unread: int


class MarkedCount(BaseModel):
    updated: int


@router.get("/notifications", response_model=List[NotificationRead])
async def list_notifications(context: ContextDep):
    return await context.notifications.get_user_notifications(context.principal_id)


@router.get("/notifications/unread-count", response_model=UnreadCount)
async def unread_count(context: ContextDep):
    return UnreadCount(unread=await context.notifications.get_unread_count(context.principal_id))


@router.post("/notifications/read-all", response_model=MarkedCount)
async def mark_all_read(context: ContextDep):
    return MarkedCount(updated=await context.notifications.mark_all_as_read(context.principal_id))


@router.post("/notifications/{notification_id}/read", response_model=NotificationRead)
async def mark_read(notification_id: UUID, context: ContextDep):
    return await context.notifications.mark_as_read(notification_id, context.principal_id)


@router.delete("/notifications/{notification_id}", status_code=204)
async def delete_notification(notification_id: UUID, context: ContextDep):
    await context.notifications.delete_notification(notification_id, context.principal_id)
