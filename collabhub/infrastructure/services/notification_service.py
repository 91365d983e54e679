"""
Notification Service for CollabHub

Persisted per-user notifications in the `notifications` table, plus the
helpers that write the application lifecycle and review notifications.
"""

import logging
from typing import List
from uuid import UUID

from supabase import Client

from collabhub.domain.models import ApplicationStatus, NotificationType
from collabhub.infrastructure.db.models.notification import (
    NotificationCreate,
    NotificationRead,
)
from collabhub.infrastructure.exceptions import DatabaseError, NotFoundError


logger = logging.getLogger(__name__)

TABLE = "notifications"


class NotificationService:
    """CRUD for a user's notifications."""

    def __init__(self, client: Client):
        self._client = client

    async def create_notification(self, data: NotificationCreate) -> NotificationRead:
        try:
            result = self._client.table(TABLE).insert(
                data.model_dump(mode="json")
            ).execute()
        except Exception as e:
            raise DatabaseError(
                f"Error creating notification: {str(e)}",
                operation="insert",
                table=TABLE,
                original_error=e,
            )
        if not result.data:
            raise DatabaseError("Failed to create notification", operation="insert", table=TABLE)
        return NotificationRead.model_validate(result.data[0])

    async def get_user_notifications(self, user_id: UUID) -> List[NotificationRead]:
        """Notifications for a user, newest first."""
        try:
            result = self._client.table(TABLE).select("*").eq(
                "user_id", str(user_id)
            ).order("created_at", desc=True).execute()
        except Exception as e:
            raise DatabaseError(
                f"Error retrieving notifications: {str(e)}",
                operation="select",
                table=TABLE,
                original_error=e,
            )
        return [NotificationRead.model_validate(row) for row in result.data or []]

    async def get_unread_count(self, user_id: UUID) -> int:
        try:
            result = self._client.table(TABLE).select("id").eq(
                "user_id", str(user_id)
            ).eq("read", False).execute()
        except Exception as e:
            raise DatabaseError(
                f"Error counting notifications: {str(e)}",
                operation="select",
                table=TABLE,
                original_error=e,
            )
        return len(result.data or [])

    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> NotificationRead:
        try:
            result = self._client.table(TABLE).update({"read": True}).eq(
                "id", str(notification_id)
            ).eq("user_id", str(user_id)).execute()
        except Exception as e:
            raise DatabaseError(
                f"Error updating notification: {str(e)}",
                operation="update",
                table=TABLE,
                original_error=e,
            )
        if not result.data:
            raise NotFoundError(
                f"Notification {notification_id} not found",
                operation="update",
                table=TABLE,
            )
        return NotificationRead.model_validate(result.data[0])

    async def mark_all_as_read(self, user_id: UUID) -> int:
        try:
            result = self._client.table(TABLE).update({"read": True}).eq(
                "user_id", str(user_id)
            ).eq("read", False).execute()
        except Exception as e:
            raise DatabaseError(
                f"Error updating notifications: {str(e)}",
                operation="update",
                table=TABLE,
                original_error=e,
            )
        return len(result.data or [])

    async def delete_notification(self, notification_id: UUID, user_id: UUID) -> None:
        try:
            self._client.table(TABLE).delete().eq(
                "id", str(notification_id)
            ).eq("user_id", str(user_id)).execute()
        except Exception as e:
            raise DatabaseError(
                f"Error deleting notification: {str(e)}",
                operation="delete",
                table=TABLE,
                original_error=e,
            )

    # =========================================================================
    # Application lifecycle
    # =========================================================================

    async def notify_application_received(self, owner_id: UUID, project_title: str) -> None:
        await self._notify_quietly(NotificationCreate(
            user_id=owner_id,
            title="New Application",
            message=f'Your project "{project_title}" received a new application',
            type=NotificationType.APPLICATION_RECEIVED,
        ))

    async def notify_application_status(
        self,
        applicant_id: UUID,
        project_title: str,
        status: ApplicationStatus,
    ) -> None:
        if status is ApplicationStatus.ACCEPTED:
            title, kind = "Application Accepted", NotificationType.APPLICATION_ACCEPTED
        elif status is ApplicationStatus.REJECTED:
            title, kind = "Application Rejected", NotificationType.APPLICATION_REJECTED
        else:
            return
        await self._notify_quietly(NotificationCreate(
            user_id=applicant_id,
            title=title,
            message=f'Your application for "{project_title}" has been {status.value}',
            type=kind,
        ))

    async def notify_review_received(self, reviewee_id: UUID, project_title: str) -> None:
        await self._notify_quietly(NotificationCreate(
            user_id=reviewee_id,
            title="New Review",
            message=f"You've received a new review for the project \"{project_title}\"",
            type=NotificationType.REVIEW_RECEIVED,
        ))

    async def _notify_quietly(self, data: NotificationCreate) -> None:
        # The triggering operation has already succeeded by the time we get here
        try:
            await self.create_notification(data)
        except DatabaseError as e:
            logger.warning(f"Could not create {data.type.value} notification: {e}")
