"""
Message Service for CollabHub

Project and team message threads, oldest message first.
"""

import logging
from typing import List
from uuid import UUID

from supabase import Client

from collabhub.infrastructure.db.models.message import MessageRead
from collabhub.infrastructure.exceptions import DatabaseError, ValidationError


logger = logging.getLogger(__name__)

PROJECT_MESSAGES = "project_messages"
TEAM_MESSAGES = "team_messages"
MAX_LENGTH = 4000


class MessageService:
    """Read and post messages in project and team threads."""

    def __init__(self, client: Client):
        self._client = client

    async def get_project_messages(self, project_id: UUID) -> List[MessageRead]:
        return await self._list(PROJECT_MESSAGES, "project_id", project_id)

    async def get_team_messages(self, team_id: UUID) -> List[MessageRead]:
        return await self._list(TEAM_MESSAGES, "team_id", team_id)

    async def send_project_message(
        self, project_id: UUID, sender_id: UUID, content: str
    ) -> MessageRead:
        return await self._send(PROJECT_MESSAGES, "project_id", project_id, sender_id, content)

    async def send_team_message(
        self, team_id: UUID, sender_id: UUID, content: str
    ) -> MessageRead:
        return await self._send(TEAM_MESSAGES, "team_id", team_id, sender_id, content)

    async def _list(self, table: str, column: str, thread_id: UUID) -> List[MessageRead]:
        try:
            result = self._client.table(table).select("*").eq(
                column, str(thread_id)
            ).order("created_at").execute()
        except Exception as e:
            raise DatabaseError(
                f"Error retrieving messages: {str(e)}",
                operation="select",
                table=table,
                original_error=e,
            )
        return [MessageRead.model_validate(row) for row in result.data or []]

    async def _send(
        self,
        table: str,
        column: str,
        thread_id: UUID,
        sender_id: UUID,
        content: str,
    ) -> MessageRead:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Message cannot be empty")
        if len(content) > MAX_LENGTH:
            raise ValidationError(
                f"Message cannot exceed {MAX_LENGTH} characters",
                details={"length": len(content)},
            )

        try:
            result = self._client.table(table).insert({
                column: str(thread_id),
                "sender_id": str(sender_id),
                "content": content,
            }).execute()
        except Exception as e:
            raise DatabaseError(
                f"Error sending message: {str(e)}",
                operation="insert",
                table=table,
                original_error=e,
            )
        if not result.data:
            raise DatabaseError("Failed to send message", operation="insert", table=table)
        return MessageRead.model_validate(result.data[0])
