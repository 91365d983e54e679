"""
Review Service for CollabHub

Project reviews between participants, and the per-user average rating
shown on profiles.
"""

import logging
import math
from typing import Any, Dict, List, Optional
from uuid import UUID

from supabase import Client

from collabhub.infrastructure.db.models.base import utcnow
from collabhub.infrastructure.db.models.review import (
    ReviewCreate,
    ReviewRead,
    ReviewUpdate,
    UserRating,
)
from collabhub.infrastructure.exceptions import (
    DatabaseError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from collabhub.infrastructure.services.notification_service import NotificationService


logger = logging.getLogger(__name__)

TABLE = "reviews"


class ReviewService:
    """Create, list and edit project reviews."""

    def __init__(self, client: Client, notifications: Optional[NotificationService] = None):
        self._client = client
        self._notifications = notifications or NotificationService(client)

    def _execute(self, query, operation: str, action: str):
        try:
            return query.execute()
        except Exception as e:
            raise DatabaseError(
                f"Error {action}: {str(e)}",
                operation=operation,
                table=TABLE,
                original_error=e,
            )

    async def create_review(
        self,
        project_id: UUID,
        reviewer_id: UUID,
        data: ReviewCreate,
        project_title: str = "",
    ) -> ReviewRead:
        """Store a review and notify the reviewee."""
        if data.reviewee_id == reviewer_id:
            raise ValidationError("You cannot review yourself")

        existing = self._execute(
            self._client.table(TABLE).select("id").eq("project_id", str(project_id))
            .eq("reviewer_id", str(reviewer_id)).eq("reviewee_id", str(data.reviewee_id)),
            "select",
            "checking for an existing review",
        )
        if existing.data:
            raise DuplicateError(
                "You have already reviewed this person for this project",
                operation="insert",
                table=TABLE,
            )

        payload = data.model_dump(mode="json")
        payload.update({"project_id": str(project_id), "reviewer_id": str(reviewer_id)})
        result = self._execute(self._client.table(TABLE).insert(payload), "insert", "creating review")
        if not result.data:
            raise DatabaseError("Failed to create review", operation="insert", table=TABLE)

        review = ReviewRead.model_validate(result.data[0])
        await self._notifications.notify_review_received(data.reviewee_id, project_title)
        return review

    async def get_review(self, review_id: UUID) -> ReviewRead:
        result = self._execute(
            self._client.table(TABLE).select("*").eq("id", str(review_id)).maybe_single(),
            "select",
            "retrieving review",
        )
        data = result.data if result else None
        if not data:
            raise NotFoundError(f"Review {review_id} not found", operation="select", table=TABLE)
        return ReviewRead.model_validate(data)

    async def get_project_reviews(self, project_id: UUID) -> List[ReviewRead]:
        """Reviews written within a project, newest first."""
        result = self._execute(
            self._client.table(TABLE).select("*").eq("project_id", str(project_id))
            .order("created_at", desc=True),
            "select",
            "retrieving project reviews",
        )
        return self._with_names(result.data or [])

    async def get_user_reviews(self, user_id: UUID) -> List[ReviewRead]:
        """Reviews a user has received, newest first, with project titles."""
        result = self._execute(
            self._client.table(TABLE).select("*").eq("reviewee_id", str(user_id))
            .order("created_at", desc=True),
            "select",
            "retrieving user reviews",
        )
        return self._with_names(result.data or [], with_projects=True)

    async def update_review(self, review_id: UUID, data: ReviewUpdate) -> ReviewRead:
        payload = data.model_dump(mode="json", exclude_unset=True)
        payload["updated_at"] = utcnow().isoformat()
        result = self._execute(
            self._client.table(TABLE).update(payload).eq("id", str(review_id)),
            "update",
            "updating review",
        )
        if not result.data:
            raise NotFoundError(f"Review {review_id} not found", operation="update", table=TABLE)
        return ReviewRead.model_validate(result.data[0])

    async def delete_review(self, review_id: UUID) -> None:
        self._execute(
            self._client.table(TABLE).delete().eq("id", str(review_id)),
            "delete",
            "deleting review",
        )

    async def calculate_user_rating(self, user_id: UUID) -> UserRating:
        """Average rating rounded half up to one decimal; 0 with no reviews."""
        result = self._execute(
            self._client.table(TABLE).select("rating").eq("reviewee_id", str(user_id)),
            "select",
            "calculating rating",
        )
        ratings = [row["rating"] for row in result.data or []]
        if not ratings:
            return UserRating(user_id=user_id, rating=0.0, review_count=0)
        average = sum(ratings) / len(ratings)
        return UserRating(
            user_id=user_id,
            rating=math.floor(average * 10 + 0.5) / 10,
            review_count=len(ratings),
        )

    def _with_names(
        self, rows: List[Dict[str, Any]], with_projects: bool = False
    ) -> List[ReviewRead]:
        """Attach reviewer names (and project titles) with in-list queries."""
        if not rows:
            return []
        reviewer_ids = sorted({str(row["reviewer_id"]) for row in rows})
        profiles = self._execute(
            self._client.table("profiles").select("id,name").in_("id", reviewer_ids),
            "select",
            "retrieving reviewer names",
        )
        names = {str(p["id"]): p.get("name") or "" for p in profiles.data or []}

        titles: Dict[str, str] = {}
        if with_projects:
            project_ids = sorted({str(row["project_id"]) for row in rows})
            projects = self._execute(
                self._client.table("projects").select("id,title").in_("id", project_ids),
                "select",
                "retrieving project titles",
            )
            titles = {str(p["id"]): p.get("title") for p in projects.data or []}

        return [
            ReviewRead.model_validate({
                **row,
                "reviewer_name": names.get(str(row["reviewer_id"]), ""),
                "project_title": titles.get(str(row["project_id"])),
            })
            for row in rows
        ]
