"""
Review Routes

Participants of a project (the owner and members of accepted teams) review
each other. Only the author edits a review; platform admins may remove any.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter

from collabhub.api.dependencies import ContextDep, ensure_owner
from collabhub.infrastructure.db.models.review import (
    ReviewCreate,
    ReviewRead,
    ReviewUpdate,
    UserRating,
)
from collabhub.infrastructure.exceptions import PermissionDeniedError, ValidationError
from collabhub.infrastructure.services.review_service import ReviewService


router = APIRouter()


def _service(context) -> ReviewService:
    return ReviewService(context.client, context.notifications)


@router.post("/projects/{project_id}/reviews", response_model=ReviewRead, status_code=201)
async def create_review(project_id: UUID, request: ReviewCreate, context: ContextDep):
    """Review another participant of the project."""
    project = await context.projects.fetch_project(project_id)
    participants = await context.projects.get_project_participants(project_id)
    if context.principal_id not in participants:
        raise PermissionDeniedError("Only project participants can leave reviews")
    if request.reviewee_id not in participants:
        raise ValidationError(
            "You can only review people taking part in this project",
            details={"reviewee_id": str(request.reviewee_id)},
        )
    return await _service(context).create_review(
        project_id, context.principal_id, request, project.title
    )


@router.get("/projects/{project_id}/reviews", response_model=List[ReviewRead])
async def get_project_reviews(project_id: UUID, context: ContextDep):
    return await _service(context).get_project_reviews(project_id)


@router.get("/users/{user_id}/reviews", response_model=List[ReviewRead])
async def get_user_reviews(user_id: UUID, context: ContextDep):
    """Reviews a user has received."""
    return await _service(context).get_user_reviews(user_id)


@router.get("/users/{user_id}/rating", response_model=UserRating)
async def get_user_rating(user_id: UUID, context: ContextDep):
    return await _service(context).calculate_user_rating(user_id)


@router.patch("/reviews/{review_id}", response_model=ReviewRead)
async def update_review(review_id: UUID, request: ReviewUpdate, context: ContextDep):
    service = _service(context)
    review = await service.get_review(review_id)
    if review.reviewer_id != context.principal_id:
        raise PermissionDeniedError("Only the author can edit this review")
    return await service.update_review(review_id, request)


@router.delete("/reviews/{review_id}", status_code=204)
async def delete_review(review_id: UUID, context: ContextDep):
    service = _service(context)
    review = await service.get_review(review_id)
    ensure_owner(context, review.reviewer_id, "review")
    await service.delete_review(review_id)
