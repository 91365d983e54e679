"""
Profile Routes

Read, update and complete the current principal's profile, plus resume
and portfolio uploads.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, File, UploadFile
from pydantic import BaseModel

from collabhub.api.dependencies import ContextDep
from collabhub.domain.models import missing_profile_fields
from collabhub.infrastructure.db.models.profile import ProfileRead, ProfileUpdate
from collabhub.infrastructure.exceptions import NotFoundError
from collabhub.infrastructure.services.storage_service import StorageService


router = APIRouter()


class CompletenessResponse(BaseModel):
    is_complete: bool
    missing_fields: List[str]


class UploadResponse(BaseModel):
    url: str
    profile: ProfileRead


def _completeness(context) -> CompletenessResponse:
    profile = context.identity.profile
    if profile is None:
        role = context.identity.user.declared_role if context.identity.user else None
        return CompletenessResponse(
            is_complete=False,
            missing_fields=missing_profile_fields(role, None),
        )
    return CompletenessResponse(
        is_complete=profile.is_complete,
        missing_fields=profile.missing_fields,
    )


@router.get("/profiles/me", response_model=ProfileRead)
async def get_current_profile(context: ContextDep):
    """Get the current user's profile."""
    if context.identity.profile is None:
        raise NotFoundError(
            f"No profile found for user {context.principal_id}",
            operation="select",
            table="profiles",
        )
    return context.identity.profile


@router.patch("/profiles/me", response_model=ProfileRead)
async def update_profile(request: ProfileUpdate, context: ContextDep):
    """Merge the given fields into the current user's profile."""
    return await context.identity.update_profile(request)


@router.post("/profiles/me/complete", response_model=CompletenessResponse)
async def complete_profile(request: ProfileUpdate, context: ContextDep):
    """Submit the profile completion form and report what is still missing."""
    if context.identity.profile is None:
        await context.guard.repair_missing_profile()
    await context.identity.update_profile(request)
    return _completeness(context)


@router.get("/profiles/me/completeness", response_model=CompletenessResponse)
async def get_completeness(context: ContextDep):
    return _completeness(context)


@router.post("/profiles/me/repair", response_model=ProfileRead)
async def repair_profile(context: ContextDep):
    """Create the profile row from sign-up metadata if it is missing."""
    return await context.guard.repair_missing_profile()


@router.post("/profiles/me/resume", response_model=UploadResponse)
async def upload_resume(context: ContextDep, file: UploadFile = File(...)):
    storage = StorageService(context.client)
    url = await storage.upload_resume(
        context.principal_id, file.filename or "resume", await file.read(), file.content_type
    )
    profile = await context.identity.update_profile({"resume_url": url})
    return UploadResponse(url=url, profile=profile)


@router.post("/profiles/me/portfolio", response_model=UploadResponse)
async def upload_portfolio(context: ContextDep, file: UploadFile = File(...)):
    storage = StorageService(context.client)
    url = await storage.upload_portfolio(
        context.principal_id, file.filename or "portfolio", await file.read(), file.content_type
    )
    profile = await context.identity.update_profile({"portfolio_url": url})
    return UploadResponse(url=url, profile=profile)


@router.get("/profiles/{user_id}", response_model=ProfileRead)
async def get_profile(user_id: UUID, context: ContextDep):
    """Another user's profile."""
    profile = await context.identity.get_user_profile(user_id)
    if profile is None:
        raise NotFoundError(
            f"No profile found for user {user_id}",
            operation="select",
            table="profiles",
        )
    return profile
