"""
Auth Routes

Sign-up, password and OAuth sign-in, sign-out, and the current identity.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from collabhub.api.dependencies import ContextDep, RegistryDep, get_bearer_token
from collabhub.domain.identity import AuthSession
from collabhub.domain.models import SignUpRole
from collabhub.domain.notifier import Notice


router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    role: SignUpRole


class SignUpResponse(BaseModel):
    redirect_to: str
    notices: List[Notice] = []


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class OAuthRequest(BaseModel):
    provider: str = Field(..., min_length=1)


class OAuthResponse(BaseModel):
    url: str


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/auth/signup", response_model=SignUpResponse, status_code=201)
async def sign_up(request: SignUpRequest, registry: RegistryDep):
    """Create an account; the client should continue at `redirect_to`."""
    context = registry.create()
    redirect_to = await context.identity.sign_up(
        request.email, request.password, request.name, request.role
    )
    return SignUpResponse(redirect_to=redirect_to, notices=context.notifier.drain())


@router.post("/auth/signin", response_model=AuthSession)
async def sign_in(request: SignInRequest, registry: RegistryDep):
    """Sign in with email and password and register the client context."""
    context = registry.create()
    session = await context.identity.sign_in(request.email, request.password)
    registry.register(context)
    return session


@router.post("/auth/oauth", response_model=OAuthResponse)
async def sign_in_with_provider(request: OAuthRequest, registry: RegistryDep):
    """Start an OAuth login; the client should navigate to `url`."""
    context = registry.create()
    url = await context.identity.sign_in_with_provider(request.provider)
    return OAuthResponse(url=url)


@router.post("/auth/signout", status_code=204)
async def sign_out(
    context: ContextDep,
    registry: RegistryDep,
    token: str = Depends(get_bearer_token),
):
    """End the session and tear down the client context."""
    principal_id = context.principal_id
    try:
        await context.identity.sign_out(token)
    finally:
        if principal_id is not None:
            registry.discard(principal_id)


@router.get("/auth/me")
async def get_me(context: ContextDep) -> Dict[str, Any]:
    """Current principal, profile and authorization state."""
    return context.snapshot()
