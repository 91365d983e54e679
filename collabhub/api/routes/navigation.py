"""
Navigation Routes

Route guard decisions for client-side navigation.
"""

from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from collabhub.api.dependencies import ContextDep, OptionalContextDep
from collabhub.domain.models import Role
from collabhub.domain.notifier import Notice
from collabhub.domain.route_guard import GuardDecision
from collabhub.infrastructure.db.models.profile import ProfileRead


router = APIRouter()


class ResolveRequest(BaseModel):
    path: str = Field(..., min_length=1)
    preferred_role: Optional[Role] = None


class ResolveResponse(BaseModel):
    decision: GuardDecision
    notices: List[Notice] = []


@router.post("/navigation/resolve", response_model=ResolveResponse)
async def resolve(request: ResolveRequest, context: OptionalContextDep):
    """
    Decide whether the client may render `path`.

    Works without a token; an anonymous caller is redirected to sign in
    for any protected route. Only notices raised by this decision are
    returned; earlier ones stay queued for the session API.
    """
    earlier = {id(n) for n in context.notifier.peek()}
    decision = context.guard.resolve(request.path, request.preferred_role)
    raised = [n for n in context.notifier.peek() if id(n) not in earlier]
    return ResolveResponse(decision=decision, notices=context.notifier.take(raised))


@router.post("/navigation/repair-profile", response_model=Optional[ProfileRead])
async def repair_profile(context: ContextDep):
    return await context.guard.repair_missing_profile()
