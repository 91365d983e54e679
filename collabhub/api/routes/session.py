"""
Session Routes

User-facing notices queued by the stores for the current principal.
"""

from typing import List

from fastapi import APIRouter

from collabhub.api.dependencies import ContextDep
from collabhub.domain.notifier import Notice


router = APIRouter()


@router.get("/session/notices", response_model=List[Notice])
async def drain_notices(context: ContextDep):
    """Return pending notices, oldest first, and clear them."""
    return context.notifier.drain()
