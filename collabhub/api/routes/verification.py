"""
Verification Routes

Student college verification and the college admin workflow.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from collabhub.api.dependencies import ContextDep, require_permission
from collabhub.domain.authorization import StudentVerification, VerificationOutcome
from collabhub.domain.context import ClientContext
from collabhub.domain.models import Permission
from collabhub.infrastructure.db.models.verification import (
    UserVerificationRead,
    VerificationCodeRead,
)


router = APIRouter()

_OUTCOME_STATUS = {
    VerificationOutcome.VERIFIED: 200,
    VerificationOutcome.INVALID_CODE: 400,
    VerificationOutcome.EXPIRED: 400,
    VerificationOutcome.NOT_SIGNED_IN: 401,
    VerificationOutcome.BACKEND_ERROR: 502,
}


class VerificationStatus(BaseModel):
    is_verified: bool
    college_id: Optional[UUID] = None


class VerifyRequest(BaseModel):
    college_id: UUID
    code: str = Field(..., min_length=1, max_length=16)


class VerifyResponse(BaseModel):
    verified: bool
    outcome: VerificationOutcome
    message: str


class IssueCodeRequest(BaseModel):
    college_id: Optional[UUID] = None


class DirectVerifyRequest(BaseModel):
    college_id: Optional[UUID] = None


@router.get("/verification/status", response_model=VerificationStatus)
async def get_status(context: ContextDep):
    return VerificationStatus(
        is_verified=context.authorization.is_verified,
        college_id=context.authorization.college_id,
    )


@router.post("/verification/verify", response_model=VerifyResponse)
async def verify_college(request: VerifyRequest, context: ContextDep):
    """Redeem a college verification code."""
    result = await context.authorization.verify_college(request.college_id, request.code)
    body = VerifyResponse(
        verified=result.verified,
        outcome=result.outcome,
        message=result.message,
    )
    return JSONResponse(status_code=_OUTCOME_STATUS[result.outcome], content=body.model_dump(mode="json"))


@router.post("/verification/codes", response_model=VerificationCodeRead, status_code=201)
async def issue_code(
    request: IssueCodeRequest,
    context: ClientContext = Depends(require_permission(Permission.VERIFY_STUDENTS)),
):
    """Generate a verification code (college admins)."""
    return await context.authorization.issue_verification_code(request.college_id)


@router.get("/verification/students", response_model=List[StudentVerification])
async def list_students(
    context: ClientContext = Depends(require_permission(Permission.VERIFY_STUDENTS)),
):
    return await context.authorization.list_students()


@router.post("/verification/students/{student_id}/verify", response_model=UserVerificationRead)
async def verify_student(
    student_id: UUID,
    request: DirectVerifyRequest,
    context: ClientContext = Depends(require_permission(Permission.VERIFY_STUDENTS)),
):
    return await context.authorization.verify_student(student_id, request.college_id)
