"""
College verification SQLModels

- user_verifications: one row per principal, upserted on success
- college_verification_codes: short codes issued by college admins
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from collabhub.infrastructure.db.models.base import ReadModel, UUIDMixin, utcnow


class UserVerificationBase(SQLModel):
    user_id: UUID = Field(..., unique=True, index=True)
    college_id: UUID
    is_verified: bool = False
    verified_at: Optional[datetime] = None


class UserVerification(UUIDMixin, UserVerificationBase, table=True):
    __tablename__ = "user_verifications"


class UserVerificationRead(UserVerificationBase, ReadModel):
    id: Optional[UUID] = None


class VerificationCodeBase(SQLModel):
    college_id: UUID = Field(..., index=True)
    code: str = Field(..., max_length=16)
    expires_at: datetime
    created_by: Optional[UUID] = None


class VerificationCode(UUIDMixin, VerificationCodeBase, table=True):
    __tablename__ = "college_verification_codes"

    created_at: datetime = Field(default_factory=utcnow, nullable=False)


class VerificationCodeRead(VerificationCodeBase, ReadModel):
    id: UUID
    created_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= (now or utcnow())
