"""
Authorization Policy

Role to permission table plus the college verification workflow.

The permission table is a closed mapping over the Role enum; adding a role
without extending `permissions_for` is a type error caught by
`assert_never`.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import FrozenSet, List, Optional, assert_never
from uuid import UUID

from pydantic import BaseModel
from supabase import Client

from collabhub.config.settings import Settings, get_settings
from collabhub.domain.identity import IdentityStore
from collabhub.domain.models import Permission, Role
from collabhub.domain.notifier import Notifier
from collabhub.infrastructure.db.models.base import utcnow
from collabhub.infrastructure.db.models.profile import ProfileRead
from collabhub.infrastructure.db.models.verification import (
    UserVerificationRead,
    VerificationCodeRead,
)
from collabhub.infrastructure.exceptions import (
    AuthenticationRequiredError,
    DatabaseError,
    PermissionDeniedError,
)


logger = logging.getLogger(__name__)

VERIFICATIONS_TABLE = "user_verifications"
CODES_TABLE = "college_verification_codes"

CODE_ALPHABET = string.ascii_uppercase + string.digits


# =============================================================================
# Permission table
# =============================================================================

STUDENT_PERMISSIONS: FrozenSet[Permission] = frozenset({
    Permission.CREATE_TEAM,
    Permission.EDIT_TEAM,
    Permission.JOIN_TEAM,
    Permission.LEAVE_TEAM,
    Permission.SUBMIT_APPLICATION,
})

STARTUP_PERMISSIONS: FrozenSet[Permission] = frozenset({
    Permission.CREATE_PROJECT,
    Permission.EDIT_PROJECT,
    Permission.DELETE_PROJECT,
    Permission.VIEW_APPLICATIONS,
    Permission.MANAGE_APPLICATIONS,
})

COLLEGE_ADMIN_PERMISSIONS: FrozenSet[Permission] = frozenset({
    Permission.VERIFY_STUDENTS,
})

PLATFORM_ADMIN_PERMISSIONS: FrozenSet[Permission] = frozenset(Permission)


def permissions_for(role: Role) -> FrozenSet[Permission]:
    """Allow-set for a role."""
    match role:
        case Role.STUDENT:
            return STUDENT_PERMISSIONS
        case Role.STARTUP:
            return STARTUP_PERMISSIONS
        case Role.COLLEGE_ADMIN:
            return COLLEGE_ADMIN_PERMISSIONS
        case Role.PLATFORM_ADMIN:
            return PLATFORM_ADMIN_PERMISSIONS
        case _:
            assert_never(role)


def role_has_permission(role: Optional[Role], permission: Permission) -> bool:
    if role is None:
        return False
    return permission in permissions_for(role)


# =============================================================================
# Verification results
# =============================================================================

class VerificationOutcome(str, Enum):
    VERIFIED = "verified"
    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"
    NOT_SIGNED_IN = "not_signed_in"
    BACKEND_ERROR = "backend_error"


VERIFICATION_MESSAGES = {
    VerificationOutcome.VERIFIED: "College verification successful",
    VerificationOutcome.INVALID_CODE: "Invalid verification code",
    VerificationOutcome.EXPIRED: "Verification code has expired",
    VerificationOutcome.NOT_SIGNED_IN: "You must be signed in to verify your college",
    VerificationOutcome.BACKEND_ERROR: "Could not verify your college. Please try again.",
}


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a verification attempt; truthy only when verified."""
    outcome: VerificationOutcome

    @property
    def verified(self) -> bool:
        return self.outcome is VerificationOutcome.VERIFIED

    @property
    def message(self) -> str:
        return VERIFICATION_MESSAGES[self.outcome]

    def __bool__(self) -> bool:
        return self.verified


class StudentVerification(BaseModel):
    """A student profile with its verification status, for college admins."""
    profile: ProfileRead
    is_verified: bool = False
    college_id: Optional[UUID] = None
    verified_at: Optional[datetime] = None


# =============================================================================
# Policy
# =============================================================================

class AuthorizationPolicy:
    """
    Role, verification status and permission checks for one principal.

    Subscribes to the identity store and recomputes its state on every
    identity change. `is_loading` stays true until the first computation
    has finished.
    """

    def __init__(
        self,
        client: Client,
        identity: IdentityStore,
        notifier: Notifier,
        settings: Optional[Settings] = None,
    ):
        self._client = client
        self._identity = identity
        self._notifier = notifier
        self._settings = settings or get_settings()

        self.role: Optional[Role] = None
        self.is_verified: bool = False
        self.college_id: Optional[UUID] = None
        self.is_loading: bool = True

        identity.subscribe(self._on_identity_change)

    async def _on_identity_change(self, identity: IdentityStore) -> None:
        if identity.loading and identity.user is None:
            return
        await self.refresh()

    async def refresh(self) -> None:
        """Recompute role, verification status and college from identity."""
        user = self._identity.user
        if user is None:
            self.role = None
            self.is_verified = False
            self.college_id = None
            self.is_loading = False
            return

        profile = self._identity.profile
        self.role = profile.role if profile else None

        try:
            record = await self._get_verification(user.id)
        except DatabaseError as e:
            logger.error(f"Could not load verification status for {user.id}: {e}")
            record = None

        self.is_verified = bool(record and record.is_verified)
        self.college_id = record.college_id if record else None
        self.is_loading = False

    def has_permission(self, permission: Permission) -> bool:
        """True iff a principal with a known role holds `permission`."""
        if self._identity.user is None:
            return False
        return role_has_permission(self.role, permission)

    def require(self, permission: Permission) -> None:
        """Raise PermissionDeniedError unless the principal holds `permission`."""
        if self._identity.user is None:
            raise AuthenticationRequiredError("You must be signed in to perform this action")
        if not self.has_permission(permission):
            raise PermissionDeniedError(
                permission=permission.value,
                role=self.role.value if self.role else None,
            )

    # =========================================================================
    # College verification
    # =========================================================================

    async def verify_college(self, college_id: UUID, code: str) -> VerificationResult:
        """
        Redeem a college verification code for the current principal.

        Only a non-expired code matching both `college_id` and `code` is
        accepted. Any other outcome leaves `is_verified` unchanged.
        """
        user = self._identity.user
        if user is None:
            return self._verification_failed(VerificationOutcome.NOT_SIGNED_IN)

        normalized = code.strip().upper()

        try:
            result = self._client.table(CODES_TABLE).select("*").eq(
                "college_id", str(college_id)
            ).eq("code", normalized).execute()
        except Exception as e:
            logger.error(f"Verification code lookup failed: {e}")
            return self._verification_failed(VerificationOutcome.BACKEND_ERROR)

        codes = [VerificationCodeRead.model_validate(row) for row in result.data or []]
        if not codes:
            return self._verification_failed(VerificationOutcome.INVALID_CODE)

        now = utcnow()
        valid = [c for c in codes if not c.is_expired(now)]
        if not valid:
            return self._verification_failed(VerificationOutcome.EXPIRED)

        try:
            self._client.table(VERIFICATIONS_TABLE).upsert(
                {
                    "user_id": str(user.id),
                    "college_id": str(college_id),
                    "is_verified": True,
                    "verified_at": now.isoformat(),
                },
                on_conflict="user_id",
            ).execute()
        except Exception as e:
            logger.error(f"Verification upsert failed for {user.id}: {e}")
            return self._verification_failed(VerificationOutcome.BACKEND_ERROR)

        if self._settings.verification_codes_single_use:
            try:
                self._client.table(CODES_TABLE).delete().eq("id", str(valid[0].id)).execute()
            except Exception as e:
                logger.warning(f"Could not consume verification code {valid[0].id}: {e}")

        self.is_verified = True
        self.college_id = college_id
        result = VerificationResult(VerificationOutcome.VERIFIED)
        self._notifier.success(result.message)
        return result

    def _verification_failed(self, outcome: VerificationOutcome) -> VerificationResult:
        result = VerificationResult(outcome)
        self._notifier.error(result.message)
        return result

    async def issue_verification_code(
        self, college_id: Optional[UUID] = None
    ) -> VerificationCodeRead:
        """
        Generate a verification code for a college.

        `college_id` defaults to the issuing admin's own id.
        """
        self.require(Permission.VERIFY_STUDENTS)
        admin_id = self._identity.user.id

        length = self._settings.verification_code_length
        code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
        expires_at = utcnow() + timedelta(hours=self._settings.verification_code_ttl_hours)

        try:
            result = self._client.table(CODES_TABLE).insert({
                "college_id": str(college_id or admin_id),
                "code": code,
                "expires_at": expires_at.isoformat(),
                "created_by": str(admin_id),
            }).execute()
        except Exception as e:
            self._notifier.error("Failed to generate verification code")
            raise DatabaseError(
                f"Error creating verification code: {str(e)}",
                operation="insert",
                table=CODES_TABLE,
                original_error=e,
            )

        if not result.data:
            raise DatabaseError(
                "Failed to create verification code",
                operation="insert",
                table=CODES_TABLE,
            )

        self._notifier.success(f"Verification code generated: {code}")
        return VerificationCodeRead.model_validate(result.data[0])

    async def verify_student(
        self, student_id: UUID, college_id: Optional[UUID] = None
    ) -> UserVerificationRead:
        """Mark a student as verified without a code."""
        self.require(Permission.VERIFY_STUDENTS)
        admin_id = self._identity.user.id

        try:
            result = self._client.table(VERIFICATIONS_TABLE).upsert(
                {
                    "user_id": str(student_id),
                    "college_id": str(college_id or admin_id),
                    "is_verified": True,
                    "verified_at": utcnow().isoformat(),
                },
                on_conflict="user_id",
            ).execute()
        except Exception as e:
            self._notifier.error("Failed to verify student")
            raise DatabaseError(
                f"Error verifying student: {str(e)}",
                operation="upsert",
                table=VERIFICATIONS_TABLE,
                original_error=e,
            )

        if not result.data:
            raise DatabaseError(
                "Failed to verify student",
                operation="upsert",
                table=VERIFICATIONS_TABLE,
            )

        self._notifier.success("Student verified successfully")
        return UserVerificationRead.model_validate(result.data[0])

    async def list_students(self) -> List[StudentVerification]:
        """All student profiles with their verification status."""
        self.require(Permission.VERIFY_STUDENTS)

        try:
            profiles = self._client.table("profiles").select("*").eq(
                "role", Role.STUDENT.value
            ).execute()
            students = [ProfileRead.model_validate(row) for row in profiles.data or []]

            records = {}
            if students:
                verifications = self._client.table(VERIFICATIONS_TABLE).select("*").in_(
                    "user_id", [str(s.id) for s in students]
                ).execute()
                for row in verifications.data or []:
                    record = UserVerificationRead.model_validate(row)
                    records[record.user_id] = record
        except Exception as e:
            raise DatabaseError(
                f"Error listing students: {str(e)}",
                operation="select",
                table=VERIFICATIONS_TABLE,
                original_error=e,
            )

        return [
            StudentVerification(
                profile=student,
                is_verified=bool(records.get(student.id) and records[student.id].is_verified),
                college_id=records[student.id].college_id if student.id in records else None,
                verified_at=records[student.id].verified_at if student.id in records else None,
            )
            for student in students
        ]

    async def _get_verification(self, user_id: UUID) -> Optional[UserVerificationRead]:
        try:
            result = self._client.table(VERIFICATIONS_TABLE).select("*").eq(
                "user_id", str(user_id)
            ).maybe_single().execute()
        except Exception as e:
            raise DatabaseError(
                f"Error retrieving verification: {str(e)}",
                operation="select",
                table=VERIFICATIONS_TABLE,
                original_error=e,
            )
        data = result.data if result else None
        return UserVerificationRead.model_validate(data) if data else None

    def snapshot(self) -> dict:
        return {
            "role": self.role.value if self.role else None,
            "is_verified": self.is_verified,
            "college_id": str(self.college_id) if self.college_id else None,
            "is_loading": self.is_loading,
            "permissions": sorted(
                p.value for p in Permission if self.has_permission(p)
            ),
        }
