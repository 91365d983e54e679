"""
Identity Store

Holds the current principal and its profile, and performs the credential
operations (sign-up, sign-in, OAuth, sign-out) against Supabase Auth.

Profile rows live in the `profiles` table, keyed by the principal id. The
profile is always loaded strictly after the principal has been resolved.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ValidationError as PydanticValidationError
from supabase import Client

from collabhub.config.settings import get_settings
from collabhub.domain.models import Principal, Role, SignUpRole
from collabhub.domain.notifier import Notifier
from collabhub.domain.routes import signin_route_for
from collabhub.infrastructure.db.models.base import utcnow
from collabhub.infrastructure.db.models.profile import (
    ProfileCreate,
    ProfileRead,
    ProfileUpdate,
)
from collabhub.infrastructure.exceptions import (
    AuthenticationError,
    AuthenticationRequiredError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from collabhub.infrastructure.supabase_client import create_auth_client


logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"

IdentityListener = Callable[["IdentityStore"], Awaitable[None]]


class AuthSession(BaseModel):
    """Tokens returned to the client after a password sign-in."""
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    principal: Principal


def principal_from_user(user: Any) -> Principal:
    """Build a Principal from a Supabase Auth user object."""
    return Principal(
        id=user.id,
        email=getattr(user, "email", None),
        metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


class IdentityStore:
    """
    Current principal and profile for one client context.

    Listeners registered with `subscribe` are awaited in registration order
    after every change of principal or profile.
    """

    def __init__(
        self,
        client: Client,
        notifier: Notifier,
        auth_client_factory: Callable[[], Client] = create_auth_client,
    ):
        self._client = client
        self._notifier = notifier
        self._auth_client_factory = auth_client_factory
        self._auth_client: Optional[Client] = None
        self._listeners: List[IdentityListener] = []

        self.user: Optional[Principal] = None
        self.profile: Optional[ProfileRead] = None
        self.loading: bool = True

    @property
    def auth_client(self) -> Client:
        if self._auth_client is None:
            self._auth_client = self._auth_client_factory()
        return self._auth_client

    @property
    def user_id(self) -> Optional[UUID]:
        return self.user.id if self.user else None

    # =========================================================================
    # Listeners
    # =========================================================================

    def subscribe(self, listener: IdentityListener) -> None:
        self._listeners.append(listener)

    async def _emit(self) -> None:
        for listener in self._listeners:
            await listener(self)

    # =========================================================================
    # Session resolution
    # =========================================================================

    async def restore(self, principal: Optional[Principal]) -> None:
        """
        Adopt an already-authenticated principal (or none) and load its profile.

        Used when a request carries a verified bearer token instead of
        signing in through this store.
        """
        self.user = principal
        self.profile = None
        await self._emit()
        if principal is not None:
            try:
                self.profile = await self.get_user_profile(principal.id)
            finally:
                self.loading = False
            await self._emit()
        else:
            self.loading = False
            await self._emit()

    # =========================================================================
    # Credential operations
    # =========================================================================

    async def sign_up(
        self,
        email: str,
        password: str,
        name: str,
        role: Union[SignUpRole, str],
    ) -> str:
        """
        Create a principal and its placeholder profile.

        Returns:
            The role-specific sign-in route the client should go to next.

        Raises:
            AuthenticationError: If the auth provider rejects the sign-up
        """
        try:
            sign_up_role = SignUpRole(role)
        except ValueError:
            raise ValidationError(
                f"Invalid sign-up role: {role}",
                details={"role": str(role)},
            )

        try:
            response = self.auth_client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"name": name, "role": sign_up_role.value}},
            })
        except Exception as e:
            self._notifier.error(str(e))
            raise AuthenticationError(str(e), operation="sign_up", original_error=e)

        if response.user is None:
            self._notifier.error("Sign up failed")
            raise AuthenticationError("Sign up failed", operation="sign_up")

        principal = principal_from_user(response.user)
        await self._create_profile(
            ProfileCreate(
                id=principal.id,
                name=name,
                role=Role(sign_up_role.value),
                email=email,
            )
        )

        self._notifier.success(
            "Account created successfully. Please check your email for verification."
        )
        logger.info(f"Signed up {principal.id} as {sign_up_role.value}")
        return signin_route_for(Role(sign_up_role.value))

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Authenticate with email and password.

        Raises:
            AuthenticationError: On bad credentials or provider failure
        """
        try:
            response = self.auth_client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as e:
            self._notifier.error(str(e))
            raise AuthenticationError(str(e), operation="sign_in", original_error=e)

        if response.user is None or response.session is None:
            self._notifier.error("Invalid login credentials")
            raise AuthenticationError("Invalid login credentials", operation="sign_in")

        principal = principal_from_user(response.user)
        await self.restore(principal)
        self._notifier.success("Signed in successfully")

        return AuthSession(
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            expires_in=response.session.expires_in,
            principal=principal,
        )

    async def sign_in_with_provider(self, provider: str) -> str:
        """Start a redirect-based OAuth login and return the provider URL."""
        settings = get_settings()
        try:
            response = self.auth_client.auth.sign_in_with_oauth({
                "provider": provider,
                "options": {"redirect_to": settings.oauth_redirect_url},
            })
        except Exception as e:
            self._notifier.error(str(e))
            raise AuthenticationError(str(e), operation="sign_in_with_oauth", original_error=e)
        return response.url

    async def sign_out(self, access_token: Optional[str] = None) -> None:
        """
        End the backend session and clear the principal and profile.

        A bearer token passed in is revoked through the admin API; otherwise
        the session held by this store's auth client is ended.
        """
        error: Optional[Exception] = None
        try:
            if access_token:
                self._client.auth.admin.sign_out(access_token)
            elif self._auth_client is not None:
                self._auth_client.auth.sign_out()
        except Exception as e:
            error = e

        self.user = None
        self.profile = None
        self.loading = False
        await self._emit()

        if error is not None:
            self._notifier.error(str(error))
            raise AuthenticationError(str(error), operation="sign_out", original_error=error)
        self._notifier.success("Signed out successfully")

    # =========================================================================
    # Profile operations
    # =========================================================================

    async def get_user_profile(self, user_id: UUID) -> Optional[ProfileRead]:
        """Return the profile for `user_id`, or None when no row exists."""
        try:
            result = self._client.table(PROFILES_TABLE).select("*").eq(
                "id", str(user_id)
            ).maybe_single().execute()
        except Exception as e:
            raise DatabaseError(
                f"Error retrieving profile: {str(e)}",
                operation="select",
                table=PROFILES_TABLE,
                original_error=e,
            )

        data = result.data if result else None
        if not data:
            return None
        return ProfileRead.model_validate(data)

    async def update_profile(
        self, partial: Union[ProfileUpdate, Dict[str, Any]]
    ) -> ProfileRead:
        """
        Merge `partial` into the current principal's profile.

        Raises:
            AuthenticationRequiredError: If nobody is signed in
            ValidationError: If the partial profile is malformed
            NotFoundError: If the profile row does not exist
            DatabaseError: If the update fails
        """
        if self.user is None:
            raise AuthenticationRequiredError("You must be signed in to update your profile")

        if isinstance(partial, ProfileUpdate):
            data = partial
        else:
            try:
                data = ProfileUpdate.model_validate(partial)
            except PydanticValidationError as e:
                self._notifier.error("Invalid profile data")
                raise ValidationError(
                    "Invalid profile data",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                    original_error=e,
                )

        payload = data.model_dump(mode="json", exclude_unset=True)
        payload["updated_at"] = utcnow().isoformat()

        try:
            result = self._client.table(PROFILES_TABLE).update(payload).eq(
                "id", str(self.user.id)
            ).execute()
        except Exception as e:
            self._notifier.error("Failed to update profile")
            raise DatabaseError(
                f"Error updating profile: {str(e)}",
                operation="update",
                table=PROFILES_TABLE,
                original_error=e,
            )

        if not result.data:
            self._notifier.error("Profile not found")
            raise NotFoundError(
                f"No profile found for user {self.user.id}",
                operation="update",
                table=PROFILES_TABLE,
            )

        merged = self.profile.model_dump() if self.profile else {}
        merged.update(result.data[0])
        self.profile = ProfileRead.model_validate(merged)

        self._notifier.success("Profile updated successfully")
        await self._emit()
        return self.profile

    async def ensure_profile(self) -> Optional[ProfileRead]:
        """
        Create a minimal profile from principal metadata when none exists.

        Returns the (possibly pre-existing) profile, or None when nobody is
        signed in.
        """
        if self.user is None:
            return None
        if self.profile is not None:
            return self.profile

        existing = await self.get_user_profile(self.user.id)
        if existing is None:
            logger.info(f"Repairing missing profile for {self.user.id}")
            existing = await self._create_profile(
                ProfileCreate(
                    id=self.user.id,
                    name=self.user.display_name,
                    role=self.user.declared_role or Role.STUDENT,
                    email=self.user.email,
                )
            )
        self.profile = existing
        await self._emit()
        return self.profile

    async def _create_profile(self, data: ProfileCreate) -> Optional[ProfileRead]:
        now = utcnow().isoformat()
        payload = data.model_dump(mode="json")
        payload.update({"created_at": now, "updated_at": now})
        try:
            result = self._client.table(PROFILES_TABLE).insert(payload).execute()
        except Exception as e:
            # The route guard's repair action covers a missing row later on
            logger.error(f"Failed to create profile for {data.id}: {e}")
            return None
        if not result.data:
            return None
        return ProfileRead.model_validate(result.data[0])

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the identity state for the API."""
        return {
            "user": self.user.model_dump(mode="json") if self.user else None,
            "profile": self.profile.model_dump(mode="json") if self.profile else None,
            "loading": self.loading,
        }


__all__ = [
    "AuthSession",
    "IdentityListener",
    "IdentityStore",
    "principal_from_user",
]
