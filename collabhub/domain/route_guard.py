"""
Route Guard

Decides, for one navigation, whether to show a loading state, render the
route, or redirect elsewhere. The guard owns no state; it reads the
identity store and the authorization policy.

Evaluation order (first match wins):
1. identity or authorization still loading -> loading
2. no principal -> sign-in route for the remembered preferred role
3. incomplete profile -> /complete-profile
4. verification required but missing -> /verify-college
5. required role mismatch -> /dashboard with a notice
6. required permission missing -> /dashboard with a notice
7. render
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from collabhub.domain.authorization import AuthorizationPolicy
from collabhub.domain.identity import IdentityStore
from collabhub.domain.models import Role, is_profile_complete
from collabhub.domain.notifier import Notifier
from collabhub.domain.routes import (
    COMPLETE_PROFILE,
    DASHBOARD,
    NOT_FOUND,
    VERIFY_COLLEGE,
    GuardRequirements,
    match_route,
    signin_route_for,
)
from collabhub.infrastructure.db.models.profile import ProfileRead


logger = logging.getLogger(__name__)

ROLE_DENIED_NOTICE = "You don't have access to this page"
PERMISSION_DENIED_NOTICE = "You don't have permission to access this page"


class GuardOutcome(str, Enum):
    LOADING = "loading"
    RENDER = "render"
    REDIRECT = "redirect"
    NOT_FOUND = "not_found"


class GuardDecision(BaseModel):
    outcome: GuardOutcome
    target: Optional[str] = None
    reason: Optional[str] = None
    notice: Optional[str] = None

    @classmethod
    def loading(cls) -> "GuardDecision":
        return cls(outcome=GuardOutcome.LOADING, reason="loading")

    @classmethod
    def render(cls) -> "GuardDecision":
        return cls(outcome=GuardOutcome.RENDER)

    @classmethod
    def redirect(cls, target: str, reason: str, notice: Optional[str] = None) -> "GuardDecision":
        return cls(outcome=GuardOutcome.REDIRECT, target=target, reason=reason, notice=notice)


class RouteGuard:
    """Per-navigation access decision for one client context."""

    def __init__(
        self,
        identity: IdentityStore,
        authorization: AuthorizationPolicy,
        notifier: Notifier,
    ):
        self._identity = identity
        self._authorization = authorization
        self._notifier = notifier

    def evaluate(
        self,
        path: str,
        requirements: Optional[GuardRequirements] = None,
        preferred_role: Optional[Role] = None,
    ) -> GuardDecision:
        requirements = requirements or GuardRequirements()
        identity = self._identity
        authorization = self._authorization

        if identity.loading or authorization.is_loading:
            return GuardDecision.loading()

        if identity.user is None:
            return GuardDecision.redirect(signin_route_for(preferred_role), "unauthenticated")

        if not is_profile_complete(identity.profile) and path != COMPLETE_PROFILE:
            return GuardDecision.redirect(COMPLETE_PROFILE, "incomplete_profile")

        if (
            requirements.require_verification
            and not authorization.is_verified
            and path != VERIFY_COLLEGE
        ):
            return GuardDecision.redirect(VERIFY_COLLEGE, "unverified")

        if requirements.required_role is not None and authorization.role != requirements.required_role:
            return self._deny("role_mismatch", ROLE_DENIED_NOTICE)

        if (
            requirements.required_permission is not None
            and not authorization.has_permission(requirements.required_permission)
        ):
            return self._deny("missing_permission", PERMISSION_DENIED_NOTICE)

        return GuardDecision.render()

    def resolve(self, path: str, preferred_role: Optional[Role] = None) -> GuardDecision:
        """Evaluate a client path against the route table."""
        path = path.split("?", 1)[0].rstrip("/") or "/"
        route = match_route(path)
        if route is None:
            return GuardDecision(outcome=GuardOutcome.NOT_FOUND, target=NOT_FOUND, reason="not_found")
        if route.public:
            return GuardDecision.render()
        return self.evaluate(path, route.requirements, preferred_role)

    def _deny(self, reason: str, notice: str) -> GuardDecision:
        # Denials are expected outcomes, not errors
        logger.info(f"Route denied ({reason}) for {self._identity.user_id}")
        self._notifier.error(notice)
        return GuardDecision.redirect(DASHBOARD, reason, notice)

    async def repair_missing_profile(self) -> Optional[ProfileRead]:
        """Create a profile row for a principal that has none."""
        if self._identity.user is None or self._identity.profile is not None:
            return self._identity.profile
        return await self._identity.ensure_profile()
