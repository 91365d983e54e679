"""
Client route surface and the guard requirements attached to each route.

Paths use the same `{param}` placeholders as FastAPI so the table reads
like a router declaration.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from collabhub.domain.models import Permission, Role


SIGNIN = "/signin"
SIGNIN_STUDENT = "/signin/student"
SIGNIN_STARTUP = "/signin/startup"
COMPLETE_PROFILE = "/complete-profile"
VERIFY_COLLEGE = "/verify-college"
DASHBOARD = "/dashboard"
NOT_FOUND = "/404"


def signin_route_for(role: Optional[Role]) -> str:
    """Role-specific sign-in route, or the generic one."""
    if role == Role.STUDENT:
        return SIGNIN_STUDENT
    if role == Role.STARTUP:
        return SIGNIN_STARTUP
    return SIGNIN


@dataclass(frozen=True)
class GuardRequirements:
    """What a protected route demands of the current principal."""
    required_role: Optional[Role] = None
    required_permission: Optional[Permission] = None
    require_verification: bool = False


@dataclass(frozen=True)
class RouteSpec:
    path: str
    public: bool = False
    requirements: GuardRequirements = GuardRequirements()

    @property
    def pattern(self) -> "re.Pattern[str]":
        return re.compile("^" + re.sub(r"\{[^/]+\}", r"[^/]+", self.path) + "/?$")

    def matches(self, path: str) -> bool:
        return bool(self.pattern.match(path))


ROUTE_TABLE: Tuple[RouteSpec, ...] = (
    RouteSpec("/", public=True),
    RouteSpec("/about", public=True),
    RouteSpec("/how-it-works", public=True),
    RouteSpec("/for-students", public=True),
    RouteSpec("/for-startups", public=True),
    RouteSpec("/contact", public=True),
    RouteSpec(SIGNIN, public=True),
    RouteSpec("/signin/{role}", public=True),
    RouteSpec("/signup", public=True),
    RouteSpec("/signup/{role}", public=True),
    RouteSpec(DASHBOARD),
    RouteSpec("/projects"),
    RouteSpec("/projects/{id}"),
    RouteSpec(
        "/create-project",
        requirements=GuardRequirements(
            required_role=Role.STARTUP,
            required_permission=Permission.CREATE_PROJECT,
        ),
    ),
    RouteSpec("/teams"),
    RouteSpec("/teams/{id}"),
    RouteSpec("/messages"),
    RouteSpec("/profile"),
    RouteSpec(COMPLETE_PROFILE),
    RouteSpec(VERIFY_COLLEGE, requirements=GuardRequirements(required_role=Role.STUDENT)),
    RouteSpec(
        "/college-admin",
        requirements=GuardRequirements(
            required_role=Role.COLLEGE_ADMIN,
            required_permission=Permission.VERIFY_STUDENTS,
        ),
    ),
)


def match_route(path: str) -> Optional[RouteSpec]:
    """First route in the table matching `path`, ignoring any query string."""
    path = path.split("?", 1)[0] or "/"
    for route in ROUTE_TABLE:
        if route.matches(path):
            return route
    return None
