# API Routes Module
from collabhub.api.routes import (
    auth,
    profiles,
    verification,
    projects,
    teams,
    applications,
    milestones,
    messages,
    notifications,
    reviews,
    navigation,
    session,
)

__all__ = [
    "auth",
    "profiles",
    "verification",
    "projects",
    "teams",
    "applications",
    "milestones",
    "messages",
    "notifications",
    "reviews",
    "navigation",
    "session",
]
