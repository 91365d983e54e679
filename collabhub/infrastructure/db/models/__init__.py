"""
SQLModel ORM Models for CollabHub

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from collabhub.infrastructure.db.models.base import (
    ReadModel,
    TimestampMixin,
    UUIDMixin,
)
from collabhub.infrastructure.db.models.profile import (
    Profile,
    ProfileBase,
    ProfileCreate,
    ProfileUpdate,
    ProfileRead,
)
from collabhub.infrastructure.db.models.verification import (
    UserVerification,
    UserVerificationRead,
    VerificationCode,
    VerificationCodeRead,
)
from collabhub.infrastructure.db.models.team import (
    Team,
    TeamCreate,
    TeamUpdate,
    TeamRead,
    TeamMember,
    TeamMemberRead,
)
from collabhub.infrastructure.db.models.project import (
    Project,
    ProjectCreate,
    ProjectUpdate,
    ProjectRead,
    ProjectMilestone,
    MilestoneCreate,
    MilestoneUpdate,
    MilestoneRead,
    ProjectTask,
    TaskCreate,
    TaskUpdate,
    TaskRead,
)
from collabhub.infrastructure.db.models.application import (
    Application,
    ApplicationCreate,
    ApplicationRead,
)
from collabhub.infrastructure.db.models.message import (
    ProjectMessage,
    TeamMessage,
    MessageRead,
)
from collabhub.infrastructure.db.models.notification import (
    Notification,
    NotificationCreate,
    NotificationRead,
)
from collabhub.infrastructure.db.models.review import (
    Review,
    ReviewCreate,
    ReviewUpdate,
    ReviewRead,
    UserRating,
)


__all__ = [
    # Base
    "ReadModel",
    "TimestampMixin",
    "UUIDMixin",
    # Profile
    "Profile",
    "ProfileBase",
    "ProfileCreate",
    "ProfileUpdate",
    "ProfileRead",
    # Verification
    "UserVerification",
    "UserVerificationRead",
    "VerificationCode",
    "VerificationCodeRead",
    # Teams
    "Team",
    "TeamCreate",
    "TeamUpdate",
    "TeamRead",
    "TeamMember",
    "TeamMemberRead",
    # Projects
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectRead",
    "ProjectMilestone",
    "MilestoneCreate",
    "MilestoneUpdate",
    "MilestoneRead",
    "ProjectTask",
    "TaskCreate",
    "TaskUpdate",
    "TaskRead",
    # Applications
    "Application",
    "ApplicationCreate",
    "ApplicationRead",
    # Messages
    "ProjectMessage",
    "TeamMessage",
    "MessageRead",
    # Notifications
    "Notification",
    "NotificationCreate",
    "NotificationRead",
    # Reviews
    "Review",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewRead",
    "UserRating",
]
