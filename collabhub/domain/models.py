"""
Domain Models for CollabHub

Pure Python/Pydantic models with no framework dependencies.
These models define the core enumerations, the principal, and the
profile rules shared by the identity store and the route guard.
"""

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError


logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Roles known to the authorization policy."""
    STUDENT = "student"
    STARTUP = "startup"
    COLLEGE_ADMIN = "college_admin"
    PLATFORM_ADMIN = "platform_admin"


class SignUpRole(str, Enum):
    """Roles a principal may pick for themselves at sign-up."""
    STUDENT = "student"
    STARTUP = "startup"


class Permission(str, Enum):
    """Atomic capabilities checked against a role's allow-set."""
    CREATE_PROJECT = "create_project"
    EDIT_PROJECT = "edit_project"
    DELETE_PROJECT = "delete_project"
    VIEW_APPLICATIONS = "view_applications"
    MANAGE_APPLICATIONS = "manage_applications"
    CREATE_TEAM = "create_team"
    EDIT_TEAM = "edit_team"
    DELETE_TEAM = "delete_team"
    JOIN_TEAM = "join_team"
    LEAVE_TEAM = "leave_team"
    MANAGE_TEAM_MEMBERS = "manage_team_members"
    SUBMIT_APPLICATION = "submit_application"
    VERIFY_COLLEGE = "verify_college"
    VERIFY_STUDENTS = "verify_students"
    APPROVE_PROJECTS = "approve_projects"
    APPROVE_PARTNERS = "approve_partners"
    MANAGE_USERS = "manage_users"


class ProjectStatus(str, Enum):
    """Project lifecycle status."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProjectCategory(str, Enum):
    """Project categories offered when posting a project."""
    WEB_DEVELOPMENT = "web_development"
    MOBILE_DEVELOPMENT = "mobile_development"
    DATA_SCIENCE = "data_science"
    MACHINE_LEARNING = "machine_learning"
    UI_UX_DESIGN = "ui_ux_design"
    DEVOPS = "devops"
    CYBERSECURITY = "cybersecurity"
    BLOCKCHAIN = "blockchain"
    MARKET_RESEARCH = "market_research"
    OTHER = "other"


class PaymentModel(str, Enum):
    """How a startup compensates the team."""
    UNPAID = "unpaid"
    STIPEND = "stipend"
    HOURLY = "hourly"
    FIXED = "fixed"


class ApplicationStatus(str, Enum):
    """Application status. Pending moves to exactly one terminal status."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApplicationStatus.PENDING

    def can_transition_to(self, target: "ApplicationStatus") -> bool:
        """Only pending applications may change, and only to a terminal status."""
        return self is ApplicationStatus.PENDING and target.is_terminal


class MilestoneStatus(str, Enum):
    """Milestone progress status."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELAYED = "delayed"


# Older rows written before the task status enumeration was unified
LEGACY_TASK_STATUSES = {
    "not_started": "todo",
    "done": "completed",
}


class TaskStatus(str, Enum):
    """Canonical task status for project tasks."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"
    BLOCKED = "blocked"

    @classmethod
    def _missing_(cls, value: object) -> Optional["TaskStatus"]:
        if isinstance(value, str) and value in LEGACY_TASK_STATUSES:
            return cls(LEGACY_TASK_STATUSES[value])
        return None


class TeamMemberRole(str, Enum):
    """Role of a member inside a team."""
    LEAD = "lead"
    MEMBER = "member"


class TeamMemberStatus(str, Enum):
    """Membership status. Invited members stay pending until they accept."""
    ACTIVE = "active"
    PENDING = "pending"


class NotificationType(str, Enum):
    """Kinds of persisted notifications."""
    PROJECT_INVITATION = "project_invitation"
    APPLICATION_RECEIVED = "application_received"
    APPLICATION_ACCEPTED = "application_accepted"
    APPLICATION_REJECTED = "application_rejected"
    MILESTONE_COMPLETED = "milestone_completed"
    TASK_ASSIGNED = "task_assigned"
    REVIEW_RECEIVED = "review_received"
    PROJECT_COMPLETED = "project_completed"


class Principal(BaseModel):
    """Authenticated identity issued by the auth provider."""
    id: uuid.UUID
    email: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        name = self.metadata.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
        if self.email:
            return self.email.split("@")[0]
        return ""

    @property
    def declared_role(self) -> Optional[Role]:
        """Role picked at sign-up. Only student and startup are honoured."""
        try:
            return Role(SignUpRole(self.metadata.get("role")).value)
        except ValueError:
            return None


class Education(BaseModel):
    """One entry of a student's education history."""
    institution: str
    degree: str
    field: str
    start_year: int
    end_year: Optional[int] = None
    current: bool = False


# =============================================================================
# Profile rules
# =============================================================================

def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def missing_profile_fields(
    role: Optional[Role],
    name: Optional[str],
    company_name: Optional[str] = None,
    college: Optional[str] = None,
) -> List[str]:
    """
    Return the role-required profile fields that are still blank.

    Every role needs a name; startups also need a company name and
    students a college.
    """
    missing = []
    if _is_blank(name):
        missing.append("name")
    if role == Role.STARTUP and _is_blank(company_name):
        missing.append("company_name")
    if role == Role.STUDENT and _is_blank(college):
        missing.append("college")
    return missing


def is_profile_complete(profile: Any) -> bool:
    """Classify a profile-like object (or None) as complete or incomplete."""
    if profile is None:
        return False
    return not missing_profile_fields(
        getattr(profile, "role", None),
        getattr(profile, "name", None),
        getattr(profile, "company_name", None),
        getattr(profile, "college", None),
    )


def normalize_string_list(value: Any) -> Optional[List[str]]:
    """Coerce a list-like field to a list of trimmed, non-empty strings."""
    if value is None:
        return None
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        items = [value]
    return [str(item).strip() for item in items if str(item).strip()]


def parse_education(value: Any) -> List[Dict[str, Any]]:
    """
    Parse a semi-structured education value into a list of entries.

    Accepts a JSON string, a single mapping, or a list of mappings. Anything
    that cannot be parsed is logged and replaced by an empty list.
    """
    if value is None or value == "":
        return []

    raw = value
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Could not parse education JSON, defaulting to []: {e}")
            return []

    if isinstance(raw, dict):
        raw = [raw]

    if not isinstance(raw, list):
        logger.warning(f"Unexpected education value of type {type(raw).__name__}, defaulting to []")
        return []

    try:
        entries = [
            entry if isinstance(entry, Education) else Education.model_validate(_camel_to_snake(entry))
            for entry in raw
        ]
    except (PydanticValidationError, TypeError) as e:
        logger.warning(f"Invalid education entry, defaulting to []: {e}")
        return []

    return [entry.model_dump() for entry in entries]


def _camel_to_snake(entry: Any) -> Any:
    # Older clients send startYear/endYear
    if not isinstance(entry, dict):
        return entry
    renamed = dict(entry)
    for camel, snake in (("startYear", "start_year"), ("endYear", "end_year")):
        if camel in renamed and snake not in renamed:
            renamed[snake] = renamed.pop(camel)
    return renamed
