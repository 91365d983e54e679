"""
Project form validation, catalogs and templates.

`validate_project` checks a raw project form before it is sent to the
backend and returns every problem at once, keyed by field name.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel

from collabhub.domain.models import PaymentModel, ProjectCategory


@dataclass
class ProjectValidation:
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _as_number(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def validate_project(data: Mapping[str, Any]) -> ProjectValidation:
    """Validate a project form."""
    result = ProjectValidation()
    errors = result.errors

    if _blank(data.get("title")):
        errors["title"] = "Title is required"

    if _blank(data.get("description")):
        errors["description"] = "Description is required"

    category = data.get("category")
    if _blank(category):
        errors["category"] = "Category is required"
    elif getattr(category, "value", category) not in {c.value for c in ProjectCategory}:
        errors["category"] = "Category is not recognized"

    start = _as_date(data.get("start_date"))
    end = _as_date(data.get("end_date"))
    if start is None:
        errors["start_date"] = "Start date is required"
    if end is None:
        errors["end_date"] = "End date is required"
    if start is not None and end is not None and end < start:
        errors["end_date"] = "End date must be after start date"

    team_size = _as_number(data.get("team_size"))
    if team_size is None or team_size <= 0:
        errors["team_size"] = "Team size must be a positive number"

    payment_model = data.get("payment_model")
    if _blank(payment_model):
        errors["payment_model"] = "Payment model is required"
    elif payment_model == PaymentModel.STIPEND.value:
        stipend = _as_number(data.get("stipend_amount"))
        if stipend is None or stipend <= 0:
            errors["stipend_amount"] = "Stipend amount must be a positive number"

    deliverables = data.get("deliverables")
    if not deliverables:
        errors["deliverables"] = "At least one deliverable is required"

    return result


# =============================================================================
# Catalogs
# =============================================================================

class CatalogOption(BaseModel):
    value: str
    label: str


CATEGORIES: List[CatalogOption] = [
    CatalogOption(value=ProjectCategory.WEB_DEVELOPMENT.value, label="Web Development"),
    CatalogOption(value=ProjectCategory.MOBILE_DEVELOPMENT.value, label="Mobile Development"),
    CatalogOption(value=ProjectCategory.DATA_SCIENCE.value, label="Data Science"),
    CatalogOption(value=ProjectCategory.MACHINE_LEARNING.value, label="Machine Learning"),
    CatalogOption(value=ProjectCategory.UI_UX_DESIGN.value, label="UI/UX Design"),
    CatalogOption(value=ProjectCategory.DEVOPS.value, label="DevOps"),
    CatalogOption(value=ProjectCategory.CYBERSECURITY.value, label="Cybersecurity"),
    CatalogOption(value=ProjectCategory.BLOCKCHAIN.value, label="Blockchain"),
    CatalogOption(value=ProjectCategory.MARKET_RESEARCH.value, label="Market Research"),
    CatalogOption(value=ProjectCategory.OTHER.value, label="Other"),
]

PAYMENT_MODELS: List[CatalogOption] = [
    CatalogOption(value=PaymentModel.UNPAID.value, label="Unpaid"),
    CatalogOption(value=PaymentModel.STIPEND.value, label="Stipend"),
    CatalogOption(value=PaymentModel.HOURLY.value, label="Hourly Rate"),
    CatalogOption(value=PaymentModel.FIXED.value, label="Fixed Amount"),
]


class ProjectTemplate(BaseModel):
    """Starting point for a new project form."""
    title: str
    description: str
    category: ProjectCategory
    required_skills: List[str]
    payment_model: PaymentModel
    deliverables: List[str]


PROJECT_TEMPLATES: List[ProjectTemplate] = [
    ProjectTemplate(
        title="Website Development",
        description="Create a responsive website with modern UI/UX design, optimized for all devices.",
        category=ProjectCategory.WEB_DEVELOPMENT,
        required_skills=["HTML", "CSS", "JavaScript", "React"],
        payment_model=PaymentModel.FIXED,
        deliverables=["Responsive website", "Source code", "Documentation"],
    ),
    ProjectTemplate(
        title="Mobile App Development",
        description="Build a cross-platform mobile application with a user-friendly interface.",
        category=ProjectCategory.MOBILE_DEVELOPMENT,
        required_skills=["React Native", "JavaScript", "UI/UX Design"],
        payment_model=PaymentModel.HOURLY,
        deliverables=["iOS app", "Android app", "Source code", "User documentation"],
    ),
    ProjectTemplate(
        title="Data Analysis Project",
        description="Analyze data sets to identify trends and provide actionable insights.",
        category=ProjectCategory.DATA_SCIENCE,
        required_skills=["Python", "SQL", "Data Visualization", "Statistics"],
        payment_model=PaymentModel.STIPEND,
        deliverables=["Data analysis report", "Visualizations", "Presentation", "Recommendations"],
    ),
    ProjectTemplate(
        title="UI/UX Design Project",
        description="Design a modern and user-friendly interface for a digital product.",
        category=ProjectCategory.UI_UX_DESIGN,
        required_skills=["Figma", "UI Design", "UX Research", "Prototyping"],
        payment_model=PaymentModel.FIXED,
        deliverables=["Design mockups", "Prototypes", "Design system", "User flow documentation"],
    ),
]
