"""
Progress helpers for projects and milestones.

Percentages are whole numbers in [0, 100]; an empty collection counts as
no progress.
"""

from datetime import date, datetime, timezone
from typing import Iterable, Optional

from collabhub.domain.models import MilestoneStatus, ProjectStatus, TaskStatus


def _percent(done: int, total: int) -> int:
    if total == 0:
        return 0
    return round(done / total * 100)


def _today(today: Optional[date]) -> date:
    return today or datetime.now(timezone.utc).date()


def project_progress(milestones: Iterable) -> int:
    """Share of milestones that are completed."""
    milestones = list(milestones)
    done = sum(1 for m in milestones if m.status == MilestoneStatus.COMPLETED)
    return _percent(done, len(milestones))


def milestone_progress(tasks: Iterable) -> int:
    """Share of a milestone's tasks that are completed."""
    tasks = list(tasks)
    done = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
    return _percent(done, len(tasks))


def remaining_days(end_date: date, today: Optional[date] = None) -> int:
    """Days left until `end_date`, never negative."""
    return max(0, (end_date - _today(today)).days)


def is_project_overdue(project, today: Optional[date] = None) -> bool:
    return project.end_date < _today(today) and project.status != ProjectStatus.COMPLETED


def is_milestone_overdue(milestone, today: Optional[date] = None) -> bool:
    if milestone.due_date is None:
        return False
    return milestone.due_date < _today(today) and milestone.status != MilestoneStatus.COMPLETED
