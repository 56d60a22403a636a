# apps/analytics/stats.py

"""
Rollup statistics over tasks and projects

Pure functions over already-fetched collections. Anything exposing a
``status`` attribute (and ``priority`` for tasks) is accepted: ORM
instances, domain records or test doubles.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable

from apps.core.domain import ProjectStatus, TaskPriority, TaskStatus


def round_percentage(part: int, whole: int):
    """
    Percentage with two decimal places, or 0 when ``whole`` is zero

    The value is formatted to two decimals and parsed back, so 1/3 gives
    33.33 and not 33.333333333333336.
    """
    if whole <= 0:
        return 0
    return float(f"{part / whole * 100:.2f}")


@dataclass(frozen=True)
class DashboardStats:
    total_tasks: int
    completed_tasks: int
    completion_rate: float
    tasks_by_status: Dict[str, int] = field(default_factory=dict)
    tasks_by_priority: Dict[str, int] = field(default_factory=dict)
    total_projects: int = 0
    active_projects: int = 0
    total_users: int = 0

    def as_dict(self) -> Dict:
        return {
            'tasks': {
                'total': self.total_tasks,
                'completed': self.completed_tasks,
                'completion_rate': self.completion_rate,
                'by_status': dict(self.tasks_by_status),
                'by_priority': dict(self.tasks_by_priority),
            },
            'projects': {
                'total': self.total_projects,
                'active': self.active_projects,
            },
            'users': {
                'total': self.total_users,
            },
        }


@dataclass(frozen=True)
class ProjectProgressSummary:
    total_tasks: int
    completed_tasks: int
    progress: float
    tasks_by_status: Dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> Dict:
        return {
            'total_tasks': self.total_tasks,
            'completed_tasks': self.completed_tasks,
            'progress': self.progress,
            'tasks_by_status': dict(self.tasks_by_status),
        }


def _group_by(values: Iterable[str]) -> Dict[str, int]:
    # Only observed keys, in order of first appearance
    return dict(Counter(values))


def compute_dashboard_stats(all_tasks, all_projects, active_user_count: int) -> DashboardStats:
    """
    Global dashboard figures

    ``active_user_count`` is taken as given; users are not filtered here.
    """
    tasks = list(all_tasks)
    projects = list(all_projects)

    # Illegal status/priority values raise ValueError here
    statuses = [TaskStatus(task.status).value for task in tasks]
    priorities = [TaskPriority(task.priority).value for task in tasks]
    project_statuses = [ProjectStatus(project.status) for project in projects]

    tasks_by_status = _group_by(statuses)
    total_tasks = len(tasks)
    completed_tasks = tasks_by_status.get(TaskStatus.DONE.value, 0)

    return DashboardStats(
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        completion_rate=round_percentage(completed_tasks, total_tasks),
        tasks_by_status=tasks_by_status,
        tasks_by_priority=_group_by(priorities),
        total_projects=len(projects),
        active_projects=sum(1 for status in project_statuses if status == ProjectStatus.ACTIVE),
        total_users=active_user_count,
    )


def compute_project_stats(project_tasks) -> ProjectProgressSummary:
    """
    Progress summary for one project

    ``project_tasks`` must already be filtered to that project.
    """
    total_tasks = 0
    completed_tasks = 0
    tasks_by_status = {}

    for task in project_tasks:
        status = TaskStatus(task.status)
        total_tasks += 1
        if status == TaskStatus.DONE:
            completed_tasks += 1
        tasks_by_status[status.value] = tasks_by_status.get(status.value, 0) + 1

    return ProjectProgressSummary(
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        progress=round_percentage(completed_tasks, total_tasks),
        tasks_by_status=tasks_by_status,
    )
