# apps/core/domain.py

"""
Domain records used by the authorization and statistics core

The ORM models convert themselves into these records (``as_actor`` /
``as_resource``) so that the policy and the statistics engine work over
plain, immutable values and never touch the database.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from django.db import models


# === ENUMERATIONS ===

class Role(models.TextChoices):
    ADMIN = 'admin', 'Administrator'
    MANAGER = 'manager', 'Manager'
    MEMBER = 'member', 'Member'


class ProjectStatus(models.TextChoices):
    PLANNING = 'planning', 'Planning'
    ACTIVE = 'active', 'Active'
    ON_HOLD = 'on-hold', 'On hold'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class TaskStatus(models.TextChoices):
    TODO = 'todo', 'To do'
    IN_PROGRESS = 'in-progress', 'In progress'
    REVIEW = 'review', 'Review'
    DONE = 'done', 'Done'


class TaskPriority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


class Action(models.TextChoices):
    VIEW = 'view', 'View'
    CREATE = 'create', 'Create'
    UPDATE = 'update', 'Update'
    DELETE = 'delete', 'Delete'
    MARK_READ = 'mark-read', 'Mark as read'


class Capability(models.TextChoices):
    """Operations gated by role alone, independent of a resource instance"""

    LIST_USERS = 'list-users', 'List all users'
    VIEW_DASHBOARD = 'view-dashboard', 'View the global dashboard'


# === RECORDS ===

@dataclass(frozen=True)
class Actor:
    """Authenticated party attempting an action"""

    id: int
    role: Role

    def __post_init__(self):
        # Closed enumeration: unknown roles raise ValueError
        object.__setattr__(self, 'role', Role(self.role))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class ProjectResource:
    owner: int
    members: FrozenSet[int] = field(default_factory=frozenset)
    status: ProjectStatus = ProjectStatus.PLANNING
    progress: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'members', frozenset(self.members))
        object.__setattr__(self, 'status', ProjectStatus(self.status))
        if not 0 <= self.progress <= 100:
            raise ValueError(f"progress must be between 0 and 100, got {self.progress}")


@dataclass(frozen=True)
class TaskResource:
    created_by: int
    assigned_to: Optional[int] = None
    project: Optional[int] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM

    def __post_init__(self):
        object.__setattr__(self, 'status', TaskStatus(self.status))
        object.__setattr__(self, 'priority', TaskPriority(self.priority))


@dataclass(frozen=True)
class NotificationResource:
    owner: int
    read: bool = False


@dataclass(frozen=True)
class UserRecord:
    id: int
