# apps/core/models.py

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from .domain import (
    Actor, NotificationResource, ProjectResource, ProjectStatus, Role,
    TaskPriority, TaskResource, TaskStatus, UserRecord,
)


class User(AbstractUser):
    """
    Custom user model with a collaboration role

    Roles (admin, manager, member) drive the access policy together with
    the ownership fields on projects, tasks and notifications.
    """

    # === PROFILE ===
    phone = models.CharField(max_length=20, blank=True)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.MEMBER,
        db_index=True
    )

    # === METADATA ===
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tracker_user'
        ordering = ['username']

    def as_actor(self) -> Actor:
        """Authenticated actor seen by the access policy"""
        return Actor(id=self.pk, role=Role(self.role))

    def as_resource(self) -> UserRecord:
        return UserRecord(id=self.pk)

    def to_dict(self):
        """Public profile, never includes the password hash"""
        return {
            'id': self.pk,
            'username': self.username,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'phone': self.phone,
            'role': self.role,
            'is_active': self.is_active,
            'date_joined': self.date_joined,
        }

    def __str__(self):
        return self.get_full_name() or self.username


class Project(models.Model):
    """Project grouping tasks, owned by its creator"""

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=ProjectStatus.choices,
        default=ProjectStatus.PLANNING
    )
    owner = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='owned_projects'
    )
    members = models.ManyToManyField(
        User,
        related_name='projects',
        blank=True
    )
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    budget = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)]
    )
    progress = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'project'
        ordering = ['-created_at']

    def as_resource(self) -> ProjectResource:
        return ProjectResource(
            owner=self.owner_id,
            members=frozenset(self.members.values_list('id', flat=True)) if self.pk else frozenset(),
            status=ProjectStatus(self.status),
            progress=self.progress,
        )

    def to_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'description': self.description,
            'status': self.status,
            'owner': {'id': self.owner_id, 'name': str(self.owner)},
            'members': [{'id': m.pk, 'name': str(m)} for m in self.members.all()],
            'start_date': self.start_date,
            'end_date': self.end_date,
            'budget': self.budget,
            'progress': self.progress,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def __str__(self):
        return self.name


class Task(models.Model):
    """Unit of work, optionally attached to a project and assigned to a user"""

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.TODO,
        db_index=True
    )
    priority = models.CharField(
        max_length=10,
        choices=TaskPriority.choices,
        default=TaskPriority.MEDIUM
    )
    assigned_to = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks'
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='created_tasks'
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks'
    )
    due_date = models.DateField(null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['-created_at']

    def as_resource(self) -> TaskResource:
        return TaskResource(
            created_by=self.created_by_id,
            assigned_to=self.assigned_to_id,
            project=self.project_id,
            status=TaskStatus(self.status),
            priority=TaskPriority(self.priority),
        )

    def to_dict(self):
        return {
            'id': self.pk,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'priority': self.priority,
            'assigned_to': {'id': self.assigned_to_id, 'name': str(self.assigned_to)} if self.assigned_to_id else None,
            'created_by': {'id': self.created_by_id, 'name': str(self.created_by)},
            'project': {'id': self.project_id, 'name': self.project.name} if self.project_id else None,
            'due_date': self.due_date,
            'tags': self.tags,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def __str__(self):
        return f"{self.title} [{self.status}]"


class Notification(models.Model):
    """Message addressed to a single user"""

    recipient = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True)
    link = models.CharField(max_length=300, blank=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notification'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', 'read'], name='notif_recipient_read_idx'),
        ]

    def as_resource(self) -> NotificationResource:
        return NotificationResource(owner=self.recipient_id, read=self.read)

    def to_dict(self):
        return {
            'id': self.pk,
            'title': self.title,
            'message': self.message,
            'link': self.link,
            'read': self.read,
            'created_at': self.created_at,
        }

    def __str__(self):
        return f"{self.title} -> {self.recipient}"
