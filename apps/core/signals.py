# apps/core/signals.py

import logging
from functools import partial

from django.db import transaction
from django.db.models.signals import m2m_changed, post_save, pre_save
from django.dispatch import receiver

from .models import Notification, Project, Task, User

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Task)
def remember_previous_assignee(sender, instance, **kwargs):
    """
    Keeps the assignee stored in the database before this save
    """
    instance._previous_assignee_id = None
    if instance.pk:
        instance._previous_assignee_id = (
            sender.objects.filter(pk=instance.pk)
            .values_list('assigned_to_id', flat=True)
            .first()
        )


@receiver(post_save, sender=Task)
def notify_new_assignee(sender, instance, created, **kwargs):
    """
    Notifies a user when a task is assigned to them

    Self-assignment by the task creator is not notified.
    """
    assignee_id = instance.assigned_to_id
    if not assignee_id or assignee_id == instance.created_by_id:
        return

    if not created and assignee_id == getattr(instance, '_previous_assignee_id', None):
        return

    Notification.objects.create(
        recipient_id=assignee_id,
        title='New task assigned',
        message=f'You were assigned to "{instance.title}".',
        link=f'/api/tasks/{instance.pk}/',
    )
    logger.info("Task %s assigned to user %s", instance.pk, assignee_id)


@receiver(m2m_changed, sender=Project.members.through)
def notify_new_members(sender, instance, action, pk_set, reverse, **kwargs):
    """
    Notifies users added to a project (the owner is never notified)
    """
    if action != 'post_add' or not pk_set:
        return

    # project.members.add(...) vs user.projects.add(...)
    if reverse:
        projects = Project.objects.filter(pk__in=pk_set)
        pairs = [(project, instance.pk) for project in projects]
    else:
        pairs = [(instance, user_id) for user_id in pk_set]

    for project, user_id in pairs:
        if user_id == project.owner_id:
            continue
        Notification.objects.create(
            recipient_id=user_id,
            title='Added to project',
            message=f'You were added to the project "{project.name}".',
            link=f'/api/projects/{project.pk}/',
        )
        logger.info("User %s added to project %s", user_id, project.pk)


@receiver(post_save, sender=Notification)
def push_notification(sender, instance, created, **kwargs):
    """
    Delivers new notifications to the recipient's open WebSockets

    Sent only once the row is committed; a rolled back notification is
    never pushed.
    """
    if not created:
        return

    from apps.notifications.services import send_to_user
    transaction.on_commit(partial(send_to_user, instance.recipient_id, instance))


@receiver(post_save, sender=User)
def log_new_user(sender, instance, created, **kwargs):
    if created:
        logger.info("User %s created with role %s", instance.username, instance.role)
