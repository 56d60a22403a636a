from unittest import mock

from django.db import transaction
from django.test import TestCase

from apps.core.models import User, Project, Task, Notification


class AssignmentNotificationTests(TestCase):
    def setUp(self):
        self.creator = User.objects.create_user(username='carla', password='pw')
        self.assignee = User.objects.create_user(username='alex', password='pw')

    def test_new_assignee_is_notified(self):
        task = Task.objects.create(title='Fix login', created_by=self.creator, assigned_to=self.assignee)

        notification = Notification.objects.get(recipient=self.assignee)
        self.assertEqual(notification.link, f'/api/tasks/{task.pk}/')
        self.assertFalse(notification.read)

    def test_creator_assigning_self_is_not_notified(self):
        Task.objects.create(title='Fix login', created_by=self.creator, assigned_to=self.creator)
        self.assertFalse(Notification.objects.exists())

    def test_saving_without_reassignment_does_not_notify_again(self):
        task = Task.objects.create(title='Fix login', created_by=self.creator, assigned_to=self.assignee)
        task.title = 'Fix login page'
        task.save()

        self.assertEqual(Notification.objects.filter(recipient=self.assignee).count(), 1)

    def test_reassignment_notifies_new_assignee(self):
        task = Task.objects.create(title='Fix login', created_by=self.creator)
        self.assertFalse(Notification.objects.exists())

        task.assigned_to = self.assignee
        task.save()

        self.assertEqual(Notification.objects.filter(recipient=self.assignee).count(), 1)


class MembershipNotificationTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username='olivia', password='pw')
        self.member = User.objects.create_user(username='mark', password='pw')
        self.project = Project.objects.create(name='Launch', owner=self.owner)

    def test_added_member_is_notified_owner_is_not(self):
        self.project.members.add(self.owner, self.member)

        self.assertEqual(
            list(Notification.objects.values_list('recipient_id', flat=True)),
            [self.member.pk]
        )
        self.assertEqual(Notification.objects.get().link, f'/api/projects/{self.project.pk}/')

    def test_reverse_add_is_notified(self):
        self.member.projects.add(self.project)
        self.assertTrue(Notification.objects.filter(recipient=self.member).exists())


class PushTests(TestCase):
    def test_new_notification_is_pushed_to_recipient(self):
        user = User.objects.create_user(username='mark', password='pw')

        with mock.patch('apps.notifications.services.send_to_user') as send_to_user:
            with self.captureOnCommitCallbacks(execute=True):
                notification = Notification.objects.create(recipient=user, title='Hello')
                send_to_user.assert_not_called()

            notification.read = True
            with self.captureOnCommitCallbacks(execute=True):
                notification.save()

        send_to_user.assert_called_once_with(user.pk, notification)

    def test_rolled_back_notification_is_not_pushed(self):
        user = User.objects.create_user(username='mark', password='pw')

        with mock.patch('apps.notifications.services.send_to_user') as send_to_user:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                try:
                    with transaction.atomic():
                        Notification.objects.create(recipient=user, title='Hello')
                        raise RuntimeError('abort')
                except RuntimeError:
                    pass

        self.assertEqual(callbacks, [])
        send_to_user.assert_not_called()
