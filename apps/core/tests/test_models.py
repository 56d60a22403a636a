from django.test import TestCase

from apps.core.domain import Actor, ProjectResource, Role, TaskResource, TaskStatus, UserRecord
from apps.core.models import User, Project, Task, Notification


class ModelConversionTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username='olivia', password='pw', role=Role.MANAGER)
        self.member = User.objects.create_user(username='mark', password='pw')

    def test_user_defaults_to_member_role(self):
        self.assertEqual(self.member.role, Role.MEMBER)
        self.assertEqual(self.member.as_actor(), Actor(id=self.member.pk, role=Role.MEMBER))
        self.assertEqual(self.member.as_resource(), UserRecord(id=self.member.pk))

    def test_user_dict_never_exposes_password(self):
        data = self.owner.to_dict()
        self.assertNotIn('password', data)
        self.assertEqual(data['role'], 'manager')

    def test_project_resource_includes_members(self):
        project = Project.objects.create(name='Launch', owner=self.owner)
        project.members.add(self.owner, self.member)

        resource = project.as_resource()
        self.assertIsInstance(resource, ProjectResource)
        self.assertEqual(resource.owner, self.owner.pk)
        self.assertEqual(resource.members, frozenset({self.owner.pk, self.member.pk}))

    def test_unsaved_project_has_no_members(self):
        project = Project(name='Draft', owner=self.owner)
        self.assertEqual(project.as_resource().members, frozenset())

    def test_task_resource(self):
        task = Task.objects.create(
            title='Write docs', created_by=self.owner, assigned_to=self.member,
            status=TaskStatus.REVIEW
        )

        self.assertEqual(
            task.as_resource(),
            TaskResource(created_by=self.owner.pk, assigned_to=self.member.pk, status=TaskStatus.REVIEW)
        )
        self.assertEqual(task.tags, [])

    def test_notifications_newest_first(self):
        first = Notification.objects.create(recipient=self.member, title='First')
        second = Notification.objects.create(recipient=self.member, title='Second')

        self.assertEqual(list(self.member.notifications.all()), [second, first])
        self.assertEqual(first.as_resource().owner, self.member.pk)
