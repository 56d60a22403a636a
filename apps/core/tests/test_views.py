import json
from unittest import mock

from django.test import TestCase
from django.urls import reverse

from apps.core.domain import Role, TaskStatus
from apps.core.models import User, Project, Task, Notification
from apps.core.policy import UnsupportedOperation


class ApiTestCase(TestCase):
    """Shared fixtures: one user per role plus JSON helpers"""

    def setUp(self):
        self.admin = User.objects.create_user(username='admin', password='pw', role=Role.ADMIN)
        self.manager = User.objects.create_user(username='manager', password='pw', role=Role.MANAGER)
        self.member = User.objects.create_user(username='member', password='pw', email='member@example.com')
        self.other = User.objects.create_user(username='other', password='pw')

    def send(self, method, url, data=None):
        return getattr(self.client, method)(
            url, data=json.dumps(data or {}), content_type='application/json'
        )


class AuthenticationTests(ApiTestCase):
    def test_login_with_username(self):
        response = self.send('post', reverse('core:login'), {'username': 'member', 'password': 'pw'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['username'], 'member')

    def test_login_with_email(self):
        response = self.send('post', reverse('core:login'), {'username': 'member@example.com', 'password': 'pw'})
        self.assertEqual(response.status_code, 200)

    def test_login_with_bad_password(self):
        response = self.send('post', reverse('core:login'), {'username': 'member', 'password': 'nope'})
        self.assertEqual(response.status_code, 401)

    def test_login_with_invalid_json(self):
        response = self.client.post(reverse('core:login'), data='{', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_anonymous_requests_get_401(self):
        response = self.client.get(reverse('core:project_list'))

        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])


class UserViewTests(ApiTestCase):
    def test_member_cannot_list_users(self):
        self.client.force_login(self.member)
        response = self.client.get(reverse('core:user_list'))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['reason'], 'role-required')

    def test_manager_lists_users(self):
        self.client.force_login(self.manager)
        response = self.client.get(reverse('core:user_list'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 4)

    def test_user_updates_own_profile(self):
        self.client.force_login(self.member)
        response = self.send('put', reverse('core:user_detail', args=[self.member.pk]), {'first_name': 'Mia'})

        self.assertEqual(response.status_code, 200)
        self.member.refresh_from_db()
        self.assertEqual(self.member.first_name, 'Mia')
        self.assertEqual(self.member.email, 'member@example.com')

    def test_member_cannot_change_own_role(self):
        self.client.force_login(self.member)
        self.send('put', reverse('core:user_detail', args=[self.member.pk]), {'role': 'admin'})

        self.member.refresh_from_db()
        self.assertEqual(self.member.role, Role.MEMBER)

    def test_user_cannot_update_someone_else(self):
        self.client.force_login(self.member)
        response = self.send('put', reverse('core:user_detail', args=[self.other.pk]), {'first_name': 'X'})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['reason'], 'not-self')

    def test_admin_changes_role(self):
        self.client.force_login(self.admin)
        response = self.send('put', reverse('core:user_detail', args=[self.other.pk]), {'role': 'manager'})

        self.assertEqual(response.status_code, 200)
        self.other.refresh_from_db()
        self.assertEqual(self.other.role, Role.MANAGER)

    def test_only_admin_deletes_users(self):
        self.client.force_login(self.manager)
        response = self.client.delete(reverse('core:user_detail', args=[self.other.pk]))
        self.assertEqual(response.json()['reason'], 'admin-only')

        self.client.force_login(self.admin)
        response = self.client.delete(reverse('core:user_detail', args=[self.other.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(User.objects.filter(pk=self.other.pk).exists())

    def test_deleting_project_owner_conflicts(self):
        Project.objects.create(name='Kept', owner=self.other)
        self.client.force_login(self.admin)

        response = self.client.delete(reverse('core:user_detail', args=[self.other.pk]))
        self.assertEqual(response.status_code, 409)

    def test_missing_user_is_404(self):
        self.client.force_login(self.member)
        response = self.client.get(reverse('core:user_detail', args=[999]))
        self.assertEqual(response.status_code, 404)


class ProjectViewTests(ApiTestCase):
    def test_creator_becomes_owner_and_member(self):
        self.client.force_login(self.member)
        response = self.send('post', reverse('core:project_list'), {
            'name': 'Launch',
            'members': [self.other.pk],
        })

        self.assertEqual(response.status_code, 201)
        project = Project.objects.get()
        self.assertEqual(project.owner, self.member)
        self.assertEqual(set(project.members.all()), {self.member, self.other})

    def test_owner_in_payload_is_ignored(self):
        self.client.force_login(self.member)
        self.send('post', reverse('core:project_list'), {'name': 'Launch', 'owner': self.other.pk})

        self.assertEqual(Project.objects.get().owner, self.member)

    def test_invalid_dates_are_rejected(self):
        self.client.force_login(self.member)
        response = self.send('post', reverse('core:project_list'), {
            'name': 'Launch', 'start_date': '2025-05-10', 'end_date': '2025-05-01',
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn('errors', response.json())

    def test_blank_status_is_rejected(self):
        project = Project.objects.create(name='Launch', owner=self.member)
        self.client.force_login(self.member)

        response = self.send('put', reverse('core:project_detail', args=[project.pk]), {'status': ''})
        self.assertEqual(response.status_code, 400)

        response = self.send('post', reverse('core:project_list'), {'name': 'Other', 'status': ''})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Project.objects.count(), 1)

    def test_only_owner_updates(self):
        project = Project.objects.create(name='Launch', owner=self.member)
        url = reverse('core:project_detail', args=[project.pk])

        self.client.force_login(self.other)
        response = self.send('put', url, {'name': 'Hijacked'})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['reason'], 'not-owner')

        self.client.force_login(self.member)
        response = self.send('put', url, {'status': 'active'})
        self.assertEqual(response.status_code, 200)

        project.refresh_from_db()
        self.assertEqual(project.name, 'Launch')
        self.assertEqual(project.status, 'active')

    def test_admin_deletes_any_project(self):
        project = Project.objects.create(name='Launch', owner=self.member)
        self.client.force_login(self.admin)

        response = self.client.delete(reverse('core:project_detail', args=[project.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Project.objects.exists())

    def test_detail_reports_permissions(self):
        project = Project.objects.create(name='Launch', owner=self.member)
        self.client.force_login(self.other)

        data = self.client.get(reverse('core:project_detail', args=[project.pk])).json()['data']
        self.assertEqual(data['permissions'], {'can_update': False, 'can_delete': False})

    def test_status_filter(self):
        Project.objects.create(name='A', owner=self.member, status='active')
        Project.objects.create(name='B', owner=self.member)
        self.client.force_login(self.member)

        response = self.client.get(reverse('core:project_list'), {'status': 'active'})
        self.assertEqual([p['name'] for p in response.json()['data']], ['A'])

        response = self.client.get(reverse('core:project_list'), {'status': 'bogus'})
        self.assertEqual(response.json()['count'], 0)


class TaskViewTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.task = Task.objects.create(title='Write docs', created_by=self.manager, assigned_to=self.member)
        self.url = reverse('core:task_detail', args=[self.task.pk])

    def test_create_sets_creator(self):
        self.client.force_login(self.member)
        response = self.send('post', reverse('core:task_list'), {
            'title': 'Review', 'created_by': self.admin.pk, 'tags': [' ui ', '']
        })

        self.assertEqual(response.status_code, 201)
        task = Task.objects.get(title='Review')
        self.assertEqual(task.created_by, self.member)
        self.assertEqual(task.status, TaskStatus.TODO)
        self.assertEqual(task.tags, ['ui'])

    def test_assignee_updates_status(self):
        self.client.force_login(self.member)
        response = self.send('put', self.url, {'status': 'done'})

        self.assertEqual(response.status_code, 200)
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, TaskStatus.DONE)
        self.assertEqual(self.task.title, 'Write docs')

    def test_invalid_status_is_rejected(self):
        self.client.force_login(self.member)
        response = self.send('put', self.url, {'status': 'blocked'})
        self.assertEqual(response.status_code, 400)

    def test_blank_status_is_rejected(self):
        self.client.force_login(self.member)
        response = self.send('put', self.url, {'status': ''})

        self.assertEqual(response.status_code, 400)
        self.assertIn('status', response.json()['errors'])
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, TaskStatus.TODO)

    def test_blank_priority_on_create_is_rejected(self):
        self.client.force_login(self.member)
        response = self.send('post', reverse('core:task_list'), {'title': 'X', 'priority': ''})

        self.assertEqual(response.status_code, 400)
        self.assertIn('priority', response.json()['errors'])
        self.assertFalse(Task.objects.filter(title='X').exists())

    def test_third_party_cannot_update(self):
        self.client.force_login(self.other)
        response = self.send('put', self.url, {'status': 'done'})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['reason'], 'not-authorized')

    def test_assignee_cannot_delete(self):
        self.client.force_login(self.member)
        response = self.client.delete(self.url)

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['reason'], 'not-creator')

    def test_creator_deletes(self):
        self.client.force_login(self.manager)
        response = self.client.delete(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Task.objects.exists())

    def test_list_filters(self):
        Task.objects.create(title='Urgent', created_by=self.manager, priority='urgent')
        self.client.force_login(self.other)

        response = self.client.get(reverse('core:task_list'), {'priority': 'urgent'})
        self.assertEqual([t['title'] for t in response.json()['data']], ['Urgent'])

        response = self.client.get(reverse('core:task_list'), {'assigned_to': self.member.pk})
        self.assertEqual(response.json()['count'], 1)

        response = self.client.get(reverse('core:task_list'), {'status': 'blocked'})
        self.assertEqual(response.json()['count'], 0)

    def test_policy_gap_is_not_turned_into_403(self):
        self.client.force_login(self.member)
        self.client.raise_request_exception = True

        with mock.patch('apps.core.permissions.access_policy._rules', {}):
            with self.assertRaises(UnsupportedOperation):
                self.client.get(self.url)


class HealthCheckTests(TestCase):
    def test_healthy(self):
        response = self.client.get(reverse('health'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['database'], 'ok')


class ChannelLayerDownTests(ApiTestCase):
    def test_task_is_created_when_push_fails(self):
        layer = mock.Mock()
        layer.group_send = mock.AsyncMock(side_effect=ConnectionError('redis down'))
        self.client.force_login(self.manager)

        with mock.patch('apps.notifications.services.get_channel_layer', return_value=layer):
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                response = self.send('post', reverse('core:task_list'), {
                    'title': 'Ship it', 'assigned_to': self.member.pk,
                })

        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(callbacks), 1)
        layer.group_send.assert_called_once()
        self.assertTrue(Notification.objects.filter(recipient=self.member).exists())
