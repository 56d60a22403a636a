from django.test import TestCase, override_settings
from django.urls import reverse

from apps.core.models import User, Notification


class NotificationViewTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='mark', password='pw')
        self.other = User.objects.create_user(username='nina', password='pw')

        self.first = Notification.objects.create(recipient=self.user, title='First')
        self.second = Notification.objects.create(recipient=self.user, title='Second')
        self.foreign = Notification.objects.create(recipient=self.other, title='Not yours')

    def test_list_is_scoped_to_caller(self):
        self.client.force_login(self.user)
        body = self.client.get(reverse('notifications:list')).json()

        self.assertEqual([n['title'] for n in body['data']], ['Second', 'First'])
        self.assertEqual(body['unread'], 2)

    @override_settings(TEAMFLOW_NOTIFICATIONS_PAGE_SIZE=1)
    def test_list_is_limited(self):
        self.client.force_login(self.user)
        body = self.client.get(reverse('notifications:list')).json()

        self.assertEqual(body['count'], 1)
        self.assertEqual(body['unread'], 2)

    def test_mark_read(self):
        self.client.force_login(self.user)
        response = self.client.post(reverse('notifications:mark_read', args=[self.first.pk]))

        self.assertEqual(response.status_code, 200)
        self.first.refresh_from_db()
        self.assertTrue(self.first.read)

    def test_mark_read_twice_is_harmless(self):
        self.client.force_login(self.user)
        url = reverse('notifications:mark_read', args=[self.first.pk])
        self.client.post(url)

        response = self.client.post(url)
        self.assertTrue(response.json()['data']['read'])

    def test_cannot_mark_someone_elses(self):
        self.client.force_login(self.user)
        response = self.client.post(reverse('notifications:mark_read', args=[self.foreign.pk]))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['reason'], 'not-recipient')
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.read)

    def test_mark_all_read_touches_only_caller(self):
        self.client.force_login(self.user)
        response = self.client.post(reverse('notifications:mark_all_read'))

        self.assertEqual(response.json()['updated'], 2)
        self.assertFalse(Notification.objects.filter(recipient=self.user, read=False).exists())
        self.assertTrue(Notification.objects.filter(recipient=self.other, read=False).exists())

    def test_get_not_allowed_on_mark_read(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse('notifications:mark_read', args=[self.first.pk]))
        self.assertEqual(response.status_code, 405)
