# apps/notifications/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.core.exceptions import PermissionDenied
from django.utils import timezone

from apps.core.domain import Action
from apps.core.permissions import authorize
from .services import user_group_name

logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncWebsocketConsumer):
    """
    Real-time notifications for the connected user

    Each user has a personal group; ``send_to_user`` publishes into it.
    Clients may send:
    - {"type": "ping"}
    - {"type": "mark_read", "notification_id": N}
    """

    async def connect(self):
        self.user = self.scope.get('user')

        if self.user is None or not self.user.is_authenticated:
            logger.warning("WebSocket rejected - unauthenticated user")
            await self.close()
            return

        self.user_group_name = user_group_name(self.user.id)

        await self.channel_layer.group_add(
            self.user_group_name,
            self.channel_name
        )

        await self.accept()
        logger.info("Notifications connected for %s", self.user.username)

    async def disconnect(self, close_code):
        if hasattr(self, 'user_group_name'):
            await self.channel_layer.group_discard(
                self.user_group_name,
                self.channel_name
            )
            logger.info("Notifications disconnected for %s", self.user.username)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error("Invalid JSON received over WebSocket from %s", self.user.username)
            await self.send_json_message({'type': 'error', 'error': 'Invalid JSON'})
            return

        if not isinstance(data, dict):
            await self.send_json_message({'type': 'error', 'error': 'Message must be a JSON object'})
            return

        message_type = data.get('type')

        if message_type == 'ping':
            await self.send_json_message({'type': 'pong', 'timestamp': self.get_timestamp()})

        elif message_type == 'mark_read':
            notification_id = data.get('notification_id')
            # bool is an int subclass
            if not isinstance(notification_id, int) or isinstance(notification_id, bool):
                await self.send_json_message({
                    'type': 'error',
                    'error': 'notification_id must be an integer',
                    'notification_id': notification_id,
                })
                return

            result = await self.mark_notification_read(notification_id)
            await self.send_json_message(result)

        else:
            await self.send_json_message({'type': 'error', 'error': f'Unknown type: {message_type}'})

    # === Group event handlers ===

    async def notification_message(self, event):
        await self.send_json_message({
            'type': 'notification',
            'message': event['message']
        })

    # === Helpers ===

    async def send_json_message(self, payload):
        await self.send(text_data=json.dumps(payload))

    @database_sync_to_async
    def mark_notification_read(self, notification_id):
        """
        Same rule as the HTTP endpoint: only the recipient (or an admin)
        """
        from apps.core.models import Notification

        notification = Notification.objects.filter(pk=notification_id).first()
        if notification is None:
            return {'type': 'error', 'error': 'Notification not found', 'notification_id': notification_id}

        try:
            authorize(self.user, notification, Action.MARK_READ)
        except PermissionDenied as exc:
            return {
                'type': 'error',
                'error': str(exc),
                'reason': getattr(exc, 'reason', None),
                'notification_id': notification_id,
            }

        if not notification.read:
            notification.read = True
            notification.save(update_fields=['read'])

        return {'type': 'marked_read', 'notification_id': notification.pk}

    def get_timestamp(self):
        return timezone.now().isoformat()
