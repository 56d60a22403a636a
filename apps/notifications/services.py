# apps/notifications/services.py

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def user_group_name(user_id) -> str:
    """Channels group every socket of a user joins"""
    return f'user_{user_id}'


def serialize_notification(notification) -> dict:
    """Message body safe for any channel layer (no datetimes, no Decimals)"""
    return {
        'id': notification.pk,
        'title': notification.title,
        'message': notification.message,
        'link': notification.link,
        'read': notification.read,
        'created_at': notification.created_at.isoformat() if notification.created_at else None,
    }


def send_to_user(user_id, notification):
    """
    Pushes a notification to the user's WebSocket group

    Nothing happens when no channel layer is configured. Delivery is best
    effort: the notification is already stored, so a layer failure (Redis
    down) is logged and the caller carries on.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(
            user_group_name(user_id),
            {
                'type': 'notification_message',
                'message': serialize_notification(notification),
            }
        )
    except Exception as exc:
        logger.error("Could not push notification %s to user %s: %s", notification.pk, user_id, exc)
        return

    logger.debug("Notification %s pushed to user %s", notification.pk, user_id)
