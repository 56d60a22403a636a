# apps/notifications/views.py

import logging

from django.conf import settings
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from apps.core.domain import Action
from apps.core.models import Notification
from apps.core.permissions import authorize
from apps.core.utils import json_view

logger = logging.getLogger(__name__)


@json_view
@require_GET
def notification_list(request):
    """
    Newest notifications of the current user

    Scoped to the caller by the query itself, not by the access policy.
    """
    page_size = getattr(settings, 'TEAMFLOW_NOTIFICATIONS_PAGE_SIZE', 50)
    notifications = Notification.objects.filter(recipient=request.user)[:page_size]
    data = [notification.to_dict() for notification in notifications]
    unread = Notification.objects.filter(recipient=request.user, read=False).count()

    return JsonResponse({
        'success': True,
        'count': len(data),
        'unread': unread,
        'data': data,
    })


@json_view
@require_http_methods(['PUT', 'POST'])
def mark_read(request, notification_id):
    notification = get_object_or_404(Notification, pk=notification_id)
    authorize(request.user, notification, Action.MARK_READ)

    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])

    return JsonResponse({'success': True, 'data': notification.to_dict()})


@json_view
@require_http_methods(['PUT', 'POST'])
def mark_all_read(request):
    """
    Marks every unread notification of the caller as read

    Only the caller's own rows are touched, so no per-item check is needed.
    """
    updated = Notification.objects.filter(recipient=request.user, read=False).update(read=True)
    logger.debug("User %s marked %s notifications as read", request.user.pk, updated)

    return JsonResponse({
        'success': True,
        'updated': updated,
        'message': 'All notifications marked as read.',
    })
