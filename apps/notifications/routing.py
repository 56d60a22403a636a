# apps/notifications/routing.py

from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # Personal notification stream of the authenticated user
    re_path(r'ws/notifications/$', consumers.NotificationConsumer.as_asgi()),
]
