# config/urls.py

from django.contrib import admin
from django.urls import path, include

from apps.core.views import health_check

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # JSON API
    path('api/', include('apps.core.urls')),
    path('api/notifications/', include('apps.notifications.urls')),
    path('api/analytics/', include('apps.analytics.urls')),

    # Monitoring
    path('health/', health_check, name='health'),
]

# Customize admin titles
admin.site.site_header = 'Teamflow Tracker Admin'
admin.site.site_title = 'Teamflow Tracker'
admin.site.index_title = 'System administration'
