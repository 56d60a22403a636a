# apps/analytics/urls.py

from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Global figures (admins and managers)
    path('dashboard/', views.dashboard, name='dashboard'),

    # Progress of a single project
    path('projects/<int:project_id>/', views.project_stats, name='project_stats'),
]
