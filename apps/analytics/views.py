# apps/analytics/views.py

import logging

from django.conf import settings
from django.core.cache import cache
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET

from apps.core.domain import Action, Capability
from apps.core.models import Project, Task, User
from apps.core.permissions import authorize, require_capability
from apps.core.utils import json_view
from .stats import compute_dashboard_stats, compute_project_stats

logger = logging.getLogger(__name__)

DASHBOARD_CACHE_KEY = 'analytics:dashboard'


def build_dashboard_payload():
    """
    Fetches the three collections and merges them into dashboard stats

    The queries run one after another without a shared transaction: the
    result is a best-effort snapshot, counts may come from slightly
    different moments.
    """
    tasks = Task.objects.only('status', 'priority')
    projects = Project.objects.only('status')
    active_users = User.objects.filter(is_active=True).count()

    stats = compute_dashboard_stats(tasks, projects, active_users)
    return stats.as_dict()


@json_view
@require_GET
@require_capability(Capability.VIEW_DASHBOARD)
def dashboard(request):
    """
    Global dashboard (admins and managers)

    Cached for TEAMFLOW_DASHBOARD_CACHE_SECONDS; 0 disables the cache.
    """
    timeout = getattr(settings, 'TEAMFLOW_DASHBOARD_CACHE_SECONDS', 30)

    payload = cache.get(DASHBOARD_CACHE_KEY) if timeout else None
    if payload is None:
        payload = build_dashboard_payload()
        payload['generated_at'] = timezone.now().isoformat()
        if timeout:
            cache.set(DASHBOARD_CACHE_KEY, payload, timeout)

    return JsonResponse({'success': True, 'data': payload})


@json_view
@require_GET
def project_stats(request, project_id):
    project = get_object_or_404(Project, pk=project_id)
    authorize(request.user, project, Action.VIEW)

    summary = compute_project_stats(Task.objects.filter(project=project).only('status'))
    return JsonResponse({'success': True, 'data': summary.as_dict()})
