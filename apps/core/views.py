# apps/core/views.py

import logging

from django.contrib.auth import authenticate, login, logout
from django.db import connection, transaction
from django.db.models import ProtectedError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .domain import Action, Capability, ProjectResource, ProjectStatus, TaskPriority, TaskStatus
from .forms import AdminUserForm, LoginForm, ProjectForm, TaskForm, UserProfileForm
from .models import Project, Task, User
from .permissions import authorize, can, require_capability
from .utils import InvalidPayload, json_error, json_view, merge_with_instance, parse_json_body

logger = logging.getLogger(__name__)


def _form_error(form):
    return json_error('Invalid data.', status=400, errors=form.errors.get_json_data())


# === AUTHENTICATION ===

@require_POST
def login_view(request):
    """
    Session login with username or email

    The session itself is Django's; this only validates the credentials.
    """
    try:
        form = LoginForm(parse_json_body(request))
    except InvalidPayload as exc:
        return json_error(str(exc), status=400)

    if not form.is_valid():
        return _form_error(form)

    username = form.cleaned_data['username']
    password = form.cleaned_data['password']

    user = authenticate(request, username=username, password=password)
    if user is None:
        # Try by email if the username did not match
        match = User.objects.filter(email__iexact=username, is_active=True).first()
        if match:
            user = authenticate(request, username=match.username, password=password)

    if user is None:
        logger.info("Failed login for %s", username)
        return json_error('Invalid credentials.', status=401)

    login(request, user)
    return JsonResponse({'success': True, 'data': user.to_dict()})


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({'success': True, 'message': 'Logged out.'})


# === USERS ===

@json_view
@require_GET
@require_capability(Capability.LIST_USERS)
def user_list(request):
    """All users (admins and managers only)"""
    users = [user.to_dict() for user in User.objects.all()]
    return JsonResponse({'success': True, 'count': len(users), 'data': users})


@json_view
@require_http_methods(['GET', 'PUT', 'DELETE'])
def user_detail(request, user_id):
    user = get_object_or_404(User, pk=user_id)

    if request.method == 'GET':
        authorize(request.user, user, Action.VIEW)
        return JsonResponse({'success': True, 'data': user.to_dict()})

    if request.method == 'PUT':
        authorize(request.user, user, Action.UPDATE)

        form_class = AdminUserForm if request.user.as_actor().is_admin else UserProfileForm
        data = merge_with_instance(user, form_class.Meta.fields, parse_json_body(request))
        form = form_class(data, instance=user)
        if not form.is_valid():
            return _form_error(form)

        user = form.save()
        return JsonResponse({'success': True, 'data': user.to_dict()})

    authorize(request.user, user, Action.DELETE)
    try:
        user.delete()
    except ProtectedError:
        return json_error('User still owns projects or tasks.', status=409)
    logger.info("User %s deleted by %s", user_id, request.user.pk)
    return JsonResponse({'success': True, 'message': 'User deleted.'})


# === PROJECTS ===

@json_view
@require_http_methods(['GET', 'POST'])
def project_list(request):
    if request.method == 'POST':
        return _create_project(request)

    projects = Project.objects.select_related('owner').prefetch_related('members')

    status = request.GET.get('status')
    if status:
        projects = projects.filter(status=ProjectStatus(status)) if status in ProjectStatus.values else projects.none()

    data = [project.to_dict() for project in projects]
    return JsonResponse({'success': True, 'count': len(data), 'data': data})


def _create_project(request):
    # No resource exists yet; ownership is assigned below
    authorize(request.user, ProjectResource(owner=request.user.pk), Action.CREATE)

    form = ProjectForm(parse_json_body(request))
    if not form.is_valid():
        return _form_error(form)

    with transaction.atomic():
        project = form.save(commit=False)
        project.owner = request.user
        project.save()
        form.save_m2m()
        project.members.add(request.user)

    logger.info("Project %s created by %s", project.pk, request.user.pk)
    return JsonResponse({'success': True, 'data': project.to_dict()}, status=201)


@json_view
@require_http_methods(['GET', 'PUT', 'DELETE'])
def project_detail(request, project_id):
    project = get_object_or_404(Project.objects.select_related('owner'), pk=project_id)

    if request.method == 'GET':
        authorize(request.user, project, Action.VIEW)
        data = project.to_dict()
        data['permissions'] = {
            'can_update': can(request.user, project, Action.UPDATE),
            'can_delete': can(request.user, project, Action.DELETE),
        }
        return JsonResponse({'success': True, 'data': data})

    if request.method == 'PUT':
        authorize(request.user, project, Action.UPDATE)

        data = merge_with_instance(project, ProjectForm.Meta.fields, parse_json_body(request))
        form = ProjectForm(data, instance=project)
        if not form.is_valid():
            return _form_error(form)

        project = form.save()
        return JsonResponse({'success': True, 'data': project.to_dict()})

    authorize(request.user, project, Action.DELETE)
    project.delete()
    logger.info("Project %s deleted by %s", project_id, request.user.pk)
    return JsonResponse({'success': True, 'message': 'Project deleted.'})


# === TASKS ===

TASK_FILTERS = {
    'status': TaskStatus.values,
    'priority': TaskPriority.values,
}


@json_view
@require_http_methods(['GET', 'POST'])
def task_list(request):
    if request.method == 'POST':
        return _create_task(request)

    tasks = Task.objects.select_related('assigned_to', 'created_by', 'project')

    for field_name, allowed in TASK_FILTERS.items():
        value = request.GET.get(field_name)
        if value:
            tasks = tasks.filter(**{field_name: value}) if value in allowed else tasks.none()

    for field_name in ('project', 'assigned_to'):
        value = request.GET.get(field_name)
        if value:
            tasks = tasks.filter(**{f'{field_name}_id': value}) if value.isdigit() else tasks.none()

    data = [task.to_dict() for task in tasks]
    return JsonResponse({'success': True, 'count': len(data), 'data': data})


def _create_task(request):
    form = TaskForm(parse_json_body(request))
    if not form.is_valid():
        return _form_error(form)

    task = form.save(commit=False)
    task.created_by = request.user
    authorize(request.user, task, Action.CREATE)
    task.save()

    logger.info("Task %s created by %s", task.pk, request.user.pk)
    return JsonResponse({'success': True, 'data': task.to_dict()}, status=201)


@json_view
@require_http_methods(['GET', 'PUT', 'DELETE'])
def task_detail(request, task_id):
    task = get_object_or_404(
        Task.objects.select_related('assigned_to', 'created_by', 'project'),
        pk=task_id
    )

    if request.method == 'GET':
        authorize(request.user, task, Action.VIEW)
        data = task.to_dict()
        data['permissions'] = {
            'can_update': can(request.user, task, Action.UPDATE),
            'can_delete': can(request.user, task, Action.DELETE),
        }
        return JsonResponse({'success': True, 'data': data})

    if request.method == 'PUT':
        authorize(request.user, task, Action.UPDATE)

        # No transition rules: any status may follow any other
        data = merge_with_instance(task, TaskForm.Meta.fields, parse_json_body(request))
        form = TaskForm(data, instance=task)
        if not form.is_valid():
            return _form_error(form)

        task = form.save()
        return JsonResponse({'success': True, 'data': task.to_dict()})

    authorize(request.user, task, Action.DELETE)
    task.delete()
    logger.info("Task %s deleted by %s", task_id, request.user.pk)
    return JsonResponse({'success': True, 'message': 'Task deleted.'})


# === MONITORING ===

@require_GET
def health_check(request):
    """Liveness probe with a database round trip"""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        database = 'ok'
        status = 200
    except Exception as exc:
        logger.error("Health check database failure: %s", exc)
        database = 'error'
        status = 503

    return JsonResponse({
        'status': 'healthy' if status == 200 else 'unhealthy',
        'database': database,
        'timestamp': timezone.now().isoformat(),
    }, status=status)
