# apps/core/management/commands/seed.py

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.domain import ProjectStatus, Role, TaskPriority, TaskStatus
from apps.core.models import User, Project, Task

DEMO_USERS = [
    ('admin', Role.ADMIN, 'Ada', 'Admin'),
    ('manager', Role.MANAGER, 'Max', 'Manager'),
    ('member', Role.MEMBER, 'Mia', 'Member'),
]

DEMO_TASKS = [
    ('Write project brief', TaskStatus.DONE, TaskPriority.HIGH),
    ('Set up repository', TaskStatus.DONE, TaskPriority.MEDIUM),
    ('Design data model', TaskStatus.REVIEW, TaskPriority.HIGH),
    ('Build dashboard', TaskStatus.IN_PROGRESS, TaskPriority.URGENT),
    ('Write user guide', TaskStatus.TODO, TaskPriority.LOW),
]


class Command(BaseCommand):
    help = 'Creates demo users, a project and tasks (safe to run twice)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            type=str,
            default='teamflow123',
            help='Password set on newly created demo users'
        )

    @transaction.atomic
    def handle(self, *args, **options):
        users = {}
        for username, role, first_name, last_name in DEMO_USERS:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'role': role,
                    'first_name': first_name,
                    'last_name': last_name,
                    'email': f'{username}@teamflow.local',
                    'is_staff': role == Role.ADMIN,
                    'is_superuser': role == Role.ADMIN,
                }
            )
            if created:
                user.set_password(options['password'])
                user.save(update_fields=['password'])
                self.stdout.write(f'  Created user {username} ({role})')
            users[role] = user

        project, created = Project.objects.get_or_create(
            name='Website relaunch',
            defaults={
                'owner': users[Role.MANAGER],
                'description': 'Demo project created by the seed command',
                'status': ProjectStatus.ACTIVE,
            }
        )
        if created:
            project.members.add(users[Role.MANAGER], users[Role.MEMBER])
            self.stdout.write(f'  Created project {project.name}')

        for title, status, priority in DEMO_TASKS:
            Task.objects.get_or_create(
                title=title,
                project=project,
                defaults={
                    'status': status,
                    'priority': priority,
                    'created_by': users[Role.MANAGER],
                    'assigned_to': users[Role.MEMBER],
                }
            )

        self.stdout.write(self.style.SUCCESS(
            f'Seed complete: {User.objects.count()} users, '
            f'{Project.objects.count()} projects, {Task.objects.count()} tasks'
        ))
