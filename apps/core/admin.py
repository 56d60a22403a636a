# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from apps.analytics.stats import compute_project_stats
from .domain import Role, TaskPriority
from .models import User, Project, Task, Notification

ROLE_COLORS = {
    Role.ADMIN: '#EF4444',  # red
    Role.MANAGER: '#F59E0B',  # amber
    Role.MEMBER: '#3B82F6',  # blue
}

PRIORITY_COLORS = {
    TaskPriority.LOW: '#10B981',
    TaskPriority.MEDIUM: '#F59E0B',
    TaskPriority.HIGH: '#F97316',
    TaskPriority.URGENT: '#EF4444',
}


def _badge(color, label):
    return format_html(
        '<span style="background-color: {}; color: white; '
        'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
        color, label
    )


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the custom user model"""

    list_display = [
        'username', 'email', 'get_full_name', 'role_badge',
        'is_active', 'date_joined'
    ]
    list_filter = ['role', 'is_staff', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Collaboration', {
            'fields': ('role', 'phone')
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Collaboration', {
            'fields': ('role', 'phone')
        }),
    )

    @admin.display(description='Role')
    def role_badge(self, obj):
        return _badge(ROLE_COLORS.get(obj.role, '#6B7280'), obj.get_role_display())


class TaskInline(admin.TabularInline):
    model = Task
    extra = 0
    fields = ['title', 'status', 'priority', 'assigned_to', 'due_date']
    fk_name = 'project'


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    """Admin for projects, with live task progress"""

    list_display = [
        'name', 'owner', 'status', 'members_count',
        'task_progress', 'created_at'
    ]
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'description', 'owner__username']
    filter_horizontal = ['members']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [TaskInline]

    fieldsets = (
        ('Basic information', {
            'fields': ('name', 'description', 'status', 'progress')
        }),
        ('Team', {
            'fields': ('owner', 'members')
        }),
        ('Schedule & budget', {
            'fields': ('start_date', 'end_date', 'budget')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    def get_readonly_fields(self, request, obj=None):
        # Owner is fixed once the project exists
        if obj is not None:
            return self.readonly_fields + ['owner']
        return self.readonly_fields

    @admin.display(description='Members')
    def members_count(self, obj):
        return obj.members.count()

    @admin.display(description='Tasks done')
    def task_progress(self, obj):
        summary = compute_project_stats(obj.tasks.only('status'))
        return f"{summary.completed_tasks}/{summary.total_tasks} ({summary.progress}%)"


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'title', 'status', 'priority_badge',
        'assigned_to', 'created_by', 'project', 'due_date'
    ]
    list_filter = ['status', 'priority', 'project', 'created_at']
    search_fields = ['title', 'description']
    date_hierarchy = 'created_at'
    readonly_fields = ['created_at', 'updated_at']

    def get_readonly_fields(self, request, obj=None):
        # Creator is fixed once the task exists
        if obj is not None:
            return self.readonly_fields + ['created_by']
        return self.readonly_fields

    @admin.display(description='Priority')
    def priority_badge(self, obj):
        return _badge(PRIORITY_COLORS.get(obj.priority, '#6B7280'), obj.get_priority_display())


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'recipient', 'read', 'created_at']
    list_filter = ['read', 'created_at']
    search_fields = ['title', 'message', 'recipient__username']
    readonly_fields = ['created_at']
    actions = ['mark_as_read']

    @admin.action(description='Mark selected notifications as read')
    def mark_as_read(self, request, queryset):
        updated = queryset.filter(read=False).update(read=True)
        self.message_user(request, f'{updated} notification(s) marked as read.')
