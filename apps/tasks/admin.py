"""
Admin configuration for tasks app.
"""

from django.contrib import admin
from django.utils.html import format_html
from .models import Task, TaskAssignment


class TaskAssignmentInline(admin.TabularInline):
    """Inline admin for volunteer assignments on task detail."""
    model = TaskAssignment
    extra = 0
    autocomplete_fields = ('volunteer',)
    readonly_fields = ('assigned_at',)


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'id', 'title', 'status_display', 'due_date',
        'is_overdue_display', 'created_at'
    )
    list_filter = ('status', 'due_date', 'created_at')
    search_fields = ('title', 'description')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = ('created_at',)

    fieldsets = (
        (None, {
            'fields': ('title', 'description')
        }),
        ('Status & Due Date', {
            'fields': ('status', 'due_date')
        }),
        ('Timestamps', {
            'fields': ('created_at',),
            'classes': ('collapse',),
        }),
    )

    inlines = [TaskAssignmentInline]

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'Pending': '#FFA500',      # Orange
            'Completed': '#27ae60',    # Green
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def is_overdue_display(self, obj):
        """Display overdue status."""
        if obj.is_overdue():
            return format_html('<span style="color: red;">{}</span>', 'OVERDUE')
        return ''
    is_overdue_display.short_description = 'Overdue'


@admin.register(TaskAssignment)
class TaskAssignmentAdmin(admin.ModelAdmin):
    """Admin for TaskAssignment model."""

    list_display = ('task', 'volunteer', 'assigned_at')
    list_filter = ('assigned_at',)
    search_fields = ('task__title', 'volunteer__full_name', 'volunteer__email')
    ordering = ('-assigned_at',)
    autocomplete_fields = ('task', 'volunteer')
