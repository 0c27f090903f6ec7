"""
Admin configuration for activity_log app.
"""

from django.contrib import admin
from .models import JobRun, StatusChange


@admin.register(JobRun)
class JobRunAdmin(admin.ModelAdmin):
    """Read-only admin for job runs."""

    list_display = ('job_name', 'trigger', 'success', 'started_at', 'finished_at', 'message')
    list_filter = ('job_name', 'trigger', 'success', 'started_at')
    search_fields = ('job_name', 'message')
    ordering = ('-started_at',)
    date_hierarchy = 'started_at'

    readonly_fields = (
        'job_name', 'trigger', 'success', 'message',
        'started_at', 'finished_at', 'summary', 'created_at'
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(StatusChange)
class StatusChangeAdmin(admin.ModelAdmin):
    """Read-only admin for volunteer status changes."""

    list_display = ('volunteer', 'previous_status', 'new_status', 'reason', 'created_at')
    list_filter = ('new_status', 'created_at')
    search_fields = ('volunteer__full_name', 'reason')
    ordering = ('-created_at',)

    readonly_fields = ('volunteer', 'previous_status', 'new_status', 'reason', 'created_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
