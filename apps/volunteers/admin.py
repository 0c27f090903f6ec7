"""
Admin configuration for volunteers app.
"""

from django.contrib import admin
from .models import Volunteer


@admin.register(Volunteer)
class VolunteerAdmin(admin.ModelAdmin):
    """
    Admin for Volunteer model.

    Status is shown read-only: the volunteer status job rewrites it on
    every run, so manual edits would not stick.
    """

    list_display = ('full_name', 'email', 'role', 'place', 'status', 'joining_date')
    list_filter = ('status', 'role')
    search_fields = ('full_name', 'email', 'place')
    ordering = ('full_name',)
    readonly_fields = ('status', 'created_at')
