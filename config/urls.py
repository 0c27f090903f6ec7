"""
URL configuration for volunteer_reminders project.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # Job trigger / status / reschedule endpoints
    path('jobs/', include('apps.notifications.urls', namespace='notifications')),
]

# Admin site customization
admin.site.site_header = 'Volunteer Reminders Administration'
admin.site.site_title = 'Volunteer Reminders Admin'
admin.site.index_title = 'Tasks, volunteers and notification ledgers'
