"""
URL configuration for notifications app.

Includes:
- Job status
- Manual trigger
- Reschedule
"""

from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    # Status
    path('status/', views.job_status_list, name='job_status_list'),
    path('<slug:job_name>/status/', views.job_status, name='job_status'),

    # Actions
    path('<slug:job_name>/trigger/', views.trigger_job, name='trigger_job'),
    path('<slug:job_name>/reschedule/', views.reschedule_job, name='reschedule_job'),
]
