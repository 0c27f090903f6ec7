"""
Scheduled tasks for notifications app.

Entry points called by the django-q2 cluster (see setup_schedules):
- run_reminder_job: reminders for pending tasks
- run_status_job: volunteer Active/Inactive derivation
- run_escalation_job: overdue task alerts to administrators

Each returns the run summary as a dict so django-q stores it with the task.
"""

from apps.activity_log.models import JobRun

from .scheduler import JobScheduler


def _run(job_name):
    summary = JobScheduler().trigger(job_name, trigger=JobRun.Trigger.SCHEDULE)
    return summary.as_dict()


def run_reminder_job():
    return _run('reminders')


def run_status_job():
    return _run('volunteer_status')


def run_escalation_job():
    return _run('escalations')
