"""
Service layer for tasks app.

Read-side queries used by the notification engine:
- get_pending_tasks: Discovery of tasks that still need reminders
- get_assigned_volunteers: Resolve the volunteers assigned to one task
- get_overdue_tasks: Incomplete tasks whose due date has passed

Task, volunteer and assignment writes belong to the admin/CRUD layer.
"""

from django.utils import timezone

from .models import Task, TaskAssignment


def get_pending_tasks():
    """
    Fetch all tasks with status Pending.

    Evaluated eagerly so a database failure surfaces here, where the
    caller treats it as a discovery error and aborts the run.

    Returns:
        list of Task instances
    """
    return list(
        Task.objects.filter(status=Task.Status.PENDING).order_by('id')
    )


def get_assigned_volunteers(task):
    """
    Resolve the volunteers assigned to a task, in assignment order.

    Args:
        task: Task instance (or task id)

    Returns:
        list of Volunteer instances (empty if nobody is assigned)
    """
    task_id = getattr(task, 'pk', task)
    assignments = (
        TaskAssignment.objects
        .filter(task_id=task_id)
        .select_related('volunteer')
        .order_by('assigned_at', 'id')
    )
    return [assignment.volunteer for assignment in assignments]


def get_overdue_tasks(today=None):
    """
    Fetch tasks due strictly before today that are not Completed.

    Assignments and volunteers are prefetched for the escalation
    pipeline, which lists the assigned volunteer names.

    Args:
        today: Calendar day to compare against (defaults to local today)

    Returns:
        list of Task instances
    """
    today = today or timezone.localdate()
    return list(
        Task.objects
        .exclude(status=Task.Status.COMPLETED)
        .filter(due_date__isnull=False, due_date__lt=today)
        .prefetch_related('assignments__volunteer')
        .order_by('due_date', 'id')
    )
