"""
Service layer for volunteers app.

Derives each volunteer's Active/Inactive status from their assignments:
- Active while they hold an assignment to a task that is not Completed
- Active if they were assigned something within the activity window
- Inactive otherwise

Outstanding work is checked first, so its reason wins when both apply.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Exists, OuterRef, Subquery
from django.utils import timezone

from apps.activity_log.models import log_status_change
from apps.notifications.results import JobResultAggregator
from apps.tasks.models import Task, TaskAssignment

from .models import Volunteer

logger = logging.getLogger(__name__)

JOB_NAME = 'volunteer_status'

REASON_INCOMPLETE = 'Has ongoing incomplete tasks'


def recent_assignment_reason(window_days):
    return f'Recent task assignment (within {window_days} days)'


def inactive_reason(window_days):
    return f'No task assignments for {window_days}+ days and no incomplete tasks'


def evaluate_status(has_incomplete, last_assigned_at, now, window_days=7, inclusive=True):
    """
    Pure status derivation.

    Args:
        has_incomplete: Volunteer holds an assignment to a non-Completed task
        last_assigned_at: Most recent assignment time, or None
        now: Evaluation time
        window_days: Length of the recency window
        inclusive: Whether an assignment exactly window_days old is recent

    Returns:
        tuple: (status, reason)
    """
    if has_incomplete:
        return Volunteer.Status.ACTIVE, REASON_INCOMPLETE

    if last_assigned_at is not None:
        cutoff = now - timedelta(days=window_days)
        recent = last_assigned_at >= cutoff if inclusive else last_assigned_at > cutoff
        if recent:
            return Volunteer.Status.ACTIVE, recent_assignment_reason(window_days)

    return Volunteer.Status.INACTIVE, inactive_reason(window_days)


def get_volunteers_with_activity():
    """All volunteers annotated with has_incomplete and last_assigned_at."""
    incomplete = TaskAssignment.objects.filter(
        volunteer=OuterRef('pk'),
    ).exclude(task__status=Task.Status.COMPLETED)
    latest = TaskAssignment.objects.filter(
        volunteer=OuterRef('pk'),
    ).order_by('-assigned_at').values('assigned_at')[:1]

    return list(
        Volunteer.objects.annotate(
            has_incomplete=Exists(incomplete),
            last_assigned_at=Subquery(latest),
        ).order_by('id')
    )


def update_volunteer_statuses(now=None, window_days=None, inclusive=None):
    """
    Re-derive every volunteer's status and persist the ones that changed.

    Manually stored values are overwritten; only real changes are saved,
    audited and counted.

    Returns:
        JobSummary
    """
    aggregator = JobResultAggregator(JOB_NAME)
    now = now or timezone.now()
    if window_days is None:
        window_days = settings.VOLUNTEER_ACTIVITY_WINDOW_DAYS
    if inclusive is None:
        inclusive = settings.VOLUNTEER_WINDOW_INCLUSIVE

    try:
        volunteers = get_volunteers_with_activity()
    except DatabaseError as exc:
        message = f'Failed to fetch volunteers: {exc}'
        logger.error(f'[Volunteer Status] {message}')
        aggregator.fail(message)
        return aggregator.build()

    for volunteer in volunteers:
        aggregator.volunteers_checked += 1
        new_status, reason = evaluate_status(
            volunteer.has_incomplete,
            volunteer.last_assigned_at,
            now,
            window_days=window_days,
            inclusive=inclusive,
        )
        if new_status == volunteer.status:
            continue

        previous_status = volunteer.status
        try:
            with transaction.atomic():
                volunteer.status = new_status
                volunteer.save(update_fields=['status'])
                log_status_change(volunteer, previous_status, new_status, reason)
        except DatabaseError as exc:
            volunteer.status = previous_status
            logger.error(f'[Volunteer Status] Error updating volunteer {volunteer.pk}: {exc}')
            aggregator.add_error(f'Volunteer {volunteer.pk}: {exc}')
            continue

        aggregator.status_changed(volunteer, previous_status, new_status, reason)
        logger.info(
            f'[Volunteer Status] {volunteer.full_name}: {previous_status} → {new_status} ({reason})'
        )

    return aggregator.build()
