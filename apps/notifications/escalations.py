"""
Overdue escalation pipeline.

For every task due before today that is not Completed, each configured
administrator gets one alert per day listing the volunteers currently
assigned ("Unassigned" when there are none). Sends are deduplicated by
the escalation ledger, which is separate from the reminder ledger.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from apps.tasks.services import get_overdue_tasks

from .dispatcher import DispatchError, get_message_client
from .ledger import EscalationLedger
from .results import JobResultAggregator
from .services import get_admin_alert_emails, send_overdue_alert

logger = logging.getLogger(__name__)

JOB_NAME = 'escalations'

UNASSIGNED = 'Unassigned'


def assigned_volunteer_names(task):
    """Sorted, deduplicated names of the task's volunteers, or ['Unassigned']."""
    names = sorted({assignment.volunteer.full_name for assignment in task.assignments.all()})
    return names or [UNASSIGNED]


def process_overdue_escalations(client=None, ledger=None, today=None, admin_emails=None,
                                max_workers=None):
    """
    Alert administrators about overdue, incomplete tasks.

    Args:
        client: Message client; defaults to settings.MESSAGE_CLIENT
        ledger: EscalationLedger; injectable for tests
        today: Calendar day (defaults to local today)
        admin_emails: Recipients; defaults to ADMIN_ALERT_EMAILS / ADMIN_EMAIL
        max_workers: Dispatch pool size (defaults to DISPATCH_MAX_WORKERS)

    Returns:
        JobSummary
    """
    aggregator = JobResultAggregator(JOB_NAME)
    ledger = ledger or EscalationLedger()
    today = today or timezone.localdate()
    admin_emails = get_admin_alert_emails() if admin_emails is None else list(admin_emails)

    if not admin_emails:
        logger.warning('[Overdue Alerts] No administrator addresses configured')
        aggregator.message = 'No administrator addresses configured'
        return aggregator.build()

    try:
        tasks = get_overdue_tasks(today)
    except DatabaseError as exc:
        message = f'Failed to fetch overdue tasks: {exc}'
        logger.error(f'[Overdue Alerts] {message}')
        aggregator.fail(message)
        return aggregator.build()

    logger.info(f'[Overdue Alerts] Found {len(tasks)} overdue tasks')

    planned = []
    for task in tasks:
        aggregator.start_task(task)
        try:
            names = assigned_volunteer_names(task)
            pending_admins = [
                email for email in admin_emails
                if not ledger.has_entry(task.pk, email, today)
            ]
        except DatabaseError as exc:
            logger.error(f'[Overdue Alerts] Error preparing alerts for task {task.pk}: {exc}')
            aggregator.task_error(task, f'Failed to prepare overdue alert: {exc}')
            continue

        aggregator.task_processed(task)
        skipped = len(admin_emails) - len(pending_admins)
        if skipped:
            logger.info(
                f'[Overdue Alerts] Alert for task {task.pk} already sent today to {skipped} admin(s)'
            )
        planned.extend((task, names, email) for email in pending_admins)

    if not planned:
        return aggregator.build()

    owns_client = client is None
    client = client or get_message_client()
    try:
        _dispatch(planned, client, ledger, today, aggregator, max_workers)
    finally:
        if owns_client:
            client.close()

    return aggregator.build()


def _dispatch(planned, client, ledger, today, aggregator, max_workers):
    max_workers = max(1, max_workers or settings.DISPATCH_MAX_WORKERS)
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='escalation-send') as pool:
        futures = {
            pool.submit(send_overdue_alert, client, email, task, names): (task, email)
            for task, names, email in planned
        }
        for future in as_completed(futures):
            task, email = futures[future]
            try:
                message_id = future.result()
            except DispatchError as exc:
                logger.warning(f'[Overdue Alerts] Error sending alert for task {task.pk} to {email}: {exc}')
                aggregator.escalation_failed(task, email, str(exc))
                continue
            except Exception as exc:
                logger.exception(f'[Overdue Alerts] Unexpected error sending alert to {email}')
                aggregator.escalation_failed(task, email, f'Unexpected error: {exc}')
                continue

            try:
                ledger.record(task.pk, email, today, message_id)
            except DatabaseError:
                logger.exception(
                    f'[Overdue Alerts] Failed to record alert for task {task.pk} to {email} '
                    f'(message {message_id})'
                )
            aggregator.escalation_sent(task)
            logger.info(f'[Overdue Alerts] Alert sent to {email} for task {task.pk} (Message ID: {message_id})')
