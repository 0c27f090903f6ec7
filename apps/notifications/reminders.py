"""
Reminder processor.

Discovery → per-volunteer dedup check → dispatch → ledger write.

Failure isolation:
- Cannot read pending tasks: the run aborts with success=False
- Cannot resolve one task's assignments: recorded on that task, run continues
- One send fails: recorded on that task, other volunteers still get theirs
- Ledger write fails after a send: logged only, the send still counts

Sends run on a bounded thread pool. All database work stays on the
calling thread.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from apps.tasks.services import get_assigned_volunteers, get_pending_tasks

from .dispatcher import DispatchError, get_message_client
from .ledger import ReminderLedger
from .results import JobResultAggregator
from .services import send_task_reminder

logger = logging.getLogger(__name__)

JOB_NAME = 'reminders'

SKIP_ALREADY_SENT = 'already sent today'
SKIP_NO_ADDRESS = 'no contact address'


def process_pending_task_reminders(client=None, ledger=None, today=None, max_workers=None):
    """
    Send today's reminders for every Pending task.

    Args:
        client: Message client; defaults to settings.MESSAGE_CLIENT
        ledger: ReminderLedger; injectable for tests
        today: Calendar day used as the dedup key (defaults to local today)
        max_workers: Dispatch pool size (defaults to DISPATCH_MAX_WORKERS)

    Returns:
        JobSummary
    """
    aggregator = JobResultAggregator(JOB_NAME)
    ledger = ledger or ReminderLedger()
    today = today or timezone.localdate()

    try:
        tasks = get_pending_tasks()
    except DatabaseError as exc:
        message = f'Failed to fetch pending tasks: {exc}'
        logger.error(f'[Task Reminder Job] {message}')
        aggregator.fail(message)
        return aggregator.build()

    if not tasks:
        logger.info('[Task Reminder Job] No pending tasks found')
        return aggregator.build()

    logger.info(f'[Task Reminder Job] Found {len(tasks)} pending tasks')

    planned = _plan_sends(tasks, ledger, today, aggregator)
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


def _plan_sends(tasks, ledger, today, aggregator):
    """Resolve volunteers per task and drop those that must not be sent to."""
    planned = []
    for task in tasks:
        aggregator.start_task(task)
        try:
            volunteers = get_assigned_volunteers(task)
            already_sent = ledger.sent_volunteer_ids(task.pk, today) if volunteers else set()
        except DatabaseError as exc:
            logger.error(f'[Task Reminder Job] Error fetching assignments for task {task.pk}: {exc}')
            aggregator.task_error(task, f'Failed to fetch assignments: {exc}')
            continue

        aggregator.task_processed(task)
        if not volunteers:
            logger.info(f'[Task Reminder Job] Task {task.pk} has no assigned volunteers')
            continue

        for volunteer in volunteers:
            if volunteer.pk in already_sent:
                logger.info(
                    f'[Task Reminder Job] Email already sent today for task {task.pk}, '
                    f'volunteer {volunteer.pk}'
                )
                aggregator.reminder_skipped(task, volunteer.pk, SKIP_ALREADY_SENT)
            elif not volunteer.has_contact_address:
                logger.info(f'[Task Reminder Job] Volunteer {volunteer.pk} has no email address')
                aggregator.reminder_skipped(task, volunteer.pk, SKIP_NO_ADDRESS)
            else:
                planned.append((task, volunteer))
    return planned


def _dispatch(planned, client, ledger, today, aggregator, max_workers):
    max_workers = max(1, max_workers or settings.DISPATCH_MAX_WORKERS)
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='reminder-send') as pool:
        futures = {
            pool.submit(send_task_reminder, client, task, volunteer): (task, volunteer)
            for task, volunteer in planned
        }
        for future in as_completed(futures):
            task, volunteer = futures[future]
            try:
                message_id = future.result()
            except DispatchError as exc:
                logger.warning(
                    f'[Task Reminder Job] Failed to send email for task {task.pk} '
                    f'to volunteer {volunteer.pk}: {exc}'
                )
                aggregator.reminder_failed(task, volunteer.pk, volunteer.email, str(exc))
                continue
            except Exception as exc:
                logger.exception(
                    f'[Task Reminder Job] Unexpected error sending to volunteer {volunteer.pk}'
                )
                aggregator.reminder_failed(
                    task, volunteer.pk, volunteer.email, f'Unexpected error: {exc}'
                )
                continue

            try:
                ledger.record(task.pk, volunteer.pk, today, message_id)
            except DatabaseError:
                logger.exception(
                    f'[Task Reminder Job] Failed to record reminder for task {task.pk}, '
                    f'volunteer {volunteer.pk} (message {message_id})'
                )
            aggregator.reminder_sent(task)
            logger.info(
                f'[Task Reminder Job] Email sent for task {task.pk} to {volunteer.email} '
                f'(Message ID: {message_id})'
            )
