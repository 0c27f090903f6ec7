"""
Job scheduler.

Owns the three jobs (reminders, volunteer_status, escalations):
- trigger: run a job now, at most one instance per job at a time
- status: schedule, next run, running flag and last run of a job
- reschedule: change a job's cron expression at runtime
- ensure_schedules: create/update the django-q2 schedules from settings

The cadence itself is executed by the django-q2 cluster, which calls the
wrappers in tasks.py.
"""

import logging
import threading
import uuid
from collections import namedtuple
from datetime import datetime
from functools import lru_cache

from croniter import croniter
from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError
from django.utils import timezone
from django.utils.module_loading import import_string
from django_q.models import Schedule

from apps.activity_log.models import JobRun, get_last_run, log_job_run

from .results import JobResultAggregator

logger = logging.getLogger(__name__)


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class UnknownJobError(SchedulerError):
    pass


class InvalidScheduleError(SchedulerError):
    pass


JobDefinition = namedtuple('JobDefinition', ['func', 'task', 'cron_setting', 'schedule_name'])

JOBS = {
    'reminders': JobDefinition(
        func='apps.notifications.reminders.process_pending_task_reminders',
        task='apps.notifications.tasks.run_reminder_job',
        cron_setting='REMINDER_JOB_CRON',
        schedule_name='Task Reminder Job',
    ),
    'volunteer_status': JobDefinition(
        func='apps.volunteers.services.update_volunteer_statuses',
        task='apps.notifications.tasks.run_status_job',
        cron_setting='STATUS_JOB_CRON',
        schedule_name='Volunteer Status Job',
    ),
    'escalations': JobDefinition(
        func='apps.notifications.escalations.process_overdue_escalations',
        task='apps.notifications.tasks.run_escalation_job',
        cron_setting='ESCALATION_JOB_CRON',
        schedule_name='Overdue Escalation Job',
    ),
}


def already_running_message(job_name):
    return f"Job '{job_name}' is already running"


class LocalRunRegistry:
    """
    In-process run guard.

    Only protects runs inside one process; use CacheRunRegistry when
    the cluster and the web server both trigger jobs.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}
        self._tokens = {}

    def _lock(self, job_name):
        with self._guard:
            return self._locks.setdefault(job_name, threading.Lock())

    def acquire(self, job_name):
        if not self._lock(job_name).acquire(blocking=False):
            return None
        token = uuid.uuid4().hex
        with self._guard:
            self._tokens[job_name] = token
        return token

    def release(self, job_name, token):
        """Release the job only for the holder of token."""
        with self._guard:
            if token is None or self._tokens.get(job_name) != token:
                return
            del self._tokens[job_name]
        self._lock(job_name).release()

    def is_running(self, job_name):
        return self._lock(job_name).locked()


class CacheRunRegistry:
    """
    Run guard stored in the Django cache.

    cache.add is atomic on Redis and locmem, so only one caller gets the
    key. The timeout frees the key if a worker dies mid-run.

    release() is a get followed by a delete, which the cache API cannot
    make atomic. If the timeout expires and another worker takes the key
    between the two calls, that worker's key is deleted. Keep
    JOB_LOCK_TIMEOUT_SECONDS well above the longest run so the key never
    expires while its holder is still running.
    """

    key_prefix = 'notifications:job-running:'

    def __init__(self, cache_backend=None, timeout=None):
        self.cache = cache_backend or cache
        self.timeout = timeout or settings.JOB_LOCK_TIMEOUT_SECONDS

    def _key(self, job_name):
        return f'{self.key_prefix}{job_name}'

    def acquire(self, job_name):
        token = uuid.uuid4().hex
        if self.cache.add(self._key(job_name), token, timeout=self.timeout):
            return token
        return None

    def release(self, job_name, token):
        key = self._key(job_name)
        if self.cache.get(key) == token:
            self.cache.delete(key)

    def is_running(self, job_name):
        return self.cache.get(self._key(job_name)) is not None


@lru_cache(maxsize=None)
def _registry_for(path):
    return import_string(path)()


def get_run_registry():
    """Shared registry instance for settings.JOB_RUN_REGISTRY."""
    return _registry_for(settings.JOB_RUN_REGISTRY)


def get_job(job_name):
    try:
        return JOBS[job_name]
    except KeyError:
        raise UnknownJobError(
            f"Unknown job '{job_name}'. Available jobs: {', '.join(JOBS)}"
        ) from None


def validate_cron(expression):
    """Return the stripped cron expression or raise InvalidScheduleError."""
    expression = (expression or '').strip()
    if not expression or len(expression.split()) != 5 or not croniter.is_valid(expression):
        raise InvalidScheduleError(f"Invalid cron expression: '{expression}'")
    return expression


def next_run_for(expression, start=None):
    start = start or timezone.localtime()
    return croniter(expression, start).get_next(datetime)


class JobScheduler:
    """Runs, inspects and reschedules the notification jobs."""

    def __init__(self, registry=None):
        self.registry = registry or get_run_registry()

    def trigger(self, job_name, trigger=JobRun.Trigger.MANUAL, **kwargs):
        """
        Run a job synchronously and return its JobSummary.

        A run that overlaps an active one returns a failed summary without
        running. Anything the job raises becomes a failed summary too.
        """
        job = get_job(job_name)

        token = self.registry.acquire(job_name)
        if token is None:
            aggregator = JobResultAggregator(job_name)
            aggregator.fail(already_running_message(job_name))
            summary = aggregator.build()
            logger.warning(f'[Scheduler] {summary.message}; skipping this run')
            return summary

        logger.info(f'[Scheduler] Starting {job_name} ({trigger})')
        try:
            summary = import_string(job.func)(**kwargs)
        except Exception as exc:
            logger.exception(f'[Scheduler] Job {job_name} raised an unexpected error')
            aggregator = JobResultAggregator(job_name)
            aggregator.fail(f'Job {job_name} failed: {exc}')
            summary = aggregator.build()
        finally:
            self.registry.release(job_name, token)

        if summary.success:
            logger.info(summary.describe())
        else:
            logger.warning(summary.describe())

        try:
            log_job_run(summary, trigger=trigger)
        except DatabaseError:
            logger.exception(f'[Scheduler] Failed to record run of {job_name}')

        return summary

    def status(self, job_name):
        job = get_job(job_name)
        schedule = Schedule.objects.filter(name=job.schedule_name).first()
        last_run = get_last_run(job_name)

        if last_run is not None:
            last = dict(last_run.summary)
            last['trigger'] = last_run.trigger
        else:
            last = None

        next_run = schedule.next_run if schedule else None
        return {
            'job_name': job_name,
            'scheduled': schedule is not None,
            'cron': schedule.cron if schedule else getattr(settings, job.cron_setting),
            'next_run': next_run.isoformat() if next_run else None,
            'running': self.registry.is_running(job_name),
            'last_run': last,
        }

    def status_all(self):
        return [self.status(job_name) for job_name in JOBS]

    def reschedule(self, job_name, expression):
        """
        Change a job's cron expression.

        Raises:
            UnknownJobError: If job_name is not a known job
            InvalidScheduleError: If expression is not a five-field cron
        """
        job = get_job(job_name)
        expression = validate_cron(expression)
        self._save_schedule(job, expression)
        logger.info(f'[Scheduler] {job_name} rescheduled to "{expression}"')
        return self.status(job_name)

    def ensure_schedules(self):
        """
        Create or update the django-q2 schedule of every job from settings.

        Returns:
            list of (job_name, cron, created) tuples
        """
        results = []
        for job_name, job in JOBS.items():
            expression = validate_cron(getattr(settings, job.cron_setting))
            _, created = self._save_schedule(job, expression)
            results.append((job_name, expression, created))
        return results

    def _save_schedule(self, job, expression):
        return Schedule.objects.update_or_create(
            name=job.schedule_name,
            defaults={
                'func': job.task,
                'schedule_type': Schedule.CRON,
                'cron': expression,
                'repeats': -1,
                'next_run': next_run_for(expression),
            }
        )
