"""
Job result aggregation.

JobResultAggregator is the mutable accumulator a job writes to while it
runs; build() freezes it into a JobSummary, the single immutable value
returned to the caller and written to the log.
"""

from dataclasses import dataclass, field
from typing import Optional

from django.utils import timezone


@dataclass(frozen=True)
class RecipientError:
    volunteer_id: Optional[int]
    address: str
    reason: str

    def as_dict(self):
        return {
            'volunteer_id': self.volunteer_id,
            'address': self.address,
            'reason': self.reason,
        }


@dataclass(frozen=True)
class RecipientSkip:
    volunteer_id: int
    reason: str

    def as_dict(self):
        return {'volunteer_id': self.volunteer_id, 'reason': self.reason}


@dataclass(frozen=True)
class TaskResult:
    task_id: int
    task_title: str
    sent: int = 0
    failed: int = 0
    errors: tuple = ()
    skipped: tuple = ()

    def as_dict(self):
        return {
            'task_id': self.task_id,
            'task_title': self.task_title,
            'sent': self.sent,
            'failed': self.failed,
            'errors': [error.as_dict() for error in self.errors],
            'skipped': [skip.as_dict() for skip in self.skipped],
        }


@dataclass(frozen=True)
class StatusChangeResult:
    volunteer_id: int
    volunteer_name: str
    previous_status: str
    new_status: str
    reason: str

    def as_dict(self):
        return {
            'volunteer_id': self.volunteer_id,
            'volunteer_name': self.volunteer_name,
            'previous_status': self.previous_status,
            'new_status': self.new_status,
            'reason': self.reason,
        }


@dataclass(frozen=True)
class JobSummary:
    job_name: str
    success: bool
    started_at: object
    finished_at: object
    message: str = ''
    tasks_processed: int = 0
    reminders_sent: int = 0
    reminders_failed: int = 0
    reminders_skipped: int = 0
    escalations_sent: int = 0
    escalations_failed: int = 0
    volunteers_checked: int = 0
    status_changes: tuple = ()
    task_results: tuple = ()
    errors: tuple = ()

    @property
    def duration_seconds(self):
        return (self.finished_at - self.started_at).total_seconds()

    def as_dict(self):
        return {
            'job_name': self.job_name,
            'success': self.success,
            'message': self.message,
            'timestamp': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat(),
            'duration_seconds': self.duration_seconds,
            'tasks_processed': self.tasks_processed,
            'reminders_sent': self.reminders_sent,
            'reminders_failed': self.reminders_failed,
            'reminders_skipped': self.reminders_skipped,
            'escalations_sent': self.escalations_sent,
            'escalations_failed': self.escalations_failed,
            'volunteers_checked': self.volunteers_checked,
            'status_changes': [change.as_dict() for change in self.status_changes],
            'task_results': [result.as_dict() for result in self.task_results],
            'errors': list(self.errors),
        }

    def describe(self):
        """Human-readable summary for logs and the CLI."""
        lines = [
            f'{self.job_name} job summary:',
            f'- Timestamp: {self.started_at.isoformat()}',
            f'- Tasks Processed: {self.tasks_processed}',
            f'- Reminders Sent: {self.reminders_sent}',
            f'- Reminders Failed: {self.reminders_failed}',
            f'- Reminders Skipped: {self.reminders_skipped}',
            f'- Escalations Sent: {self.escalations_sent}',
            f'- Escalations Failed: {self.escalations_failed}',
            f'- Volunteers Checked: {self.volunteers_checked}',
            f'- Status Changes: {len(self.status_changes)}',
            f'- Status: {"Success" if self.success else "Failed"}',
        ]
        if self.message:
            lines.append(f'- Message: {self.message}')
        for change in self.status_changes:
            lines.append(
                f'  • {change.volunteer_name}: {change.previous_status} → '
                f'{change.new_status} ({change.reason})'
            )
        if self.errors:
            lines.append(f'- Errors: {", ".join(self.errors)}')
        return '\n'.join(lines)


@dataclass
class _TaskAccumulator:
    task_id: int
    task_title: str
    sent: int = 0
    failed: int = 0
    errors: list = field(default_factory=list)
    skipped: list = field(default_factory=list)


class JobResultAggregator:
    """
    Collects counts and per-item errors for one run.

    Only the thread driving the run writes to it; dispatch workers hand
    their outcomes back through futures.
    """

    def __init__(self, job_name, started_at=None):
        self.job_name = job_name
        self.started_at = started_at or timezone.now()
        self.success = True
        self.message = ''
        self.tasks_processed = 0
        self.reminders_sent = 0
        self.reminders_failed = 0
        self.reminders_skipped = 0
        self.escalations_sent = 0
        self.escalations_failed = 0
        self.volunteers_checked = 0
        self.errors = []
        self._status_changes = []
        self._tasks = {}

    def _task(self, task):
        if task.pk not in self._tasks:
            self._tasks[task.pk] = _TaskAccumulator(task_id=task.pk, task_title=task.title)
        return self._tasks[task.pk]

    def start_task(self, task):
        self._task(task)

    def task_processed(self, task):
        self._task(task)
        self.tasks_processed += 1

    def reminder_sent(self, task):
        self._task(task).sent += 1
        self.reminders_sent += 1

    def reminder_failed(self, task, volunteer_id, address, reason):
        entry = self._task(task)
        entry.failed += 1
        entry.errors.append(RecipientError(volunteer_id, address or '', reason))
        self.reminders_failed += 1

    def reminder_skipped(self, task, volunteer_id, reason):
        self._task(task).skipped.append(RecipientSkip(volunteer_id, reason))
        self.reminders_skipped += 1

    def task_error(self, task, reason):
        """Record an error that is not tied to a single volunteer."""
        self._task(task).errors.append(RecipientError(None, '', reason))

    def escalation_sent(self, task):
        self._task(task).sent += 1
        self.escalations_sent += 1

    def escalation_failed(self, task, admin_email, reason):
        entry = self._task(task)
        entry.failed += 1
        entry.errors.append(RecipientError(None, admin_email, reason))
        self.escalations_failed += 1
        self.errors.append(f'Escalation for task {task.pk} to {admin_email} failed: {reason}')

    def status_changed(self, volunteer, previous_status, new_status, reason):
        self._status_changes.append(StatusChangeResult(
            volunteer_id=volunteer.pk,
            volunteer_name=volunteer.full_name,
            previous_status=previous_status,
            new_status=new_status,
            reason=reason,
        ))

    def add_error(self, message):
        self.errors.append(message)

    def fail(self, message):
        """Mark the whole run as failed (discovery error, overlap)."""
        self.success = False
        self.message = message
        self.errors.append(message)

    def build(self, finished_at=None):
        task_results = tuple(
            TaskResult(
                task_id=entry.task_id,
                task_title=entry.task_title,
                sent=entry.sent,
                failed=entry.failed,
                errors=tuple(entry.errors),
                skipped=tuple(entry.skipped),
            )
            for entry in self._tasks.values()
        )
        return JobSummary(
            job_name=self.job_name,
            success=self.success,
            started_at=self.started_at,
            finished_at=finished_at or timezone.now(),
            message=self.message,
            tasks_processed=self.tasks_processed,
            reminders_sent=self.reminders_sent,
            reminders_failed=self.reminders_failed,
            reminders_skipped=self.reminders_skipped,
            escalations_sent=self.escalations_sent,
            escalations_failed=self.escalations_failed,
            volunteers_checked=self.volunteers_checked,
            status_changes=tuple(self._status_changes),
            task_results=task_results,
            errors=tuple(self.errors),
        )
