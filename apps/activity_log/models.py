"""
Activity log models for the notification engine's audit trail.

Logs:
- Every job run (scheduled or manual) with its summary
- Every volunteer status change made by the status job, with the reason
"""

from django.db import models


class JobRun(models.Model):
    """
    Audit record of one job run.

    summary holds JobSummary.as_dict() so the status endpoint can report
    the last run without re-deriving anything.
    """

    class Trigger(models.TextChoices):
        SCHEDULE = 'schedule', 'Schedule'
        MANUAL = 'manual', 'Manual'

    job_name = models.CharField(max_length=50, db_index=True)
    trigger = models.CharField(
        max_length=10,
        choices=Trigger.choices,
        default=Trigger.SCHEDULE,
    )
    success = models.BooleanField(default=True)
    message = models.TextField(blank=True)
    started_at = models.DateTimeField()
    finished_at = models.DateTimeField()
    summary = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'job run'
        verbose_name_plural = 'job runs'
        ordering = ['-started_at', '-id']
        indexes = [
            models.Index(fields=['job_name', '-started_at'], name='jobrun_job_started_idx'),
        ]

    def __str__(self):
        outcome = 'ok' if self.success else 'failed'
        return f"{self.job_name} @ {self.started_at:%Y-%m-%d %H:%M} ({outcome})"


class StatusChange(models.Model):
    """
    Audit log for derived volunteer status changes.

    Only actual value changes are recorded; re-evaluations that leave the
    status untouched produce no rows.
    """

    volunteer = models.ForeignKey(
        'volunteers.Volunteer',
        on_delete=models.CASCADE,
        related_name='status_changes',
    )
    previous_status = models.CharField(max_length=10)
    new_status = models.CharField(max_length=10)
    reason = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'status change'
        verbose_name_plural = 'status changes'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['volunteer', '-created_at'], name='statuschange_vol_created_idx'),
        ]

    def __str__(self):
        return f"{self.volunteer}: {self.previous_status} → {self.new_status}"


def log_job_run(summary, trigger=JobRun.Trigger.SCHEDULE):
    """
    Helper function to persist a job summary.

    Args:
        summary: JobSummary instance
        trigger: One of JobRun.Trigger choices

    Returns:
        Created JobRun instance
    """
    return JobRun.objects.create(
        job_name=summary.job_name,
        trigger=trigger,
        success=summary.success,
        message=summary.message,
        started_at=summary.started_at,
        finished_at=summary.finished_at,
        summary=summary.as_dict(),
    )


def log_status_change(volunteer, previous_status, new_status, reason):
    """
    Helper function to create status change entries.

    Returns:
        Created StatusChange instance
    """
    return StatusChange.objects.create(
        volunteer=volunteer,
        previous_status=previous_status,
        new_status=new_status,
        reason=reason,
    )


def get_last_run(job_name):
    """Return the most recent JobRun for a job, or None."""
    return JobRun.objects.filter(job_name=job_name).first()
