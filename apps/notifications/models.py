"""
Dedup ledger models.

Models:
- ReminderLedgerEntry: one row per (task, volunteer, day) reminder sent
- EscalationLedgerEntry: one row per (task, admin address, day) alert sent

Both ledgers are append-only. The unique constraints are what keep
concurrent runs from recording the same notification twice.
"""

from django.db import models


class ReminderLedgerEntry(models.Model):
    """Record of a reminder delivered to a volunteer for a task on a given day."""

    task = models.ForeignKey(
        'tasks.Task',
        on_delete=models.CASCADE,
        related_name='reminder_entries',
    )
    volunteer = models.ForeignKey(
        'volunteers.Volunteer',
        on_delete=models.CASCADE,
        related_name='reminder_entries',
    )
    sent_on = models.DateField(db_index=True)
    message_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'reminder ledger entry'
        verbose_name_plural = 'reminder ledger entries'
        ordering = ['-sent_on', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['task', 'volunteer', 'sent_on'],
                name='unique_reminder_per_task_volunteer_day',
            ),
        ]

    def __str__(self):
        return f"Reminder task={self.task_id} volunteer={self.volunteer_id} on {self.sent_on}"


class EscalationLedgerEntry(models.Model):
    """Record of an overdue alert delivered to an administrator on a given day."""

    task = models.ForeignKey(
        'tasks.Task',
        on_delete=models.CASCADE,
        related_name='escalation_entries',
    )
    admin_email = models.EmailField()
    sent_on = models.DateField(db_index=True)
    message_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'escalation ledger entry'
        verbose_name_plural = 'escalation ledger entries'
        ordering = ['-sent_on', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['task', 'admin_email', 'sent_on'],
                name='unique_escalation_per_task_admin_day',
            ),
        ]

    def __str__(self):
        return f"Escalation task={self.task_id} to {self.admin_email} on {self.sent_on}"
