"""
Task models.

Models:
- Task: Work item with an optional due date and a two-state status
- TaskAssignment: Many-to-many link between tasks and volunteers

Tasks and assignments are created and edited by the admin/CRUD layer.
The notification engine only reads them.
"""

from django.db import models
from django.utils import timezone


class Task(models.Model):
    """
    Main Task model.

    Status workflow: Pending → Completed. Completed is terminal for the
    notification engine: a completed task never produces reminders or
    escalations.
    """

    class Status(models.TextChoices):
        PENDING = 'Pending', 'Pending'
        COMPLETED = 'Completed', 'Completed'

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    due_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        help_text='Calendar day the task is due'
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    volunteers = models.ManyToManyField(
        'volunteers.Volunteer',
        through='TaskAssignment',
        related_name='tasks',
    )

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['due_date', 'status'], name='task_due_status_idx'),
        ]

    def __str__(self):
        return self.title

    @property
    def is_completed(self):
        return self.status == self.Status.COMPLETED

    def is_overdue(self, today=None):
        """Check if the due date is strictly before today and the task is incomplete."""
        if not self.due_date or self.is_completed:
            return False
        today = today or timezone.localdate()
        return self.due_date < today

    @property
    def due_date_display(self):
        """Due date as sent to the message provider."""
        return self.due_date.isoformat() if self.due_date else 'No due date'


class TaskAssignment(models.Model):
    """
    Assignment of a volunteer to a task.

    assigned_at feeds the volunteer status job's recency window.
    """

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='assignments',
    )
    volunteer = models.ForeignKey(
        'volunteers.Volunteer',
        on_delete=models.CASCADE,
        related_name='assignments',
    )
    assigned_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name = 'task assignment'
        verbose_name_plural = 'task assignments'
        ordering = ['assigned_at', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['task', 'volunteer'],
                name='unique_task_volunteer_assignment',
            ),
        ]
        indexes = [
            models.Index(fields=['volunteer', 'assigned_at'], name='assignment_volunteer_at_idx'),
        ]

    def __str__(self):
        return f"{self.volunteer} → {self.task}"
