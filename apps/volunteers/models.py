"""
Volunteer models.

Volunteers are the recipients of task reminders. Their status is derived
by the scheduled status job (see services.update_volunteer_statuses) and
any manually stored value is overwritten on the next run.
"""

from django.db import models


class Volunteer(models.Model):
    """
    A person who can be assigned tasks.

    Reminders are only sent to volunteers with an email address;
    volunteers without one are skipped, never treated as failures.
    """

    class Status(models.TextChoices):
        ACTIVE = 'Active', 'Active'
        INACTIVE = 'Inactive', 'Inactive'

    full_name = models.CharField(max_length=255)
    email = models.EmailField(
        blank=True,
        default='',
        help_text='Contact address for reminders (optional)'
    )
    role = models.CharField(max_length=100, blank=True)
    place = models.CharField(max_length=255, blank=True)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
        help_text='Derived by the volunteer status job'
    )
    joining_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'volunteer'
        verbose_name_plural = 'volunteers'
        ordering = ['full_name']

    def __str__(self):
        return self.full_name

    @property
    def has_contact_address(self):
        return bool(self.email and self.email.strip())
