"""
Dedup ledgers for reminders and escalations.

A ledger answers "was this already sent today?" and records sends.
record() returns False when the unique constraint rejects the row,
meaning another run already recorded the same (key, day). Any other
database error propagates to the caller.
"""

import logging

from django.db import IntegrityError, transaction

from .models import EscalationLedgerEntry, ReminderLedgerEntry

logger = logging.getLogger(__name__)


class ReminderLedger:
    """Ledger keyed by (task, volunteer, day)."""

    model = ReminderLedgerEntry

    def sent_volunteer_ids(self, task_id, day):
        """Return the ids of volunteers already reminded about a task on day."""
        return set(
            self.model.objects
            .filter(task_id=task_id, sent_on=day)
            .values_list('volunteer_id', flat=True)
        )

    def has_entry(self, task_id, volunteer_id, day):
        return self.model.objects.filter(
            task_id=task_id, volunteer_id=volunteer_id, sent_on=day
        ).exists()

    def record(self, task_id, volunteer_id, day, message_id):
        try:
            with transaction.atomic():
                self.model.objects.create(
                    task_id=task_id,
                    volunteer_id=volunteer_id,
                    sent_on=day,
                    message_id=message_id or '',
                )
        except IntegrityError:
            logger.info(
                f'Reminder ledger already has task={task_id} volunteer={volunteer_id} on {day}'
            )
            return False
        return True


class EscalationLedger:
    """Ledger keyed by (task, admin address, day)."""

    model = EscalationLedgerEntry

    def has_entry(self, task_id, admin_email, day):
        return self.model.objects.filter(
            task_id=task_id, admin_email=admin_email, sent_on=day
        ).exists()

    def record(self, task_id, admin_email, day, message_id):
        try:
            with transaction.atomic():
                self.model.objects.create(
                    task_id=task_id,
                    admin_email=admin_email,
                    sent_on=day,
                    message_id=message_id or '',
                )
        except IntegrityError:
            logger.info(
                f'Escalation ledger already has task={task_id} admin={admin_email} on {day}'
            )
            return False
        return True
