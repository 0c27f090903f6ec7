from datetime import date
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase, override_settings

from apps.notifications.dispatcher import ProviderUnavailableError
from apps.notifications.escalations import (
    UNASSIGNED,
    assigned_volunteer_names,
    process_overdue_escalations,
)
from apps.notifications.ledger import EscalationLedger
from apps.notifications.models import EscalationLedgerEntry, ReminderLedgerEntry
from apps.notifications.reminders import process_pending_task_reminders
from apps.tasks.models import Task
from apps.tasks.services import get_overdue_tasks

from .fakes import FakeMessageClient, assign, make_task, make_volunteer

TODAY = date(2026, 2, 11)
ADMINS = ['admin1@example.org', 'admin2@example.org']


class FailingRecordLedger(EscalationLedger):
    def record(self, task_id, admin_email, day, message_id):
        raise DatabaseError('ledger unavailable')


class FailingLookupLedger(EscalationLedger):
    def __init__(self, broken_task_id):
        self.broken_task_id = broken_task_id

    def has_entry(self, task_id, admin_email, day):
        if task_id == self.broken_task_id:
            raise DatabaseError('ledger lookup failed')
        return super().has_entry(task_id, admin_email, day)


class OverdueEscalationTests(TestCase):
    def setUp(self):
        self.client_ = FakeMessageClient()

    def run_job(self, **kwargs):
        kwargs.setdefault('client', self.client_)
        kwargs.setdefault('today', TODAY)
        return process_overdue_escalations(**kwargs)

    def test_one_alert_per_overdue_task_per_admin(self):
        first = make_task('First', due_date=date(2026, 2, 1))
        second = make_task('Second', due_date=date(2026, 2, 10))
        assign(first, make_volunteer())

        summary = self.run_job()

        self.assertTrue(summary.success)
        self.assertEqual(summary.tasks_processed, 2)
        self.assertEqual(summary.escalations_sent, 4)
        self.assertEqual(self.client_.addresses(), sorted(ADMINS * 2))
        self.assertEqual(EscalationLedgerEntry.objects.filter(task=second).count(), 2)

    def test_alert_lists_sorted_unique_volunteer_names(self):
        task = make_task(due_date=date(2026, 2, 1))
        assign(task, make_volunteer('Zoya Khan', 'zoya@example.org'))
        assign(task, make_volunteer('Asha Rao', 'asha@example.org'))
        assign(task, make_volunteer('Asha Rao', 'asha.two@example.org'))

        self.run_job(admin_emails=['lead@example.org'])

        _, template_id, params = self.client_.sent[0]
        self.assertEqual(template_id, 2)
        self.assertEqual(params['VOLUNTEERS'], 'Asha Rao, Zoya Khan')
        self.assertEqual(params['TASK_ID'], str(task.pk))
        self.assertEqual(params['DUE_DATE'], '2026-02-01')

    def test_unassigned_task_is_reported_as_unassigned(self):
        task = make_task(due_date=date(2026, 2, 1))

        self.assertEqual(assigned_volunteer_names(get_overdue_tasks(TODAY)[0]), [UNASSIGNED])
        self.run_job(admin_emails=['lead@example.org'])

        self.assertEqual(self.client_.sent[0][2]['VOLUNTEERS'], UNASSIGNED)
        self.assertEqual(self.client_.sent[0][2]['TASK_TITLE'], task.title)

    def test_second_run_same_day_sends_nothing(self):
        make_task(due_date=date(2026, 2, 1))

        self.run_job()
        summary = self.run_job()

        self.assertEqual(summary.escalations_sent, 0)
        self.assertEqual(len(self.client_.sent), 2)

    def test_completed_and_not_yet_due_tasks_are_ignored(self):
        make_task('Done', status=Task.Status.COMPLETED, due_date=date(2026, 2, 1))
        make_task('Due today', due_date=TODAY)
        make_task('No due date')

        summary = self.run_job()

        self.assertEqual(summary.tasks_processed, 0)
        self.assertEqual(self.client_.sent, [])

    def test_failure_for_one_admin_does_not_block_the_other(self):
        task = make_task(due_date=date(2026, 2, 1))
        self.client_.failures['admin1@example.org'] = ProviderUnavailableError('timed out')

        summary = self.run_job()

        self.assertTrue(summary.success)
        self.assertEqual(summary.escalations_sent, 1)
        self.assertEqual(summary.escalations_failed, 1)
        self.assertIn('admin1@example.org', summary.errors[0])
        self.assertEqual(
            list(EscalationLedgerEntry.objects.filter(task=task).values_list('admin_email', flat=True)),
            ['admin2@example.org'],
        )

    def test_task_result_records_each_admin_outcome(self):
        task = make_task(due_date=date(2026, 2, 1))
        self.client_.failures['admin1@example.org'] = ProviderUnavailableError('down')

        summary = self.run_job()

        result = summary.task_results[0]
        self.assertEqual(result.task_id, task.pk)
        self.assertEqual((result.sent, result.failed), (1, 1))
        self.assertEqual(result.errors[0].address, 'admin1@example.org')
        self.assertIsNone(result.errors[0].volunteer_id)
        self.assertIn('down', result.errors[0].reason)
        self.assertEqual(summary.reminders_sent, 0)
        self.assertEqual(summary.reminders_failed, 0)

    def test_discovery_failure_aborts_the_run(self):
        make_task(due_date=date(2026, 2, 1))
        with mock.patch(
            'apps.notifications.escalations.get_overdue_tasks',
            side_effect=DatabaseError('connection lost'),
        ):
            summary = self.run_job()

        self.assertFalse(summary.success)
        self.assertIn('connection lost', summary.message)
        self.assertEqual(self.client_.sent, [])

    def test_ledger_write_failure_still_counts_the_send(self):
        make_task(due_date=date(2026, 2, 1))

        summary = self.run_job(ledger=FailingRecordLedger())

        self.assertTrue(summary.success)
        self.assertEqual(summary.escalations_sent, 2)
        self.assertEqual(summary.escalations_failed, 0)
        self.assertEqual(summary.task_results[0].sent, 2)
        self.assertFalse(EscalationLedgerEntry.objects.exists())

    def test_preparation_failure_is_isolated_to_its_task(self):
        broken = make_task('Broken', due_date=date(2026, 2, 1))
        healthy = make_task('Healthy', due_date=date(2026, 2, 2))

        summary = self.run_job(ledger=FailingLookupLedger(broken.pk))

        self.assertTrue(summary.success)
        self.assertEqual(summary.tasks_processed, 1)
        self.assertEqual(summary.escalations_sent, 2)
        self.assertEqual(
            set(EscalationLedgerEntry.objects.values_list('task_id', flat=True)),
            {healthy.pk},
        )
        broken_result = next(r for r in summary.task_results if r.task_id == broken.pk)
        self.assertIn('ledger lookup failed', broken_result.errors[0].reason)

    @override_settings(ADMIN_ALERT_EMAILS=[], ADMIN_EMAIL='owner@example.org')
    def test_falls_back_to_single_admin_email(self):
        make_task(due_date=date(2026, 2, 1))

        summary = self.run_job()

        self.assertEqual(summary.escalations_sent, 1)
        self.assertEqual(self.client_.addresses(), ['owner@example.org'])

    @override_settings(ADMIN_ALERT_EMAILS=[], ADMIN_EMAIL='')
    def test_no_admin_addresses_is_not_a_failure(self):
        make_task(due_date=date(2026, 2, 1))

        summary = self.run_job()

        self.assertTrue(summary.success)
        self.assertEqual(summary.escalations_sent, 0)
        self.assertEqual(summary.message, 'No administrator addresses configured')


class ReminderToEscalationScenarioTests(TestCase):
    """A pending task is reminded before its due date and escalated after it."""

    def test_reminder_then_escalation(self):
        task = make_task(due_date=date(2026, 2, 10))
        volunteer = make_volunteer()
        assign(task, volunteer)
        client = FakeMessageClient()

        first = process_pending_task_reminders(client=client, today=date(2026, 2, 9))
        self.assertEqual(first.reminders_sent, 1)
        self.assertTrue(
            ReminderLedgerEntry.objects.filter(
                task=task, volunteer=volunteer, sent_on=date(2026, 2, 9)
            ).exists()
        )

        again = process_pending_task_reminders(client=client, today=date(2026, 2, 9))
        self.assertEqual(again.reminders_sent, 0)
        self.assertEqual(again.task_results[0].skipped[0].reason, 'already sent today')

        escalation = process_overdue_escalations(client=client, today=date(2026, 2, 11))
        self.assertEqual(escalation.escalations_sent, len(ADMINS))
        self.assertEqual(
            sorted(EscalationLedgerEntry.objects.filter(task=task).values_list('admin_email', flat=True)),
            ADMINS,
        )
