from datetime import date
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from apps.notifications.dispatcher import InvalidAddressError, ProviderUnavailableError
from apps.notifications.ledger import ReminderLedger
from apps.notifications.models import ReminderLedgerEntry
from apps.notifications.reminders import (
    SKIP_ALREADY_SENT,
    SKIP_NO_ADDRESS,
    process_pending_task_reminders,
)
from apps.tasks.models import Task
from apps.tasks.services import get_assigned_volunteers

from .fakes import FakeMessageClient, assign, make_task, make_volunteer

DAY = date(2026, 2, 9)


class FailingLedger(ReminderLedger):
    def record(self, task_id, volunteer_id, day, message_id):
        raise DatabaseError('ledger unavailable')


class ReminderProcessorTests(TestCase):
    def setUp(self):
        self.client_ = FakeMessageClient()

    def run_job(self, **kwargs):
        kwargs.setdefault('client', self.client_)
        kwargs.setdefault('today', DAY)
        return process_pending_task_reminders(**kwargs)

    def test_sends_one_reminder_per_assigned_volunteer(self):
        task = make_task(due_date=date(2026, 2, 10))
        asha = make_volunteer()
        ravi = make_volunteer('Ravi Iyer', 'ravi@example.org')
        assign(task, asha)
        assign(task, ravi)

        summary = self.run_job()

        self.assertTrue(summary.success)
        self.assertEqual(summary.tasks_processed, 1)
        self.assertEqual(summary.reminders_sent, 2)
        self.assertEqual(self.client_.addresses(), ['asha@example.org', 'ravi@example.org'])
        self.assertEqual(
            ReminderLedgerEntry.objects.filter(task=task, sent_on=DAY).count(), 2
        )

    def test_reminder_params(self):
        task = make_task(title='Pack kits', due_date=date(2026, 2, 10))
        volunteer = make_volunteer()
        assign(task, volunteer)

        self.run_job()

        _, template_id, params = self.client_.sent[0]
        self.assertEqual(template_id, 1)
        self.assertEqual(params['VOLUNTEER_NAME'], 'Asha Rao')
        self.assertEqual(params['TASK_TITLE'], 'Pack kits')
        self.assertEqual(params['DUE_DATE'], '2026-02-10')
        self.assertEqual(params['TASK_ID'], str(task.pk))

    def test_second_run_same_day_sends_nothing(self):
        task = make_task(due_date=date(2026, 2, 10))
        volunteer = make_volunteer()
        assign(task, volunteer)

        first = self.run_job()
        second = self.run_job()

        self.assertEqual(first.reminders_sent, 1)
        self.assertEqual(second.reminders_sent, 0)
        self.assertEqual(second.reminders_skipped, 1)
        skip = second.task_results[0].skipped[0]
        self.assertEqual(skip.volunteer_id, volunteer.pk)
        self.assertEqual(skip.reason, SKIP_ALREADY_SENT)
        self.assertEqual(len(self.client_.sent), 1)

    def test_next_day_sends_again(self):
        task = make_task()
        assign(task, make_volunteer())

        self.run_job(today=DAY)
        summary = self.run_job(today=date(2026, 2, 10))

        self.assertEqual(summary.reminders_sent, 1)
        self.assertEqual(ReminderLedgerEntry.objects.count(), 2)

    def test_completed_tasks_are_not_reminded(self):
        task = make_task(status=Task.Status.COMPLETED)
        assign(task, make_volunteer())

        summary = self.run_job()

        self.assertEqual(summary.tasks_processed, 0)
        self.assertEqual(self.client_.sent, [])
        self.assertFalse(ReminderLedgerEntry.objects.exists())

    def test_volunteer_without_address_is_skipped_not_failed(self):
        task = make_task()
        nobody = make_volunteer('No Mail', '')
        assign(task, nobody)

        summary = self.run_job()

        self.assertTrue(summary.success)
        self.assertEqual(summary.reminders_failed, 0)
        self.assertEqual(summary.reminders_skipped, 1)
        self.assertEqual(summary.task_results[0].skipped[0].reason, SKIP_NO_ADDRESS)

    def test_task_without_assignments_is_processed_quietly(self):
        make_task()

        summary = self.run_job()

        self.assertTrue(summary.success)
        self.assertEqual(summary.tasks_processed, 1)
        self.assertEqual(summary.reminders_sent, 0)
        self.assertEqual(summary.task_results[0].errors, ())

    def test_one_failed_send_does_not_block_the_others(self):
        task = make_task()
        good = make_volunteer('Good', 'good@example.org')
        bad = make_volunteer('Bad', 'bad@example.org')
        assign(task, bad)
        assign(task, good)
        self.client_.failures['bad@example.org'] = InvalidAddressError('mailbox rejected')

        summary = self.run_job()

        self.assertTrue(summary.success)
        self.assertEqual(summary.reminders_sent, 1)
        self.assertEqual(summary.reminders_failed, 1)
        error = summary.task_results[0].errors[0]
        self.assertEqual(error.volunteer_id, bad.pk)
        self.assertEqual(error.address, 'bad@example.org')
        self.assertIn('mailbox rejected', error.reason)
        self.assertFalse(ReminderLedgerEntry.objects.filter(volunteer=bad).exists())
        self.assertTrue(ReminderLedgerEntry.objects.filter(volunteer=good).exists())

    def test_failed_send_is_retried_on_next_run(self):
        task = make_task()
        assign(task, make_volunteer())
        self.client_.failures['asha@example.org'] = ProviderUnavailableError('timed out')
        self.run_job()

        del self.client_.failures['asha@example.org']
        summary = self.run_job()

        self.assertEqual(summary.reminders_sent, 1)

    def test_ledger_write_failure_still_counts_the_send(self):
        task = make_task()
        assign(task, make_volunteer())

        summary = self.run_job(ledger=FailingLedger())

        self.assertTrue(summary.success)
        self.assertEqual(summary.reminders_sent, 1)
        self.assertEqual(summary.reminders_failed, 0)

    def test_discovery_failure_aborts_the_run(self):
        with mock.patch(
            'apps.notifications.reminders.get_pending_tasks',
            side_effect=DatabaseError('connection lost'),
        ):
            summary = self.run_job()

        self.assertFalse(summary.success)
        self.assertIn('connection lost', summary.message)
        self.assertEqual(self.client_.sent, [])

    def test_assignment_failure_is_isolated_to_its_task(self):
        broken = make_task('Broken')
        healthy = make_task('Healthy')
        assign(broken, make_volunteer('One', 'one@example.org'))
        assign(healthy, make_volunteer('Two', 'two@example.org'))

        def flaky(task):
            if task.pk == broken.pk:
                raise DatabaseError('assignment read failed')
            return get_assigned_volunteers(task)

        with mock.patch('apps.notifications.reminders.get_assigned_volunteers', side_effect=flaky):
            summary = self.run_job()

        self.assertTrue(summary.success)
        self.assertEqual(summary.tasks_processed, 1)
        self.assertEqual(self.client_.addresses(), ['two@example.org'])
        broken_result = next(r for r in summary.task_results if r.task_id == broken.pk)
        self.assertIn('assignment read failed', broken_result.errors[0].reason)

    def test_client_is_closed_when_created_by_the_job(self):
        task = make_task()
        assign(task, make_volunteer())
        fake = FakeMessageClient()

        with mock.patch('apps.notifications.reminders.get_message_client', return_value=fake):
            process_pending_task_reminders(today=DAY)

        self.assertTrue(fake.closed)
        self.assertEqual(len(fake.sent), 1)

    def test_single_worker_pool(self):
        task = make_task()
        for index in range(4):
            assign(task, make_volunteer(f'V{index}', f'v{index}@example.org'))

        summary = self.run_job(max_workers=1)

        self.assertEqual(summary.reminders_sent, 4)
