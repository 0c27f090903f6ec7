from io import StringIO
from unittest import mock

from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError
from django.test import TestCase
from django_q.models import Schedule

from apps.notifications.scheduler import JOBS

from .fakes import assign, make_task, make_volunteer


class SetupSchedulesCommandTests(TestCase):
    def test_creates_then_updates(self):
        out = StringIO()
        call_command('setup_schedules', stdout=out)
        call_command('setup_schedules', stdout=out)

        self.assertEqual(Schedule.objects.count(), len(JOBS))
        self.assertIn('3 schedule(s) created', out.getvalue())
        self.assertIn('3 schedule(s) updated', out.getvalue())


class RunJobCommandTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_prints_summary(self):
        assign(make_task(), make_volunteer())
        out = StringIO()

        call_command('run_job', 'reminders', stdout=out)

        self.assertIn('reminders job summary:', out.getvalue())
        self.assertIn('- Reminders Sent: 1', out.getvalue())

    def test_json_output(self):
        out = StringIO()

        call_command('run_job', 'volunteer_status', '--json', stdout=out)

        self.assertIn('"job_name": "volunteer_status"', out.getvalue())

    def test_failed_run_raises(self):
        with mock.patch(
            'apps.notifications.reminders.get_pending_tasks',
            side_effect=DatabaseError('connection lost'),
        ):
            with self.assertRaises(CommandError):
                call_command('run_job', 'reminders', stdout=StringIO())

    def test_unknown_job(self):
        with self.assertRaises(CommandError):
            call_command('run_job', 'payroll', stdout=StringIO())


class RescheduleJobCommandTests(TestCase):
    def test_reschedule(self):
        out = StringIO()

        call_command('reschedule_job', 'volunteer_status', '5 0 * * *', stdout=out)

        self.assertEqual(Schedule.objects.get(name=JOBS['volunteer_status'].schedule_name).cron, '5 0 * * *')
        self.assertIn('rescheduled', out.getvalue())

    def test_invalid_cron(self):
        with self.assertRaises(CommandError):
            call_command('reschedule_job', 'volunteer_status', 'whenever', stdout=StringIO())
