"""
Management command to change a job's cron expression.

Usage:
    python manage.py reschedule_job reminders "30 8 * * *"
"""
from django.core.management.base import BaseCommand, CommandError

from apps.notifications.scheduler import JOBS, JobScheduler, SchedulerError


class Command(BaseCommand):
    help = "Change a notification job's cron schedule"

    def add_arguments(self, parser):
        parser.add_argument('job_name', choices=list(JOBS))
        parser.add_argument('cron', help='Five-field cron expression')

    def handle(self, *args, **options):
        try:
            status = JobScheduler().reschedule(options['job_name'], options['cron'])
        except SchedulerError as exc:
            raise CommandError(str(exc))

        self.stdout.write(
            self.style.SUCCESS(
                f"✓ {status['job_name']} rescheduled to \"{status['cron']}\" "
                f"(next run: {status['next_run']})"
            )
        )
