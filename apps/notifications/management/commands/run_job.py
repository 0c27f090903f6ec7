"""
Management command to run a notification job immediately.

Usage:
    python manage.py run_job reminders
    python manage.py run_job escalations --json
"""
import json

from django.core.management.base import BaseCommand, CommandError

from apps.notifications.scheduler import JOBS, JobScheduler


class Command(BaseCommand):
    help = 'Run a notification job now and print its summary'

    def add_arguments(self, parser):
        parser.add_argument('job_name', choices=list(JOBS))
        parser.add_argument(
            '--json',
            action='store_true',
            help='Print the summary as JSON instead of text',
        )

    def handle(self, *args, **options):
        summary = JobScheduler().trigger(options['job_name'])

        if options['json']:
            self.stdout.write(json.dumps(summary.as_dict(), indent=2))
        else:
            self.stdout.write(summary.describe())

        if not summary.success:
            raise CommandError(summary.message or f"Job '{summary.job_name}' failed")
