"""
Management command to set up Django-Q2 schedules for notification jobs.

This command creates/updates the scheduled tasks for:
- Task reminders (REMINDER_JOB_CRON)
- Volunteer status derivation (STATUS_JOB_CRON)
- Overdue escalations (ESCALATION_JOB_CRON)

Usage:
    python manage.py setup_schedules

The command is idempotent - safe to run multiple times.
Existing schedules are reset to the cron expressions in settings.
"""
from django.core.management.base import BaseCommand, CommandError

from apps.notifications.scheduler import JobScheduler, SchedulerError


class Command(BaseCommand):
    help = 'Set up Django-Q2 schedules for notification jobs'

    def handle(self, *args, **options):
        self.stdout.write('\nSetting up Django-Q2 schedules...\n')

        try:
            results = JobScheduler().ensure_schedules()
        except SchedulerError as exc:
            raise CommandError(str(exc))

        schedules_created = 0
        schedules_updated = 0
        for job_name, cron, created in results:
            if created:
                schedules_created += 1
                self.stdout.write(self.style.SUCCESS(f'✓ Created schedule: {job_name} ({cron})'))
            else:
                schedules_updated += 1
                self.stdout.write(self.style.WARNING(f'↻ Updated schedule: {job_name} ({cron})'))

        self.stdout.write('')
        self.stdout.write(
            self.style.SUCCESS(
                f'Done! {schedules_created} schedule(s) created, '
                f'{schedules_updated} schedule(s) updated.'
            )
        )
        self.stdout.write('')
        self.stdout.write(
            self.style.NOTICE(
                'Note: Ensure Django-Q cluster is running: python manage.py qcluster'
            )
        )
        self.stdout.write('')
