"""
Service layer for notifications app.

Builds template parameters for the two notification kinds and hands
them to a message client (see dispatcher.py):
- send_task_reminder: reminder to a volunteer about an assigned task
- send_overdue_alert: escalation to an administrator about an overdue task
"""

from django.conf import settings


def reminder_params(task, volunteer):
    """Template parameters for a task reminder."""
    return {
        'VOLUNTEER_NAME': volunteer.full_name,
        'TASK_TITLE': task.title,
        'DUE_DATE': task.due_date_display,
        'TASK_ID': str(task.pk),
        'VOLUNTEER_ID': str(volunteer.pk),
    }


def overdue_alert_params(task, volunteer_names):
    """Template parameters for an overdue task alert."""
    return {
        'TASK_TITLE': task.title,
        'TASK_ID': str(task.pk),
        'DUE_DATE': task.due_date_display,
        'VOLUNTEERS': ', '.join(volunteer_names),
    }


def send_task_reminder(client, task, volunteer, template_id=None):
    """
    Send a reminder to one volunteer.

    Args:
        client: Message client (send(address, template_id, params))
        task: Task instance
        volunteer: Volunteer instance with an email address
        template_id: Provider template (defaults to REMINDER_TEMPLATE_ID)

    Returns:
        str: Provider message id

    Raises:
        DispatchError: If the provider rejects or cannot accept the message
    """
    return client.send(
        volunteer.email,
        template_id or settings.REMINDER_TEMPLATE_ID,
        reminder_params(task, volunteer),
    )


def send_overdue_alert(client, admin_email, task, volunteer_names, template_id=None):
    """
    Send an overdue task alert to one administrator.

    Returns:
        str: Provider message id

    Raises:
        DispatchError: If the provider rejects or cannot accept the message
    """
    return client.send(
        admin_email,
        template_id or settings.ESCALATION_TEMPLATE_ID,
        overdue_alert_params(task, volunteer_names),
    )


def get_admin_alert_emails():
    """
    Administrator addresses for overdue alerts.

    ADMIN_ALERT_EMAILS (comma separated) wins; ADMIN_EMAIL is the
    single-address fallback.
    """
    emails = [email.strip() for email in settings.ADMIN_ALERT_EMAILS if email and email.strip()]
    if emails:
        return list(dict.fromkeys(emails))
    single = (settings.ADMIN_EMAIL or '').strip()
    return [single] if single else []
