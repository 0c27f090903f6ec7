"""
Views for notifications app.

JSON endpoints for external cron callers and operators:
- Trigger a job manually
- Job status (one or all)
- Reschedule a job

All endpoints require the shared CRON_SECRET.
"""

import json
from functools import wraps

from django.conf import settings
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .scheduler import InvalidScheduleError, JobScheduler, UnknownJobError


def cron_secret_required(view_func):
    """Decorator to require the shared cron secret (header or ?secret=)."""
    @wraps(view_func)
    def wrapped(request, *args, **kwargs):
        expected = settings.CRON_SECRET
        if not expected:
            return JsonResponse({'error': 'CRON_SECRET is not configured'}, status=500)

        provided = request.headers.get('X-Cron-Secret') or request.GET.get('secret', '')
        if not provided or not constant_time_compare(provided, expected):
            return JsonResponse({'error': 'Unauthorized'}, status=401)

        return view_func(request, *args, **kwargs)
    return wrapped


@csrf_exempt
@require_POST
@cron_secret_required
def trigger_job(request, job_name):
    """
    Run a job now and return its summary.
    200 when the run succeeded, 500 otherwise.
    """
    try:
        summary = JobScheduler().trigger(job_name)
    except UnknownJobError as exc:
        return JsonResponse({'error': str(exc)}, status=404)

    return JsonResponse(summary.as_dict(), status=200 if summary.success else 500)


@require_GET
@cron_secret_required
def job_status_list(request):
    return JsonResponse({'jobs': JobScheduler().status_all()})


@require_GET
@cron_secret_required
def job_status(request, job_name):
    try:
        status = JobScheduler().status(job_name)
    except UnknownJobError as exc:
        return JsonResponse({'error': str(exc)}, status=404)
    return JsonResponse(status)


@csrf_exempt
@require_POST
@cron_secret_required
def reschedule_job(request, job_name):
    """
    Change a job's cron expression.
    Body: {"schedule": "<cron>"}
    """
    try:
        payload = json.loads(request.body or b'{}')
    except ValueError:
        return JsonResponse({'error': 'Request body must be JSON'}, status=400)

    expression = payload.get('schedule') if isinstance(payload, dict) else None
    if not expression or not isinstance(expression, str):
        return JsonResponse({'error': 'Missing "schedule" cron expression'}, status=400)

    try:
        status = JobScheduler().reschedule(job_name, expression)
    except UnknownJobError as exc:
        return JsonResponse({'error': str(exc)}, status=404)
    except InvalidScheduleError as exc:
        return JsonResponse({'error': str(exc)}, status=400)

    return JsonResponse(status)
