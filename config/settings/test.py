"""
Django test settings for volunteer_reminders project.

In-memory SQLite, local-memory cache and a deterministic notification
configuration so tests never reach the real message provider.
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'volunteer-reminders-test',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

MESSAGE_CLIENT = 'apps.notifications.dispatcher.ConsoleMessageClient'
BREVO_API_KEY = 'test-api-key'
ADMIN_ALERT_EMAILS = ['admin1@example.org', 'admin2@example.org']
ADMIN_EMAIL = ''
DISPATCH_MAX_WORKERS = 2
VOLUNTEER_ACTIVITY_WINDOW_DAYS = 7
VOLUNTEER_WINDOW_INCLUSIVE = True
JOB_RUN_REGISTRY = 'apps.notifications.scheduler.CacheRunRegistry'
CRON_SECRET = 'test-cron-secret'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'WARNING',
    },
}
