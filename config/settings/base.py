"""
Django base settings for volunteer_reminders project.
Shared settings between development, production and test.

Notification engine settings (cron cadences, provider credentials,
administrator addresses, worker pool size) live at the bottom.
"""

from pathlib import Path
from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-in-production')

# Application definition
DJANGO_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS = [
    'django_q',
]

LOCAL_APPS = [
    'apps.volunteers',
    'apps.tasks',
    'apps.notifications',
    'apps.activity_log',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# =============================================================================
# PASSWORD VALIDATION (admin accounts only)
# =============================================================================
AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
        'OPTIONS': {
            'min_length': 12,
        }
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]


# =============================================================================
# INTERNATIONALIZATION & TIMEZONE
# =============================================================================
LANGUAGE_CODE = 'en-us'

# Calendar days for the dedup ledgers are taken in this zone
TIME_ZONE = config('TIME_ZONE', default='UTC')

USE_I18N = True

USE_TZ = True


# =============================================================================
# STATIC FILES
# =============================================================================
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# DJANGO-Q2 SETTINGS (Background Jobs)
# =============================================================================
Q_CLUSTER = {
    'name': 'volunteer_reminders',
    'workers': config('Q_WORKERS', default=2, cast=int),
    'recycle': 500,
    'timeout': config('Q_TIMEOUT_SECONDS', default=300, cast=int),
    'retry': config('Q_RETRY_SECONDS', default=600, cast=int),
    'max_attempts': 1,
    'compress': True,
    'save_limit': 250,
    'queue_limit': 500,
    'cpu_affinity': 1,
    'label': 'Django Q2',
    'orm': 'default',
}


# =============================================================================
# NOTIFICATION ENGINE
# =============================================================================
# Cron cadences (UTC unless TIME_ZONE says otherwise)
REMINDER_JOB_CRON = config('REMINDER_JOB_CRON', default='50 11 * * *')
STATUS_JOB_CRON = config('STATUS_JOB_CRON', default='0 0 * * *')
ESCALATION_JOB_CRON = config('ESCALATION_JOB_CRON', default='0 9 * * *')

# Transactional message provider
MESSAGE_CLIENT = config(
    'MESSAGE_CLIENT',
    default='apps.notifications.dispatcher.ConsoleMessageClient'
)
BREVO_API_KEY = config('BREVO_API_KEY', default='')
BREVO_API_URL = config('BREVO_API_URL', default='https://api.brevo.com/v3')
REMINDER_TEMPLATE_ID = config('REMINDER_TEMPLATE_ID', default=1, cast=int)
ESCALATION_TEMPLATE_ID = config('ESCALATION_TEMPLATE_ID', default=2, cast=int)

# Bounded pool for outbound sends, sized to the provider's rate limit
DISPATCH_MAX_WORKERS = config('DISPATCH_MAX_WORKERS', default=4, cast=int)
DISPATCH_TIMEOUT_SECONDS = config('DISPATCH_TIMEOUT_SECONDS', default=10.0, cast=float)

# Administrators who receive overdue task alerts
ADMIN_ALERT_EMAILS = config('ADMIN_ALERT_EMAILS', default='', cast=Csv())
ADMIN_EMAIL = config('ADMIN_EMAIL', default='')

# Volunteer status derivation
VOLUNTEER_ACTIVITY_WINDOW_DAYS = config('VOLUNTEER_ACTIVITY_WINDOW_DAYS', default=7, cast=int)
VOLUNTEER_WINDOW_INCLUSIVE = config('VOLUNTEER_WINDOW_INCLUSIVE', default=True, cast=bool)

# Single-run guard per job. CacheRunRegistry needs a shared cache when
# the django-q cluster runs more than one worker process.
JOB_RUN_REGISTRY = config(
    'JOB_RUN_REGISTRY',
    default='apps.notifications.scheduler.CacheRunRegistry'
)
JOB_LOCK_TIMEOUT_SECONDS = config('JOB_LOCK_TIMEOUT_SECONDS', default=3600, cast=int)

# Shared secret for the /jobs/ endpoints
CRON_SECRET = config('CRON_SECRET', default='')


# =============================================================================
# DEFAULT PRIMARY KEY FIELD TYPE
# =============================================================================
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
