from django.apps import AppConfig


class VolunteersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.volunteers'
    label = 'volunteers'
    verbose_name = 'Volunteers'
