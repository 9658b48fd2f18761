from django.apps import AppConfig


class AppointmentConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'appointment'

    def ready(self):  # pragma: no cover - import side-effects
        from . import signals  # noqa: F401
