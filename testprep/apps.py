from django.apps import AppConfig


class TestprepConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'testprep'
    verbose_name = 'IELTS Test-Prep'

    def ready(self):
        # Registers the UserProfile post_save receivers
        from . import models  # noqa: F401
