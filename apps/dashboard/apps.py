from django.apps import AppConfig


class DashboardConfig(AppConfig):
    """
    Dashboard app

    No models: layouts and presets are JSON blobs in core.Setting,
    read and written through dashboard.store.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.dashboard'
    verbose_name = 'Dashboard'
