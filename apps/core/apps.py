from django.apps import AppConfig


class CoreConfig(AppConfig):
    """
    Configuration for Core application

    This app contains:
        - Branch model (intake points with public landing pages)
        - Setting model (generic key-value JSON store)
        - Branding upload and the landing page views
        - JSON helpers shared by every API view
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'
