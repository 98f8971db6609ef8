from django.apps import AppConfig


class CustomersConfig(AppConfig):
    """
    Customers app

    Signals registered in ready():
    - pre_save/post_save on Customer -> CustomerHistory rows for tracked fields
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.customers'
    verbose_name = 'Customers'

    def ready(self):
        import apps.customers.signals  # noqa: F401
