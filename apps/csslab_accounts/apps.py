from django.apps import AppConfig


class CsslabAccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.csslab_accounts"
    verbose_name = "CSS Lab Accounts"
