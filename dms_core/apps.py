# dms_core/apps.py

from django.apps import AppConfig


class DmsCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dms_core"
    verbose_name = "Dealer management"
