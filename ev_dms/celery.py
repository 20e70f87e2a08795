# ev_dms/celery.py
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ev_dms.settings")

app = Celery("ev_dms")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
