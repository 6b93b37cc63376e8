"""Celery application for background housekeeping.

Run a worker with beat:
  celery -A family_auth.tasks.celery_app worker -B --loglevel=info
"""
from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from family_auth.core.config import settings
from family_auth.core.logger import setup_logging

celery_app = Celery(
    "family_auth",
    broker=settings.CELERY_BROKER_URL,
    include=["family_auth.tasks.session_tasks"],
)

celery_app.conf.beat_schedule = {
    "purge-expired-refresh-tokens": {
        "task": "family_auth.tasks.session_tasks.purge_expired_refresh_tokens",
        "schedule": 60 * 60,
    },
}


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    setup_logging()
