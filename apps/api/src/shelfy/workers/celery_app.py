import logging

from celery import Celery
from celery.signals import after_setup_logger

from shelfy.core.config import settings
from shelfy.core.logging import LOG_FORMAT

celery_app = Celery(
    "shelfy",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.autodiscover_tasks(["shelfy.workers"])

celery_app.conf.timezone = "UTC"
celery_app.conf.task_default_queue = "notifications"


@after_setup_logger.connect
def _configure_worker_logging(logger, **kwargs):
    logger.setLevel(settings.LOG_LEVEL.upper())
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
