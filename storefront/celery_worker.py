# storefront/celery_worker.py
from celery import Celery
from celery.signals import setup_logging

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND
from storefront.utils.logging import configure_logging

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly for the worker to register them
celery_app.conf.imports = (
    "storefront.tasks.compensation",
    "storefront.services.notification_service",
)

celery_app.conf.timezone = "UTC"
celery_app.conf.task_acks_late = True


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    configure_logging()
